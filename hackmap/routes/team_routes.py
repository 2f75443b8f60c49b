# hackmap/routes/team_routes.py
"""Teams: creation, discovery, invite codes, join flows and matchmaking.

Static paths (/matchmaking, /my-teams, /invite-info, /join) are declared before
/{team_id} so they are never captured as an id.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from hackmap.data_client.database import Database
from hackmap.data_client.models import Hackathon, Team, TeamMember, TeamRole, User
from hackmap.data_client.queries import (
    find_eligible_teams,
    get_team,
    get_team_by_invite_code,
    get_user_by_email,
    is_registered,
    join_request_exists,
    list_memberships,
    list_teams,
    to_candidate,
)
from hackmap.dependencies import get_current_user, get_database, get_mailer, get_session
from hackmap.email_client.mailer import Mailer
from hackmap.errors import Conflict, EmailDeliveryError, Forbidden, NotFound, ValidationFailed
from hackmap.matchmaking import recommend_teams
from hackmap.metrics import MATCHMAKING_LATENCY, MATCHMAKING_REQUESTS
from hackmap.notifications import (
    create_join_request_notification,
    create_team_invite_notification,
    create_team_update_notification,
)
from hackmap.schemas import JoinTeamRequest, MatchmakingResponse, TeamCreateRequest, TeamInviteRequest
from hackmap.utils import as_list_str, generate_invite_code, isoformat, utcnow

logger = logging.getLogger("hackmap.teams")

router = APIRouter(prefix="/api/teams", tags=["teams"])

_INVITE_CODE_ATTEMPTS = 10


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────
def _get_team_or_404(session: Session, team_id: str) -> Team:
    team = get_team(session, team_id)
    if team is None:
        raise NotFound("Team not found")
    return team


def _unique_invite_code(session: Session) -> str:
    for _ in range(_INVITE_CODE_ATTEMPTS):
        code = generate_invite_code()
        if session.query(Team.id).filter(Team.invite_code == code).first() is None:
            return code
    raise RuntimeError("Could not generate a unique invite code")


def _check_can_join(session: Session, team: Team, user: User, action: str) -> None:
    """Shared eligibility checks for join-by-code and join requests."""
    if utcnow() > team.hackathon.registration_deadline:
        raise ValidationFailed("Registration deadline has passed for this hackathon")
    if team.has_member(user.id):
        raise Conflict("You are already a member of this team")
    if team.is_full():
        raise ValidationFailed("Team is full")
    if not is_registered(session, user.id, team.hackathon_id):
        raise ValidationFailed(f"You must be registered for this hackathon to {action}")


# ─────────────────────────────────────────────────────────────
# Collection
# ─────────────────────────────────────────────────────────────
@router.get("")
def get_teams(
    hackathonId: Optional[str] = None,
    search: Optional[str] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return [t.to_dict() for t in list_teams(session, hackathon_id=hackathonId, search=search)]


@router.post("", status_code=201)
def create_team(
    req: TeamCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    hackathon = session.get(Hackathon, req.hackathon_id)
    if hackathon is None:
        raise NotFound("Hackathon not found")

    team = Team(
        name=req.name.strip(),
        description=req.description,
        hackathon_id=hackathon.id,
        leader_id=user.id,
        invite_code=_unique_invite_code(session),
    )
    team.members.append(TeamMember(user_id=user.id, role=TeamRole.LEADER))
    session.add(team)
    session.commit()
    logger.info("Team %s created for hackathon %s by %s", team.id, hackathon.id, user.id)

    session.expire_all()
    return _get_team_or_404(session, team.id).to_dict()


# ─────────────────────────────────────────────────────────────
# Matchmaking
# ─────────────────────────────────────────────────────────────
@router.get("/matchmaking")
def matchmaking(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    database: Database = Depends(get_database),
):
    """
    Recommend open teams for the caller based on their profile skills.
    """
    with MATCHMAKING_LATENCY.time():
        user_skills = as_list_str(user.skills)
        if not user_skills:
            MATCHMAKING_REQUESTS.labels(outcome="no_skills").inc()
            result = recommend_teams(user_skills, [])
        else:
            try:
                teams = database.with_retry(
                    lambda: find_eligible_teams(session, user.id, utcnow()),
                    session=session,
                )
                result = recommend_teams(user_skills, [to_candidate(t) for t in teams])
            except Exception:
                MATCHMAKING_REQUESTS.labels(outcome="failure").inc()
                raise
            MATCHMAKING_REQUESTS.labels(outcome="success").inc()

    logger.info("Matchmaking for %s: %s", user.id, result.message)
    response = MatchmakingResponse.model_validate(result.to_dict())
    return response.model_dump(by_alias=True, exclude_unset=True)


# ─────────────────────────────────────────────────────────────
# Membership
# ─────────────────────────────────────────────────────────────
@router.get("/my-teams")
def my_teams(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    out = []
    for membership in list_memberships(session, user.id):
        team = membership.team
        out.append(
            {
                "id": team.id,
                "name": team.name,
                "description": team.description,
                "inviteCode": team.invite_code,
                "leaderId": team.leader_id,
                "createdAt": isoformat(team.created_at),
                "hackathon": {
                    "id": team.hackathon.id,
                    "title": team.hackathon.title,
                    "startDate": isoformat(team.hackathon.start_date),
                    "endDate": isoformat(team.hackathon.end_date),
                },
                "members": [m.to_dict() for m in team.members],
                "role": membership.role.value,
            }
        )
    return out


@router.get("/invite-info")
def invite_info(
    code: Optional[str] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    code = (code or "").strip()
    if not code:
        raise ValidationFailed("Invite code is required")

    team = get_team_by_invite_code(session, code)
    if team is None:
        raise NotFound("Invalid invite code")
    if team.is_full():
        raise ValidationFailed("Team is full")
    if team.has_member(user.id):
        raise Conflict("You are already a member of this team")

    data = team.to_dict()
    data.pop("inviteCode", None)
    data["hackathon"] = {
        "title": team.hackathon.title,
        "theme": team.hackathon.theme,
        "startDate": isoformat(team.hackathon.start_date),
        "maxTeamSize": team.hackathon.max_team_size,
    }
    return data


def _join_by_code(session: Session, user: User, code: str) -> Tuple[Team, Optional[User], Dict[str, Any]]:
    team = get_team_by_invite_code(session, code)
    if team is None:
        raise NotFound("Invalid invite code")
    _check_can_join(session, team, user, "join the team")

    member = TeamMember(team_id=team.id, user_id=user.id, role=TeamRole.MEMBER)
    session.add(member)
    create_team_update_notification(
        session,
        team.leader_id,
        "New Team Member",
        f'{user.display_name} has joined your team "{team.name}"',
        actor_id=user.id,
        team_id=team.id,
    )
    session.commit()
    logger.info("User %s joined team %s", user.id, team.id)

    data: Dict[str, Any] = member.to_dict()
    data["team"] = {
        "id": team.id,
        "name": team.name,
        "hackathon": {"id": team.hackathon.id, "title": team.hackathon.title},
    }
    return team, team.leader, data


@router.post("/join", status_code=201)
async def join_team(
    req: JoinTeamRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
):
    code = (req.invite_code or "").strip()
    if not code:
        raise ValidationFailed("Invite code is required")

    team, leader, data = await run_in_threadpool(_join_by_code, session, user, code)

    if leader is not None:
        try:
            await mailer.send_team_update_email(
                recipient=leader,
                team_id=team.id,
                team_name=team.name,
                hackathon_title=team.hackathon.title,
                update_type="New Team Member",
                message=f"{user.display_name} has joined the team.",
            )
        except EmailDeliveryError as exc:
            logger.warning("Team update email to leader of %s failed: %s", team.id, exc)

    return data


# ─────────────────────────────────────────────────────────────
# Single team
# ─────────────────────────────────────────────────────────────
@router.get("/{team_id}")
def get_team_detail(
    team_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    team = _get_team_or_404(session, team_id)
    data = team.to_dict()
    data["leader"] = team.leader.summary() if team.leader else None
    data["projects"] = [{"id": p.id, "title": p.title} for p in team.projects]
    return data


def _load_invite(session: Session, user: User, team_id: str, email: str) -> Tuple[Team, Optional[User]]:
    team = _get_team_or_404(session, team_id)
    if team.leader_id != user.id:
        raise Forbidden("Only team leaders can send invites")
    if utcnow() > team.hackathon.registration_deadline:
        raise ValidationFailed("Registration deadline has passed for this hackathon")
    if team.is_full():
        raise ValidationFailed("Team is full")

    invitee = get_user_by_email(session, email)
    if invitee is not None and team.has_member(invitee.id):
        raise Conflict("User is already a team member")
    return team, invitee


def _record_invite(session: Session, team: Team, invitee: User, inviter: User) -> None:
    create_team_invite_notification(
        session,
        invitee.id,
        team.name,
        team.hackathon.title,
        inviter.display_name,
        actor_id=inviter.id,
        team_id=team.id,
    )
    session.commit()


@router.post("/{team_id}/invite")
async def invite_to_team(
    team_id: str,
    req: TeamInviteRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
):
    if not req.email:
        raise ValidationFailed("Email is required")
    email = str(req.email).lower()

    team, invitee = await run_in_threadpool(_load_invite, session, user, team_id, email)

    # EmailDeliveryError propagates: the invite *is* the email.
    await mailer.send_team_invite_email(
        recipient_email=email,
        team_name=team.name,
        hackathon_title=team.hackathon.title,
        invite_code=team.invite_code,
        inviter_name=user.display_name,
        recipient=invitee,
    )

    if invitee is not None:
        await run_in_threadpool(_record_invite, session, team, invitee, user)

    return {"success": True, "message": "Invitation sent successfully"}


def _record_join_request(session: Session, user: User, team_id: str) -> Tuple[Team, Optional[User], Dict[str, Any]]:
    team = _get_team_or_404(session, team_id)
    _check_can_join(session, team, user, "request to join the team")

    if join_request_exists(session, team.leader_id, user.id, team.id):
        raise Conflict("Join request already sent")

    notification = create_join_request_notification(
        session,
        team.leader_id,
        user.display_name,
        team.name,
        team.hackathon.title,
        actor_id=user.id,
        team_id=team.id,
    )
    session.commit()
    return team, team.leader, notification.to_dict()


@router.post("/{team_id}/join-request", status_code=201)
async def request_to_join(
    team_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
):
    team, leader, notification = await run_in_threadpool(_record_join_request, session, user, team_id)

    if leader is not None:
        try:
            await mailer.send_join_request_email(
                leader=leader,
                team_name=team.name,
                hackathon_title=team.hackathon.title,
                requester_name=user.display_name,
                requester_email=user.email,
            )
        except EmailDeliveryError as exc:
            logger.warning("Join request email to leader of %s failed: %s", team.id, exc)

    return {
        "success": True,
        "message": "Join request sent successfully",
        "notification": notification,
    }
