# hackmap/data_client/queries.py
"""Read helpers shared by the route modules.

Responsibilities:
- Load entities with the relationships their payloads need (no N+1 in loops)
- Eligibility query for matchmaking + mapping to scorer snapshots
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload, selectinload

from hackmap.data_client.models import (
    Hackathon,
    HackathonRegistration,
    Notification,
    NotificationType,
    Project,
    Team,
    TeamMember,
    User,
)
from hackmap.matchmaking import CandidateTeam
from hackmap.utils import as_list_str


def _team_options():
    return (
        joinedload(Team.hackathon),
        selectinload(Team.members).joinedload(TeamMember.user),
    )


# ----------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------
def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.query(User).filter(User.email == email).first()


def is_registered(session: Session, user_id: str, hackathon_id: str) -> bool:
    return (
        session.query(HackathonRegistration.id)
        .filter(
            HackathonRegistration.user_id == user_id,
            HackathonRegistration.hackathon_id == hackathon_id,
        )
        .first()
        is not None
    )


# ----------------------------------------------------------------------
# Teams
# ----------------------------------------------------------------------
def get_team(session: Session, team_id: str) -> Optional[Team]:
    return session.query(Team).options(*_team_options()).filter(Team.id == team_id).first()


def get_team_by_invite_code(session: Session, invite_code: str) -> Optional[Team]:
    return (
        session.query(Team)
        .options(*_team_options())
        .filter(Team.invite_code == invite_code)
        .first()
    )


def list_teams(session: Session, hackathon_id: Optional[str] = None, search: Optional[str] = None) -> List[Team]:
    query = session.query(Team).join(Team.hackathon).options(*_team_options())
    if hackathon_id:
        query = query.filter(Team.hackathon_id == hackathon_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Team.name.ilike(pattern),
                Team.description.ilike(pattern),
                Hackathon.title.ilike(pattern),
            )
        )
    return query.order_by(Team.created_at.desc(), Team.id).all()


def list_memberships(session: Session, user_id: str) -> List[TeamMember]:
    return (
        session.query(TeamMember)
        .options(
            joinedload(TeamMember.team).joinedload(Team.hackathon),
            joinedload(TeamMember.team).selectinload(Team.members).joinedload(TeamMember.user),
        )
        .filter(TeamMember.user_id == user_id)
        .order_by(TeamMember.joined_at.desc(), TeamMember.id.desc())
        .all()
    )


def has_team_in_hackathon(session: Session, user_id: str, hackathon_id: str) -> bool:
    return (
        session.query(TeamMember.id)
        .join(TeamMember.team)
        .filter(TeamMember.user_id == user_id, Team.hackathon_id == hackathon_id)
        .first()
        is not None
    )


def find_eligible_teams(session: Session, user_id: str, now: datetime) -> List[Team]:
    """
    Teams a user could join: registration still open and the user is not a
    member yet. Newest first. Capacity is left to the scorer.
    """
    my_teams = select(TeamMember.team_id).where(TeamMember.user_id == user_id)
    return (
        session.query(Team)
        .join(Team.hackathon)
        .options(*_team_options())
        .filter(Hackathon.registration_deadline > now)
        .filter(Team.id.notin_(my_teams))
        .order_by(Team.created_at.desc(), Team.id)
        .all()
    )


def to_candidate(team: Team) -> CandidateTeam:
    member_skills: List[str] = []
    for member in team.members:
        if member.user is not None:
            member_skills.extend(as_list_str(member.user.skills))
    return CandidateTeam(
        team_id=team.id,
        member_count=len(team.members),
        max_team_size=team.hackathon.max_team_size,
        registration_deadline=team.hackathon.registration_deadline,
        member_skills=member_skills,
        payload=team.to_dict(),
    )


# ----------------------------------------------------------------------
# Projects
# ----------------------------------------------------------------------
def _project_options():
    return (
        joinedload(Project.team).joinedload(Team.hackathon),
        joinedload(Project.team).selectinload(Team.members).joinedload(TeamMember.user),
        selectinload(Project.comments),
        selectinload(Project.endorsements),
    )


def list_projects(session: Session) -> List[Project]:
    return (
        session.query(Project)
        .options(*_project_options())
        .order_by(Project.created_at.desc(), Project.id)
        .all()
    )


def get_project(session: Session, project_id: str) -> Optional[Project]:
    return session.query(Project).options(*_project_options()).filter(Project.id == project_id).first()


# ----------------------------------------------------------------------
# Notifications
# ----------------------------------------------------------------------
def join_request_exists(session: Session, leader_id: str, requester_id: str, team_id: str) -> bool:
    return (
        session.query(Notification.id)
        .filter(
            Notification.user_id == leader_id,
            Notification.type == NotificationType.JOIN_REQUEST,
            Notification.actor_id == requester_id,
            Notification.team_id == team_id,
        )
        .first()
        is not None
    )


# ----------------------------------------------------------------------
# Hackathons
# ----------------------------------------------------------------------
def registration_counts(session: Session, hackathon_ids: List[str]) -> dict:
    if not hackathon_ids:
        return {}
    rows = (
        session.query(HackathonRegistration.hackathon_id, func.count(HackathonRegistration.id))
        .filter(HackathonRegistration.hackathon_id.in_(hackathon_ids))
        .group_by(HackathonRegistration.hackathon_id)
        .all()
    )
    return {hid: count for hid, count in rows}
