# hackmap/routes/profile_routes.py
"""Caller profile, personal stats and notification settings."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hackmap.data_client.models import (
    HackathonRegistration,
    Project,
    ProjectEndorsement,
    Team,
    TeamMember,
    User,
)
from hackmap.dependencies import get_current_user, get_session
from hackmap.schemas import NotificationSettingsRequest, ProfileUpdateRequest

logger = logging.getLogger("hackmap.profile")

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
def get_profile(user: User = Depends(get_current_user)):
    return user.to_dict()


@router.put("")
def update_profile(
    req: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    # Empty strings leave the stored value untouched
    if req.name:
        user.name = req.name.strip()
    if req.bio:
        user.bio = req.bio
    if req.skills is not None:
        user.skills = req.skills
    session.commit()
    logger.info("Profile updated for %s", user.id)
    return user.to_dict()


@router.get("/stats")
def get_profile_stats(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    my_team_ids = select(TeamMember.team_id).where(TeamMember.user_id == user.id)

    hackathons_joined = (
        session.query(func.count(HackathonRegistration.id))
        .filter(HackathonRegistration.user_id == user.id)
        .scalar()
    )
    teams_led = session.query(func.count(Team.id)).filter(Team.leader_id == user.id).scalar()
    projects_created = (
        session.query(func.count(Project.id)).filter(Project.team_id.in_(my_team_ids)).scalar()
    )
    endorsements = (
        session.query(func.count(ProjectEndorsement.id))
        .join(Project, Project.id == ProjectEndorsement.project_id)
        .filter(Project.team_id.in_(my_team_ids))
        .scalar()
    )

    return [
        {"label": "Hackathons Joined", "value": str(hackathons_joined or 0), "icon": "Calendar"},
        {"label": "Teams Formed", "value": str(teams_led or 0), "icon": "Users"},
        {"label": "Projects Created", "value": str(projects_created or 0), "icon": "Code"},
        {"label": "Project Endorsements", "value": str(endorsements or 0), "icon": "Trophy"},
    ]


@router.get("/notifications")
def get_notification_settings(user: User = Depends(get_current_user)):
    return {
        "emailNotifications": bool(user.email_notifications),
        "preferences": user.preferences(),
    }


@router.put("/notifications")
def update_notification_settings(
    req: NotificationSettingsRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if req.email_notifications is not None:
        user.email_notifications = req.email_notifications
    if req.preferences is not None:
        user.notification_preferences = req.preferences.model_dump(by_alias=True)
    session.commit()
    return {
        "success": True,
        "emailNotifications": bool(user.email_notifications),
        "preferences": user.preferences(),
    }
