# hackmap/notifications.py
"""In-app notification factories and read tracking.

Factories add a Notification to the session and flush it; committing is left to
the calling handler so the notification lands in the same transaction as the
change that caused it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from hackmap.data_client.models import Notification, NotificationType

logger = logging.getLogger("hackmap.notifications")

COMMENT_PREVIEW_LENGTH = 100


def create_notification(
    session: Session,
    user_id: str,
    type: NotificationType,
    title: str,
    message: str,
    actor_id: Optional[str] = None,
    team_id: Optional[str] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        read=False,
        actor_id=actor_id,
        team_id=team_id,
    )
    session.add(notification)
    session.flush()
    logger.debug("Notification %s queued for user %s", type.value, user_id)
    return notification


def create_team_invite_notification(
    session: Session,
    user_id: str,
    team_name: str,
    hackathon_title: str,
    inviter_name: str,
    actor_id: Optional[str] = None,
    team_id: Optional[str] = None,
) -> Notification:
    return create_notification(
        session,
        user_id,
        NotificationType.TEAM_INVITE,
        "Team Invitation Received",
        f"{inviter_name} has invited you to join '{team_name}' team for {hackathon_title}",
        actor_id=actor_id,
        team_id=team_id,
    )


def create_join_request_notification(
    session: Session,
    team_leader_id: str,
    requester_name: str,
    team_name: str,
    hackathon_title: str,
    actor_id: Optional[str] = None,
    team_id: Optional[str] = None,
) -> Notification:
    return create_notification(
        session,
        team_leader_id,
        NotificationType.JOIN_REQUEST,
        "Team Join Request",
        f'{requester_name} wants to join your team "{team_name}" for {hackathon_title}',
        actor_id=actor_id,
        team_id=team_id,
    )


def create_deadline_reminder_notification(
    session: Session,
    user_id: str,
    hackathon_title: str,
    deadline_type: str,
    days_left: int,
) -> Notification:
    plural = "" if days_left == 1 else "s"
    return create_notification(
        session,
        user_id,
        NotificationType.DEADLINE_REMINDER,
        f"{deadline_type} Deadline Approaching",
        f"Only {days_left} day{plural} left for {deadline_type.lower()} in {hackathon_title}. Don't miss out!",
    )


def create_team_update_notification(
    session: Session,
    user_id: str,
    title: str,
    message: str,
    actor_id: Optional[str] = None,
    team_id: Optional[str] = None,
) -> Notification:
    return create_notification(
        session,
        user_id,
        NotificationType.TEAM_UPDATE,
        title,
        message,
        actor_id=actor_id,
        team_id=team_id,
    )


def comment_preview(content: str, length: int = COMMENT_PREVIEW_LENGTH) -> str:
    if len(content) > length:
        return content[:length] + "..."
    return content


def create_project_comment_notification(
    session: Session,
    project_owner_id: str,
    commenter_name: str,
    project_title: str,
    comment: str,
    actor_id: Optional[str] = None,
) -> Notification:
    return create_notification(
        session,
        project_owner_id,
        NotificationType.PROJECT_COMMENT,
        "New Comment on Your Project",
        f"{commenter_name} commented on your project '{project_title}': {comment_preview(comment)}",
        actor_id=actor_id,
    )


def create_project_endorsement_notification(
    session: Session,
    project_owner_id: str,
    endorser_name: str,
    project_title: str,
    actor_id: Optional[str] = None,
) -> Notification:
    return create_notification(
        session,
        project_owner_id,
        NotificationType.PROJECT_ENDORSEMENT,
        "Project Endorsed",
        f"Your project '{project_title}' received an endorsement from {endorser_name}",
        actor_id=actor_id,
    )


# ----------------------------------------------------------------------
# Read tracking
# ----------------------------------------------------------------------
def get_unread_notification_count(session: Session, user_id: str) -> int:
    return (
        session.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .count()
    )


def mark_notifications_as_read(
    session: Session,
    user_id: str,
    notification_ids: Optional[List[str]] = None,
) -> int:
    """Mark the given notifications (or every unread one) as read; returns the count."""
    query = session.query(Notification).filter(Notification.user_id == user_id)
    if notification_ids is not None:
        query = query.filter(Notification.id.in_(notification_ids))
    else:
        query = query.filter(Notification.read.is_(False))
    return query.update({Notification.read: True}, synchronize_session="fetch")
