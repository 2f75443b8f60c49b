# hackmap/routes/notification_routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hackmap.data_client.models import Notification, User
from hackmap.dependencies import get_current_user, get_session
from hackmap.errors import NotFound
from hackmap.notifications import create_notification, mark_notifications_as_read
from hackmap.schemas import NotificationCreateRequest

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
def get_notifications(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    notifications = (
        session.query(Notification)
        .filter(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id)
        .all()
    )
    return {
        "notifications": [n.to_dict() for n in notifications],
        "unreadCount": sum(1 for n in notifications if not n.read),
    }


@router.post("")
def post_notification(
    req: NotificationCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    notification = create_notification(session, user.id, req.type, req.title, req.message)
    session.commit()
    return {"notification": notification.to_dict()}


@router.post("/mark-all-read")
def mark_all_read(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    updated = mark_notifications_as_read(session, user.id)
    session.commit()
    return {"success": True, "updatedCount": updated}


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    notification = (
        session.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if notification is None:
        raise NotFound("Notification not found")

    notification.read = True
    session.commit()
    return {"notification": notification.to_dict()}
