from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.notification import NotificationOut
from app.services.auth import get_current_user
from app.services.notifications import dismiss_notification, list_notifications

router = APIRouter()


@router.get("", response_model=list[NotificationOut])
def read_notifications(
    include_read: bool = Query(False, description="Also return dismissed notifications"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return the current user's notifications, newest first."""
    return list_notifications(db, current_user.id, include_read)


@router.post("/{notification_id}/dismiss", response_model=NotificationOut)
def dismiss(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return dismiss_notification(db, current_user.id, notification_id)
