"""In-app notifications and the emails that accompany them.

Notification delivery is fire-and-forget: a failure is logged and never
undoes the state change that triggered it.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.settings import settings
from app.exceptions import NotFoundError
from app.models.notification import Notification
from app.models.project import Project
from app.services import email as email_service

logger = logging.getLogger("app.notifications")

SELF_EVALUATION_DUE_TITLE = "Project finished - self-evaluation required"
SELF_EVALUATION_LINK = "/project-sheets"
REMINDER_KIND = "reminder"
REMINDER_PRIORITY = 2


def notify_self_evaluation_due(db: Session, project: Project, sender_id: Optional[str] = None) -> list[str]:
    """Ask every employee assigned to ``project`` to self-evaluate.

    Returns the ids of the employees notified.
    """
    employees = [a.employee for a in project.assignments if a.employee is not None]
    if not employees:
        return []

    try:
        for employee in employees:
            db.add(Notification(
                recipient_id=employee.id,
                sender_id=sender_id,
                title=SELF_EVALUATION_DUE_TITLE,
                message=(
                    f'The project "{project.title}" is finished. '
                    "Please complete the self-evaluation of your objectives."
                ),
                kind=REMINDER_KIND,
                priority=REMINDER_PRIORITY,
                link=SELF_EVALUATION_LINK,
                payload={
                    "project_id": project.id,
                    "project_title": project.title,
                    "action_type": "self_evaluation_required",
                },
            ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to store self-evaluation notifications for project {project.id}: {e}")
        return []

    action_url = f"{settings.app_url.rstrip('/')}{SELF_EVALUATION_LINK}"
    for employee in employees:
        try:
            html, plain = email_service.render_self_evaluation_due_email(employee.full_name, project.title, action_url)
            email_service.send_email(employee.email, SELF_EVALUATION_DUE_TITLE, html, plain)
        except Exception as e:
            logger.error(f"Self-evaluation email to {employee.email} failed: {e}")

    logger.info(f"Notified {len(employees)} employees that project {project.id} is finished")
    return [e.id for e in employees]


def list_notifications(db: Session, user_id: str, include_read: bool = False, limit: int = 100) -> list[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if not include_read:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).limit(limit).all()


def dismiss_notification(db: Session, user_id: str, notification_id: str) -> Notification:
    """Mark a single notification as read."""
    notif = db.query(Notification).filter_by(id=notification_id, recipient_id=user_id).first()
    if not notif:
        raise NotFoundError("Notification not found")
    if not notif.is_read:
        notif.is_read = True
        db.commit()
        db.refresh(notif)
    return notif
