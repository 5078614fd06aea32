import logging

from sqlalchemy.orm import Session

from app.exceptions import AuthorizationError, NotFoundError, StaleStateError
from app.models.project import Project, ProjectStatus
from app.services import audit
from app.services.notifications import notify_self_evaluation_due
from app.utils.datetime import utc_now

logger = logging.getLogger("app.projects")


def load_project(db: Session, project_id: str) -> Project:
    project = db.query(Project).filter_by(id=project_id).first()
    if not project:
        raise NotFoundError(f"Project {project_id} not found")
    return project


def finish_project(db: Session, actor_id: str, project_id: str, is_admin: bool = False) -> tuple[Project, list[str]]:
    """Close an in-progress project and open self-evaluation for its team.

    Returns the project and the ids of the employees that were notified.
    """
    project = load_project(db, project_id)
    if not is_admin and actor_id not in {project.author_id, project.referent_id}:
        raise AuthorizationError("Only the project author, its referent or an administrator can finish it")
    if project.status != ProjectStatus.in_progress:
        raise StaleStateError(f"Only in-progress projects can be finished (status: {project.status.value})")

    project.status = ProjectStatus.finished
    project.updated_at = utc_now()
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(project)
    logger.info(f"Project {project_id} finished by {actor_id}")

    notified = notify_self_evaluation_due(db, project, sender_id=actor_id)
    audit.log_project_finish(actor_id, project_id, len(notified))
    return project, notified
