from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.project import ProjectFinishOut, ProjectOut
from app.services.auth import get_current_user, is_admin
from app.services.projects import finish_project

router = APIRouter()


@router.post("/{project_id}/finish", response_model=ProjectFinishOut)
def finish(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark the project finished and ask its team to self-evaluate."""
    project, notified = finish_project(db, current_user.id, project_id, is_admin(current_user))
    return ProjectFinishOut(
        project=ProjectOut.model_validate(project),
        notified_employee_ids=notified,
    )
