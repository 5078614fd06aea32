from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.objective import CatalogObjectiveAdd, ObjectiveSetOut, ObjectiveSetSave
from app.services.auth import get_current_user, is_admin
from app.services.objectives import (
    add_catalog_objective_to_set,
    create_or_replace_objectives,
    get_objective_set,
    remove_objective_from_set,
)

router = APIRouter()


@router.get("/{assignment_id}/objectives", response_model=ObjectiveSetOut)
def read_objectives(
    assignment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_objective_set(db, current_user.id, assignment_id, is_admin(current_user))


@router.put("/{assignment_id}/objectives", response_model=ObjectiveSetOut)
def save_objectives(
    assignment_id: str,
    payload: ObjectiveSetSave,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace the assignment's objective list, as draft or as submitted."""
    return create_or_replace_objectives(
        db, current_user.id, assignment_id, payload.objectives, payload.as_draft
    )


@router.post("/{assignment_id}/objectives/catalog", response_model=ObjectiveSetOut)
def link_catalog_skill(
    assignment_id: str,
    payload: CatalogObjectiveAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return add_catalog_objective_to_set(db, current_user.id, assignment_id, payload.skill_id)


@router.delete("/{assignment_id}/objectives/{objective_id}", response_model=ObjectiveSetOut)
def delete_objective(
    assignment_id: str,
    objective_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return remove_objective_from_set(db, current_user.id, assignment_id, objective_id)
