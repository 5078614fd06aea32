from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.coaching import CoachingSummary, CoachingViewRow, EmployeeRollup
from app.services.auth import get_current_user, is_admin
from app.services.coaching import coaching_summary, employee_rollups, list_coaching_rows

router = APIRouter()


def _coach_id(current_user: User, coach_id: Optional[str]) -> str:
    # Admins may look at another coach's view; everyone else sees their own
    if coach_id and is_admin(current_user):
        return coach_id
    return current_user.id


@router.get("/rows", response_model=list[CoachingViewRow])
def coaching_rows(
    employee_id: Optional[str] = Query(None, description="Restrict to one coachee"),
    coach_id: Optional[str] = Query(None, description="Admin only: another coach's view"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_coaching_rows(db, _coach_id(current_user, coach_id), employee_id)


@router.get("/employees", response_model=list[EmployeeRollup])
def coaching_employees(
    coach_id: Optional[str] = Query(None, description="Admin only: another coach's view"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Per-coachee averages and latest submission."""
    return employee_rollups(list_coaching_rows(db, _coach_id(current_user, coach_id)))


@router.get("/summary", response_model=CoachingSummary)
def coaching_overview(
    coach_id: Optional[str] = Query(None, description="Admin only: another coach's view"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return coaching_summary(list_coaching_rows(db, _coach_id(current_user, coach_id)))
