from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.evaluation import (
    EvaluationOut,
    ReferentContextOut,
    ReferentEvaluationSubmit,
    SelfEvaluationSubmit,
)
from app.services.auth import get_current_user, is_admin
from app.services.referent_evaluation import (
    finalize_evaluation,
    get_evaluation,
    referent_context,
    reject_evaluation,
    submit_referent_evaluation,
)
from app.services.self_evaluation import save_self_evaluation_draft, submit_self_evaluation

# Self-evaluation is addressed by objective set, everything after by evaluation id
self_evaluation_router = APIRouter()
router = APIRouter()


@self_evaluation_router.put("/{objective_set_id}/self-evaluation", response_model=EvaluationOut)
def submit_self(
    objective_set_id: str,
    payload: SelfEvaluationSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    evaluation = submit_self_evaluation(db, current_user.id, objective_set_id, payload.entries)
    return EvaluationOut.from_record(evaluation)


@self_evaluation_router.put("/{objective_set_id}/self-evaluation/draft", response_model=EvaluationOut)
def save_self_draft(
    objective_set_id: str,
    payload: SelfEvaluationSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    evaluation = save_self_evaluation_draft(db, current_user.id, objective_set_id, payload.entries)
    return EvaluationOut.from_record(evaluation)


@router.get("/{evaluation_id}", response_model=EvaluationOut)
def read_evaluation(
    evaluation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    evaluation = get_evaluation(db, current_user.id, evaluation_id, is_admin(current_user))
    return EvaluationOut.from_record(evaluation)


@router.get("/{evaluation_id}/referent-context", response_model=ReferentContextOut)
def read_referent_context(
    evaluation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Objectives paired with the employee's entries, for the referent form."""
    return referent_context(db, current_user.id, evaluation_id, is_admin(current_user))


@router.put("/{evaluation_id}/referent-evaluation", response_model=EvaluationOut)
def submit_referent(
    evaluation_id: str,
    payload: ReferentEvaluationSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    evaluation = submit_referent_evaluation(db, current_user.id, evaluation_id, payload.entries)
    return EvaluationOut.from_record(evaluation)


@router.post("/{evaluation_id}/finalize", response_model=EvaluationOut)
def finalize(
    evaluation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    evaluation = finalize_evaluation(db, current_user.id, evaluation_id, is_admin(current_user))
    return EvaluationOut.from_record(evaluation)


@router.post("/{evaluation_id}/reject", response_model=EvaluationOut)
def reject(
    evaluation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    evaluation = reject_evaluation(db, current_user.id, evaluation_id, is_admin(current_user))
    return EvaluationOut.from_record(evaluation)
