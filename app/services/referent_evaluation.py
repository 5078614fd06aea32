"""Referent counter-evaluation and closing of evaluations by the coach."""
import logging
from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.exceptions import AuthorizationError, StaleStateError, ValidationError
from app.models.evaluation import Evaluation, EvaluationStatus
from app.schemas.evaluation import (
    ReferentContextItem,
    ReferentContextOut,
    ReferentEvaluationEntry,
    SelfEvaluationEntry,
)
from app.services import audit
from app.services.access import coach_of, ensure_can_view, ensure_referent, load_evaluation
from app.services.evaluation_rules import coerce_entries, validate_entries
from app.services.objectives import stored_objectives
from app.utils.datetime import stamp_after, utc_now

logger = logging.getLogger("app.referent_evaluation")

REQUIRED_REFERENT_FIELDS = ("comment", "observed_achievements", "overall_performance")

_REFERENT_OPEN_STATUSES = {
    EvaluationStatus.submitted_self.value,
    EvaluationStatus.awaiting_referent.value,
    EvaluationStatus.evaluated_by_referent.value,
}


def _commit(db: Session, evaluation: Evaluation) -> Evaluation:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(evaluation)
    return evaluation


def submit_referent_evaluation(db: Session, actor_id: str, evaluation_id: str, entries: Iterable[Any]) -> Evaluation:
    """Record (or amend) the referent's evaluation of each objective."""
    evaluation = load_evaluation(db, evaluation_id)
    assignment = evaluation.objective_set.assignment
    ensure_referent(assignment, actor_id, "evaluate this collaborator")
    if evaluation.status not in _REFERENT_OPEN_STATUSES or evaluation.self_submitted_at is None:
        raise StaleStateError(
            f"Referent evaluation requires a submitted self-evaluation (status: {evaluation.status})"
        )

    objectives = stored_objectives(evaluation.objective_set)
    self_entries = evaluation.self_entries or []
    if len(self_entries) != len(objectives):
        raise ValidationError("Self-evaluation does not cover the current objective list")
    items = coerce_entries(entries, ReferentEvaluationEntry)
    validate_entries(objectives, items, REQUIRED_REFERENT_FIELDS)

    amended = evaluation.referent_entries is not None
    evaluation.referent_entries = [e.model_dump() for e in items]
    evaluation.referent_id = actor_id
    evaluation.referent_submitted_at = stamp_after(evaluation.referent_submitted_at)
    evaluation.status = EvaluationStatus.evaluated_by_referent.value
    evaluation.updated_at = utc_now()
    _commit(db, evaluation)

    logger.info(f"Referent evaluation recorded for evaluation {evaluation_id} (amended={amended})")
    audit.log_referent_evaluation_submit(actor_id, evaluation_id, amended)
    return evaluation


def referent_context(db: Session, actor_id: str, evaluation_id: str, is_admin: bool = False) -> ReferentContextOut:
    """Each objective side by side with the entries given for it."""
    evaluation = load_evaluation(db, evaluation_id)
    ensure_can_view(evaluation.objective_set.assignment, actor_id, is_admin)

    objectives = stored_objectives(evaluation.objective_set)
    self_entries = evaluation.self_entries or []
    referent_entries = evaluation.referent_entries or []
    items = []
    for index, objective in enumerate(objectives):
        self_entry = self_entries[index] if index < len(self_entries) else None
        referent_entry = referent_entries[index] if index < len(referent_entries) else None
        items.append(ReferentContextItem(
            index=index,
            objective=objective,
            self_entry=SelfEvaluationEntry(**self_entry) if self_entry else None,
            referent_entry=ReferentEvaluationEntry(**referent_entry) if referent_entry else None,
        ))
    return ReferentContextOut(evaluation_id=evaluation.id, status=evaluation.status, items=items)


def get_evaluation(db: Session, actor_id: str, evaluation_id: str, is_admin: bool = False) -> Evaluation:
    evaluation = load_evaluation(db, evaluation_id)
    ensure_can_view(evaluation.objective_set.assignment, actor_id, is_admin)
    return evaluation


def _close(db: Session, actor_id: str, evaluation_id: str, status: EvaluationStatus, is_admin: bool) -> Evaluation:
    evaluation = load_evaluation(db, evaluation_id)
    if not is_admin and coach_of(evaluation.objective_set.assignment) != actor_id:
        raise AuthorizationError("Only the collaborator's coach or an administrator can close an evaluation")
    if evaluation.status != EvaluationStatus.evaluated_by_referent.value:
        raise StaleStateError(
            f"Only referent-evaluated evaluations can be closed (status: {evaluation.status})"
        )
    evaluation.status = status.value
    evaluation.closed_by = actor_id
    evaluation.closed_at = utc_now()
    evaluation.updated_at = evaluation.closed_at
    _commit(db, evaluation)

    logger.info(f"Evaluation {evaluation_id} closed as {status.value}")
    audit.log_evaluation_close(actor_id, evaluation_id, status.value)
    return evaluation


def finalize_evaluation(db: Session, actor_id: str, evaluation_id: str, is_admin: bool = False) -> Evaluation:
    return _close(db, actor_id, evaluation_id, EvaluationStatus.finalized, is_admin)


def reject_evaluation(db: Session, actor_id: str, evaluation_id: str, is_admin: bool = False) -> Evaluation:
    return _close(db, actor_id, evaluation_id, EvaluationStatus.rejected, is_admin)
