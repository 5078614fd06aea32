"""Employee self-evaluation of a submitted objective set.

Writes go through :func:`_upsert`, keyed by the objective set id, so a set
never ends up with two evaluation rows.
"""
import logging
from typing import Any, Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import StaleStateError
from app.models.evaluation import Evaluation, EvaluationStatus
from app.models.objective_set import ObjectiveSet, ObjectiveSetStatus
from app.models.project import ProjectStatus
from app.schemas.evaluation import SelfEvaluationEntry
from app.services import audit
from app.services.access import ensure_employee, load_objective_set
from app.services.evaluation_rules import coerce_entries, validate_entries
from app.services.objectives import stored_objectives
from app.utils.datetime import stamp_after, utc_now

logger = logging.getLogger("app.self_evaluation")

REQUIRED_SELF_FIELDS = ("comment", "achievements", "learnings")

_OPEN_STATUSES = {EvaluationStatus.draft_self.value, EvaluationStatus.submitted_self.value}


def _load_for_self_evaluation(db: Session, actor_id: str, objective_set_id: str) -> ObjectiveSet:
    objective_set = load_objective_set(db, objective_set_id)
    ensure_employee(objective_set.assignment, actor_id, "self-evaluate these objectives")
    if objective_set.assignment.project_status != ProjectStatus.finished:
        raise StaleStateError("Self-evaluation opens once the project is finished")
    if objective_set.status != ObjectiveSetStatus.submitted.value:
        raise StaleStateError("Objectives must be submitted before they can be self-evaluated")
    _ensure_open(objective_set.evaluation)
    return objective_set


def _ensure_open(evaluation: Evaluation | None) -> None:
    if evaluation is not None and evaluation.status not in _OPEN_STATUSES:
        raise StaleStateError(
            f"Self-evaluation can no longer be changed (status: {evaluation.status})"
        )


def _apply(evaluation: Evaluation, entries: list, status: EvaluationStatus) -> None:
    evaluation.self_entries = [e.model_dump() for e in entries]
    evaluation.status = status.value
    if status == EvaluationStatus.submitted_self:
        evaluation.self_submitted_at = stamp_after(evaluation.self_submitted_at)
    evaluation.updated_at = utc_now()


def _upsert(db: Session, objective_set: ObjectiveSet, entries: list, status: EvaluationStatus) -> tuple[Evaluation, bool]:
    evaluation = objective_set.evaluation
    created = evaluation is None
    if created:
        evaluation = Evaluation(objective_set_id=objective_set.id)
        db.add(evaluation)
    _apply(evaluation, entries, status)
    try:
        db.commit()
    except IntegrityError:
        # Another request inserted the row first; update that one instead
        db.rollback()
        logger.warning(f"Concurrent evaluation insert for objective set {objective_set.id}; retrying as update")
        evaluation = db.query(Evaluation).filter_by(objective_set_id=objective_set.id).one()
        _ensure_open(evaluation)
        _apply(evaluation, entries, status)
        created = False
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    except Exception:
        db.rollback()
        raise
    db.refresh(evaluation)
    return evaluation, created


def submit_self_evaluation(db: Session, actor_id: str, objective_set_id: str, entries: Iterable[Any]) -> Evaluation:
    """Record the employee's self-evaluation; resubmitting overwrites it."""
    objective_set = _load_for_self_evaluation(db, actor_id, objective_set_id)
    objectives = stored_objectives(objective_set)
    items = coerce_entries(entries, SelfEvaluationEntry)
    validate_entries(objectives, items, REQUIRED_SELF_FIELDS)

    evaluation, created = _upsert(db, objective_set, items, EvaluationStatus.submitted_self)
    logger.info(
        f"Self-evaluation submitted for objective set {objective_set_id} "
        f"(evaluation={evaluation.id}, created={created})"
    )
    audit.log_self_evaluation_submit(
        actor_id, evaluation.id, objective_set_id, evaluation.status, created
    )
    return evaluation


def save_self_evaluation_draft(db: Session, actor_id: str, objective_set_id: str, entries: Iterable[Any]) -> Evaluation:
    """Store partial entries without the narrative checks."""
    objective_set = _load_for_self_evaluation(db, actor_id, objective_set_id)
    evaluation = objective_set.evaluation
    if evaluation is not None and evaluation.status != EvaluationStatus.draft_self.value:
        raise StaleStateError("A submitted self-evaluation cannot go back to draft")
    objectives = stored_objectives(objective_set)
    items = coerce_entries(entries, SelfEvaluationEntry)
    validate_entries(objectives, items)

    evaluation, created = _upsert(db, objective_set, items, EvaluationStatus.draft_self)
    logger.info(f"Self-evaluation draft saved for objective set {objective_set_id}")
    audit.log_self_evaluation_submit(
        actor_id, evaluation.id, objective_set_id, evaluation.status, created
    )
    return evaluation
