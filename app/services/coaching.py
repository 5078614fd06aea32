"""Coaching view: referent-evaluated results across a coach's coachees.

Scores are averaged per evaluation and rounded half-up to one decimal. The
final score is the referent's average.
"""
import logging
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session, joinedload

from app.core.settings import settings
from app.models.evaluation import Evaluation, EvaluationStatus, status_at_least
from app.models.objective_set import ObjectiveSet
from app.models.project import ProjectAssignment
from app.models.user import User
from app.schemas.coaching import CoachingSummary, CoachingViewRow, EmployeeRollup, GapClassification
from app.services import audit
from app.services.objectives import stored_objectives

logger = logging.getLogger("app.coaching")

COACHING_STATUSES = [
    s.value for s in EvaluationStatus if status_at_least(s, EvaluationStatus.evaluated_by_referent)
]

LARGE_GAP_TALKING_POINT = (
    "Discuss the gap between the self-evaluation and the referent's assessment "
    "to explore differing perceptions and expectations."
)
ALIGNED_TALKING_POINT = (
    "Acknowledge the aligned perceptions and use them to identify the next "
    "development steps."
)

_ONE_DECIMAL = Decimal("0.1")


def round1(value) -> Optional[float]:
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _score_of(entry) -> int:
    return entry["score"] if isinstance(entry, dict) else entry.score


def mean_score(entries: Sequence) -> Optional[float]:
    """Average score of the entries, None when there are none."""
    if not entries:
        return None
    total = sum(Decimal(_score_of(e)) for e in entries)
    return round1(total / len(entries))


def classify(self_score: Optional[float], referent_score: Optional[float],
             threshold: Optional[float] = None) -> GapClassification:
    if threshold is None:
        threshold = settings.coaching_gap_threshold
    if self_score is None or referent_score is None:
        return GapClassification.aligned
    gap = Decimal(str(self_score)) - Decimal(str(referent_score))
    limit = Decimal(str(threshold))
    if gap > limit:
        return GapClassification.over_evaluation
    if -gap > limit:
        return GapClassification.under_evaluation
    return GapClassification.aligned


def talking_point(classification: GapClassification) -> str:
    if classification == GapClassification.aligned:
        return ALIGNED_TALKING_POINT
    return LARGE_GAP_TALKING_POINT


def score_delta(self_score: Optional[float], referent_score: Optional[float]) -> Optional[float]:
    if self_score is None or referent_score is None:
        return None
    return round1(Decimal(str(referent_score)) - Decimal(str(self_score)))


def build_row(evaluation: Evaluation, coach_id: str) -> CoachingViewRow:
    assignment = evaluation.objective_set.assignment
    employee = assignment.employee
    project = assignment.project
    self_entries = evaluation.self_entries or []
    referent_entries = evaluation.referent_entries or []

    self_score = mean_score(self_entries)
    referent_score = mean_score(referent_entries)
    classification = classify(self_score, referent_score)
    return CoachingViewRow(
        evaluation_id=evaluation.id,
        evaluation_status=evaluation.status,
        coach_id=coach_id,
        employee_id=employee.id,
        employee_name=employee.full_name,
        employee_department=employee.department,
        project_id=project.id,
        project_title=project.title,
        client_name=project.client_name,
        project_status=project.status.value,
        referent_id=project.referent_id,
        referent_name=project.referent.full_name if project.referent else None,
        objectives=stored_objectives(evaluation.objective_set),
        self_evaluation=self_entries,
        referent_evaluation=referent_entries,
        submitted_at=evaluation.self_submitted_at,
        referent_submitted_at=evaluation.referent_submitted_at,
        self_score=self_score,
        referent_score=referent_score,
        final_score=referent_score,
        score_delta=score_delta(self_score, referent_score),
        classification=classification,
        talking_point=talking_point(classification),
    )


def list_coaching_rows(db: Session, coach_id: str, employee_id: Optional[str] = None) -> list[CoachingViewRow]:
    """Referent-evaluated evaluations of the coach's coachees, latest first."""
    query = (
        db.query(Evaluation)
        .join(ObjectiveSet, Evaluation.objective_set_id == ObjectiveSet.id)
        .join(ProjectAssignment, ObjectiveSet.assignment_id == ProjectAssignment.id)
        .join(User, ProjectAssignment.employee_id == User.id)
        .options(
            joinedload(Evaluation.objective_set)
            .joinedload(ObjectiveSet.assignment)
            .joinedload(ProjectAssignment.project)
        )
        .filter(User.coach_id == coach_id)
        .filter(Evaluation.status.in_(COACHING_STATUSES))
    )
    if employee_id:
        query = query.filter(ProjectAssignment.employee_id == employee_id)
    evaluations = query.order_by(Evaluation.referent_submitted_at.desc()).all()

    rows = [build_row(e, coach_id) for e in evaluations]
    logger.info(f"Coaching view for coach {coach_id}: {len(rows)} rows")
    audit.log_coaching_view(coach_id, len(rows), employee_id)
    return rows


def _average(scores: Iterable[Optional[float]]) -> Optional[float]:
    values = [Decimal(str(s)) for s in scores if s is not None]
    if not values:
        return None
    return round1(sum(values) / len(values))


def employee_rollups(rows: Sequence[CoachingViewRow]) -> list[EmployeeRollup]:
    grouped: "OrderedDict[str, list[CoachingViewRow]]" = OrderedDict()
    for row in rows:
        grouped.setdefault(row.employee_id, []).append(row)

    rollups = []
    for employee_id, employee_rows in grouped.items():
        dates = [r.submitted_at for r in employee_rows if r.submitted_at is not None]
        rollups.append(EmployeeRollup(
            employee_id=employee_id,
            employee_name=employee_rows[0].employee_name,
            employee_department=employee_rows[0].employee_department,
            evaluation_count=len(employee_rows),
            average_final_score=_average(r.final_score for r in employee_rows),
            last_submitted_at=max(dates) if dates else None,
        ))
    return rollups


def coaching_summary(rows: Sequence[CoachingViewRow]) -> CoachingSummary:
    return CoachingSummary(
        coachee_count=len({r.employee_id for r in rows}),
        evaluation_count=len(rows),
        average_final_score=_average(r.final_score for r in rows),
    )
