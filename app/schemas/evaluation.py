from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from app.models.evaluation import EvaluationStatus
from app.schemas.objective import Objective


# Scores are range-checked by the services so every bound violation surfaces
# as the same ValidationError, whichever layer the entries came through.
class SelfEvaluationEntry(BaseModel):
    objective_id: str
    score: int = 3
    comment: str = ""
    achievements: str = ""
    difficulties: str = ""
    learnings: str = ""
    next_steps: str = ""


class ReferentEvaluationEntry(BaseModel):
    objective_id: str
    score: int = 3
    comment: str = ""
    observed_achievements: str = ""
    areas_for_improvement: str = ""
    development_recommendations: str = ""
    overall_performance: str = ""


class SelfEvaluationSubmit(BaseModel):
    entries: list[SelfEvaluationEntry]


class ReferentEvaluationSubmit(BaseModel):
    entries: list[ReferentEvaluationEntry]


class SelfEvaluationOut(BaseModel):
    entries: list[SelfEvaluationEntry]
    submitted_at: Optional[datetime] = None


class ReferentEvaluationOut(BaseModel):
    entries: list[ReferentEvaluationEntry]
    submitted_at: Optional[datetime] = None
    referent_id: Optional[str] = None


class EvaluationOut(BaseModel):
    id: str
    objective_set_id: str
    status: EvaluationStatus
    self_evaluation: SelfEvaluationOut
    referent_evaluation: Optional[ReferentEvaluationOut] = None
    closed_by: Optional[str] = None
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, evaluation) -> "EvaluationOut":
        referent = None
        if evaluation.referent_entries is not None:
            referent = ReferentEvaluationOut(
                entries=evaluation.referent_entries,
                submitted_at=evaluation.referent_submitted_at,
                referent_id=evaluation.referent_id,
            )
        return cls(
            id=evaluation.id,
            objective_set_id=evaluation.objective_set_id,
            status=evaluation.status,
            self_evaluation=SelfEvaluationOut(
                entries=evaluation.self_entries or [],
                submitted_at=evaluation.self_submitted_at,
            ),
            referent_evaluation=referent,
            closed_by=evaluation.closed_by,
            closed_at=evaluation.closed_at,
            created_at=evaluation.created_at,
            updated_at=evaluation.updated_at,
        )


class ReferentContextItem(BaseModel):
    """One objective with the employee's own entry, shown to the referent for context."""
    index: int
    objective: Objective
    self_entry: Optional[SelfEvaluationEntry] = None
    referent_entry: Optional[ReferentEvaluationEntry] = None


class ReferentContextOut(BaseModel):
    evaluation_id: str
    status: EvaluationStatus
    items: list[ReferentContextItem]
