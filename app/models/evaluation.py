from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import enum
import uuid

from app.db import Base


class EvaluationStatus(str, enum.Enum):
    draft_self = "draft_self"
    submitted_self = "submitted_self"
    awaiting_referent = "awaiting_referent"
    evaluated_by_referent = "evaluated_by_referent"
    finalized = "finalized"
    rejected = "rejected"


# Progression order; rejected sits outside it
STATUS_ORDER = {
    EvaluationStatus.draft_self: 0,
    EvaluationStatus.submitted_self: 1,
    EvaluationStatus.awaiting_referent: 2,
    EvaluationStatus.evaluated_by_referent: 3,
    EvaluationStatus.finalized: 4,
}


def status_at_least(status: str, floor: EvaluationStatus) -> bool:
    rank = STATUS_ORDER.get(EvaluationStatus(status))
    return rank is not None and rank >= STATUS_ORDER[floor]


class Evaluation(Base):
    __tablename__ = "evaluations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    # One evaluation per objective set; the unique constraint backs the upsert
    objective_set_id = Column(String, ForeignKey("objective_sets.id"), nullable=False, unique=True)
    status = Column(String, nullable=False, default=EvaluationStatus.draft_self.value, index=True)

    self_entries = Column(JSON, nullable=False, default=list)
    self_submitted_at = Column(DateTime(timezone=True), nullable=True)
    referent_entries = Column(JSON, nullable=True)
    referent_submitted_at = Column(DateTime(timezone=True), nullable=True)
    referent_id = Column(String, ForeignKey("users.id"), nullable=True)

    closed_by = Column(String, ForeignKey("users.id"), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    objective_set = relationship("ObjectiveSet", back_populates="evaluation")
