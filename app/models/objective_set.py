from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import enum
import uuid

from app.db import Base


class ObjectiveSetStatus(str, enum.Enum):
    draft = "draft"
    submitted = "submitted"


class ObjectiveSet(Base):
    __tablename__ = "objective_sets"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    assignment_id = Column(String, ForeignKey("project_assignments.id"), nullable=False, unique=True)
    # Full ordered objective list; replaced wholesale on every save
    objectives = Column(JSON, nullable=False, default=list)
    # Stamped onto every objective as well
    status = Column(String, nullable=False, default=ObjectiveSetStatus.draft.value)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    assignment = relationship("ProjectAssignment", back_populates="objective_set")
    evaluation = relationship("Evaluation", back_populates="objective_set", uselist=False)
