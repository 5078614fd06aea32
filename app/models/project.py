from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from datetime import datetime, UTC
import uuid

from app.db import Base


class ProjectStatus(enum.Enum):
    draft = "draft"
    in_progress = "in_progress"
    on_hold = "on_hold"
    finished = "finished"
    cancelled = "cancelled"


class Project(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    client_name = Column(String, nullable=True)
    status = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.in_progress)
    author_id = Column(String, ForeignKey("users.id"), nullable=True)
    referent_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    referent = relationship("User", foreign_keys=[referent_id])
    assignments = relationship("ProjectAssignment", back_populates="project")


class ProjectAssignment(Base):
    """Link between a project and one collaborating employee."""
    __tablename__ = "project_assignments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, ForeignKey("projects.id"), nullable=False, index=True)
    employee_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    role_on_project = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    project = relationship("Project", back_populates="assignments")
    employee = relationship("User", back_populates="assignments")
    objective_set = relationship("ObjectiveSet", back_populates="assignment", uselist=False)

    __table_args__ = (
        UniqueConstraint("project_id", "employee_id", name="uq_assignment_project_employee"),
    )

    @property
    def project_status(self) -> ProjectStatus:
        return self.project.status

    @property
    def referent_id(self):
        return self.project.referent_id
