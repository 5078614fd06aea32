"""Import every model so ``Base.metadata`` knows all tables."""
from app.models.user import User, UserRole
from app.models.project import Project, ProjectAssignment, ProjectStatus
from app.models.skill import Skill
from app.models.objective_set import ObjectiveSet, ObjectiveSetStatus
from app.models.evaluation import Evaluation, EvaluationStatus
from app.models.notification import Notification

__all__ = [
    "User",
    "UserRole",
    "Project",
    "ProjectAssignment",
    "ProjectStatus",
    "Skill",
    "ObjectiveSet",
    "ObjectiveSetStatus",
    "Evaluation",
    "EvaluationStatus",
    "Notification",
]
