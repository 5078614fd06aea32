"""Record lookups and id-based authorization shared by the lifecycle services.

The core never authenticates: callers pass the acting user's id (and whether
that user is an administrator) and access is decided by comparing ids.
"""
from sqlalchemy.orm import Session

from app.exceptions import AuthorizationError, NotFoundError
from app.models.evaluation import Evaluation
from app.models.objective_set import ObjectiveSet
from app.models.project import ProjectAssignment


def load_assignment(db: Session, assignment_id: str) -> ProjectAssignment:
    assignment = db.query(ProjectAssignment).filter_by(id=assignment_id).first()
    if not assignment:
        raise NotFoundError(f"Assignment {assignment_id} not found")
    return assignment


def load_objective_set(db: Session, objective_set_id: str) -> ObjectiveSet:
    objective_set = db.query(ObjectiveSet).filter_by(id=objective_set_id).first()
    if not objective_set:
        raise NotFoundError(f"Objective set {objective_set_id} not found")
    return objective_set


def load_evaluation(db: Session, evaluation_id: str) -> Evaluation:
    evaluation = db.query(Evaluation).filter_by(id=evaluation_id).first()
    if not evaluation:
        raise NotFoundError(f"Evaluation {evaluation_id} not found")
    return evaluation


def coach_of(assignment: ProjectAssignment):
    return assignment.employee.coach_id if assignment.employee else None


def ensure_employee(assignment: ProjectAssignment, actor_id: str, action: str):
    if assignment.employee_id != actor_id:
        raise AuthorizationError(f"Only the assigned employee can {action}")


def ensure_referent(assignment: ProjectAssignment, actor_id: str, action: str):
    if not assignment.referent_id or assignment.referent_id != actor_id:
        raise AuthorizationError(f"Only the project referent can {action}")


def ensure_can_view(assignment: ProjectAssignment, actor_id: str, is_admin: bool = False):
    """Employee, project referent, the employee's coach and admins may read."""
    if is_admin:
        return
    allowed = {assignment.employee_id, assignment.referent_id, coach_of(assignment)}
    allowed.discard(None)
    if actor_id not in allowed:
        raise AuthorizationError("You are not allowed to view this record")
