"""In-memory editing session over one assignment's objectives.

Nothing is written until :meth:`ObjectiveEditor.save`; cancelling an edit is
just :meth:`ObjectiveEditor.discard`. :meth:`ObjectiveEditor.load` applies the
same read access as the objective set lookup; saving still requires the
assigned employee.
"""
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, ValidationError
from app.models.objective_set import ObjectiveSet
from app.models.skill import Skill
from app.schemas.objective import CUSTOM_OBJECTIVE_CLASSES, ObjectiveType
from app.services.access import ensure_can_view, load_assignment
from app.services.objectives import (
    add_catalog_objective,
    coerce_objectives,
    create_or_replace_objectives,
    remove_objective,
    stored_objectives,
)

# Fields the editor never lets a caller overwrite
_FROZEN_FIELDS = {"id", "type", "status", "skill_id"}


class ObjectiveEditor:
    def __init__(self, assignment_id: str, objectives: Optional[list] = None):
        self.assignment_id = assignment_id
        self.objectives = coerce_objectives(objectives or [])
        self._baseline = list(self.objectives)
        self.focused_id: Optional[str] = None

    @classmethod
    def load(cls, db: Session, actor_id: str, assignment_id: str, is_admin: bool = False) -> "ObjectiveEditor":
        assignment = load_assignment(db, assignment_id)
        ensure_can_view(assignment, actor_id, is_admin)
        return cls(assignment_id, stored_objectives(assignment.objective_set))

    @property
    def focused(self):
        return next((o for o in self.objectives if o.id == self.focused_id), None)

    def _index_of(self, objective_id: str) -> int:
        for index, objective in enumerate(self.objectives):
            if objective.id == objective_id:
                return index
        raise NotFoundError(f"Objective {objective_id} is not part of this set")

    def focus(self, objective_id: str):
        self._index_of(objective_id)
        self.focused_id = objective_id
        return self.focused

    def add_catalog_objective(self, skill: Skill):
        objective = add_catalog_objective(self.objectives, skill)
        self.focused_id = objective.id
        return objective

    def add_custom_objective(self, objective_type: str | ObjectiveType):
        objective_cls = CUSTOM_OBJECTIVE_CLASSES.get(ObjectiveType(objective_type))
        if objective_cls is None:
            raise ValidationError("Catalog-linked objectives are added from a catalog skill")
        objective = objective_cls()
        self.objectives.append(objective)
        self.focused_id = objective.id
        return objective

    def update_objective(self, objective_id: str, **changes: Any):
        index = self._index_of(objective_id)
        current = self.objectives[index]
        unknown = set(changes) - set(type(current).model_fields)
        if unknown or _FROZEN_FIELDS & set(changes):
            names = sorted(unknown | (_FROZEN_FIELDS & set(changes)))
            raise ValidationError(f"Cannot set {', '.join(names)} on a {current.type} objective")
        try:
            updated = type(current).model_validate({**current.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid objective update: {e.errors()[0].get('msg')}")
        self.objectives[index] = updated
        return updated

    def remove_objective(self, objective_id: str) -> None:
        self.objectives = remove_objective(self.objectives, objective_id)
        if self.focused_id == objective_id:
            self.focused_id = None

    def discard(self) -> None:
        self.objectives = list(self._baseline)
        self.focused_id = None

    def save(self, db: Session, actor_id: str, as_draft: bool = True) -> ObjectiveSet:
        objective_set = create_or_replace_objectives(
            db, actor_id, self.assignment_id, self.objectives, as_draft
        )
        self.objectives = stored_objectives(objective_set)
        self._baseline = list(self.objectives)
        self.focused_id = None
        return objective_set
