"""Objective set rules: per-type completeness, catalog linking and the save path.

An objective set is always written whole: the stored array is replaced and
every objective is stamped with the set status in the same commit.
"""
import logging
from typing import Any, Iterable, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import DuplicateSkillError, NotFoundError, StaleStateError, ValidationError
from app.models.evaluation import EvaluationStatus
from app.models.objective_set import ObjectiveSet, ObjectiveSetStatus
from app.models.project import ProjectAssignment, ProjectStatus
from app.models.skill import Skill
from app.schemas.objective import (
    CatalogLinkedObjective,
    ObjectiveStatus,
    ObjectiveType,
    objective_list_adapter,
)
from app.services import audit
from app.services.access import (
    ensure_can_view,
    ensure_employee,
    load_assignment,
)
from app.utils.datetime import utc_now

logger = logging.getLogger("app.objectives")

SMART_FIELDS = (
    "skill_description",
    "smart_statement",
    "specific",
    "measurable",
    "achievable",
    "relevant",
    "time_bound",
)
STATEMENT_FIELDS = ("skill_description", "statement")

# Every ObjectiveType must appear here
REQUIRED_FIELDS = {
    ObjectiveType.catalog_linked: SMART_FIELDS,
    ObjectiveType.smart_custom: SMART_FIELDS,
    ObjectiveType.formation: STATEMENT_FIELDS,
    ObjectiveType.freeform: STATEMENT_FIELDS,
}

# Once the employee has handed in a self-evaluation the objective list is frozen
_LOCKED_EVALUATION_STATUSES = {s.value for s in EvaluationStatus} - {EvaluationStatus.draft_self.value}


def is_filled(value: Any) -> bool:
    return bool(value is not None and str(value).strip())


def missing_fields(objective) -> list[str]:
    """Names of the required fields left empty for this objective's type."""
    try:
        required = REQUIRED_FIELDS[ObjectiveType(objective.type)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown objective type: {objective.type!r}")
    return [name for name in required if not is_filled(getattr(objective, name, None))]


def is_objective_complete(objective) -> bool:
    return not missing_fields(objective)


def objective_label(objective) -> str:
    return objective.skill_description.strip() or objective.id


def coerce_objectives(objectives: Iterable[Any]) -> list:
    """Validate raw dicts or models into the typed objective variants."""
    raw = [o.model_dump() if hasattr(o, "model_dump") else o for o in objectives]
    try:
        return objective_list_adapter.validate_python(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(f"Invalid objective at {location}: {first.get('msg')}")


def validate_objectives(objectives: Sequence, as_draft: bool) -> None:
    """Raise if the list cannot be saved with the requested status."""
    ids = [o.id for o in objectives]
    duplicated_ids = sorted({i for i in ids if ids.count(i) > 1})
    if duplicated_ids:
        raise ValidationError(f"Duplicate objective ids: {', '.join(duplicated_ids)}", duplicated_ids)

    seen_skills: set[str] = set()
    for objective in objectives:
        skill_id = getattr(objective, "skill_id", None)
        if skill_id is None:
            continue
        if skill_id in seen_skills:
            raise DuplicateSkillError(skill_id)
        seen_skills.add(skill_id)

    if as_draft:
        if not any(is_filled(o.skill_description) for o in objectives):
            raise ValidationError("Define at least one objective with a skill description before saving")
        return

    if not objectives:
        raise ValidationError("Define at least one objective before submitting")
    incomplete = [(o, missing_fields(o)) for o in objectives]
    incomplete = [(o, missing) for o, missing in incomplete if missing]
    if incomplete:
        details = "; ".join(
            f"'{objective_label(o)}' (missing: {', '.join(missing)})" for o, missing in incomplete
        )
        raise ValidationError(f"Incomplete objectives: {details}", [o.id for o, _ in incomplete])


def add_catalog_objective(objectives: list, skill: Skill) -> CatalogLinkedObjective:
    """Append a new SMART objective linked to a catalog skill."""
    if any(getattr(o, "skill_id", None) == skill.id for o in objectives):
        raise DuplicateSkillError(skill.id)
    objective = CatalogLinkedObjective(
        skill_id=skill.id,
        skill_description=skill.description,
        theme_name=skill.theme_name or "Undefined theme",
    )
    objectives.append(objective)
    return objective


def ensure_catalog_skills_exist(db: Session, objectives: Sequence) -> None:
    """Every ``skill_id`` in the list must be a skill of the catalog."""
    linked = [o for o in objectives if getattr(o, "skill_id", None) is not None]
    if not linked:
        return
    wanted = {o.skill_id for o in linked}
    known = {row.id for row in db.query(Skill.id).filter(Skill.id.in_(wanted))}
    unknown = [o for o in linked if o.skill_id not in known]
    if unknown:
        details = "; ".join(f"'{objective_label(o)}' (skill {o.skill_id})" for o in unknown)
        raise ValidationError(f"Unknown catalog skills: {details}", [o.id for o in unknown])


def remove_objective(objectives: Sequence, objective_id: str) -> list:
    """Return the list without ``objective_id``; absent ids are a no-op."""
    return [o for o in objectives if o.id != objective_id]


def _load_editable(db: Session, actor_id: str, assignment_id: str) -> ProjectAssignment:
    assignment = load_assignment(db, assignment_id)
    ensure_employee(assignment, actor_id, "edit these objectives")
    if assignment.project_status == ProjectStatus.cancelled:
        raise StaleStateError("Objectives cannot be changed on a cancelled project")
    objective_set = assignment.objective_set
    if objective_set is not None and objective_set.evaluation is not None:
        if objective_set.evaluation.status in _LOCKED_EVALUATION_STATUSES:
            raise StaleStateError("Objectives are locked once the self-evaluation has been submitted")
    return assignment


def _apply(objective_set: ObjectiveSet, objectives: Sequence, status: ObjectiveStatus) -> None:
    objective_set.objectives = [
        o.model_copy(update={"status": status}).model_dump(mode="json") for o in objectives
    ]
    objective_set.status = ObjectiveSetStatus(status.value).value
    objective_set.updated_at = utc_now()


def _write(db: Session, assignment: ProjectAssignment, objectives: Sequence, status: ObjectiveStatus) -> ObjectiveSet:
    objective_set = assignment.objective_set
    if objective_set is None:
        objective_set = ObjectiveSet(assignment_id=assignment.id)
        db.add(objective_set)
    _apply(objective_set, objectives, status)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent first save created the set; overwrite that row
        db.rollback()
        logger.warning(f"Concurrent objective set insert for assignment {assignment.id}; retrying as update")
        objective_set = db.query(ObjectiveSet).filter_by(assignment_id=assignment.id).one()
        if objective_set.evaluation is not None and objective_set.evaluation.status in _LOCKED_EVALUATION_STATUSES:
            raise StaleStateError("Objectives are locked once the self-evaluation has been submitted")
        _apply(objective_set, objectives, status)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    except Exception:
        db.rollback()
        raise
    db.refresh(objective_set)
    return objective_set


def create_or_replace_objectives(
    db: Session,
    actor_id: str,
    assignment_id: str,
    objectives: Iterable[Any],
    as_draft: bool,
) -> ObjectiveSet:
    """Save the full objective list of an assignment as draft or submitted."""
    assignment = _load_editable(db, actor_id, assignment_id)
    items = coerce_objectives(objectives)
    validate_objectives(items, as_draft)
    ensure_catalog_skills_exist(db, items)

    status = ObjectiveStatus.draft if as_draft else ObjectiveStatus.submitted
    objective_set = _write(db, assignment, items, status)
    logger.info(
        f"Saved {len(items)} objectives for assignment {assignment_id} status={status.value}"
    )
    audit.log_objectives_save(actor_id, objective_set.id, assignment_id, status.value, len(items))
    return objective_set


def stored_objectives(objective_set: ObjectiveSet | None) -> list:
    if objective_set is None:
        return []
    return coerce_objectives(objective_set.objectives or [])


def add_catalog_objective_to_set(db: Session, actor_id: str, assignment_id: str, skill_id: str) -> ObjectiveSet:
    """Link a catalog skill to the stored set; the set goes back to draft."""
    skill = db.query(Skill).filter_by(id=skill_id).first()
    if not skill:
        raise NotFoundError(f"Skill {skill_id} not found")
    assignment = _load_editable(db, actor_id, assignment_id)
    objectives = stored_objectives(assignment.objective_set)
    add_catalog_objective(objectives, skill)
    return create_or_replace_objectives(db, actor_id, assignment_id, objectives, as_draft=True)


def remove_objective_from_set(db: Session, actor_id: str, assignment_id: str, objective_id: str) -> ObjectiveSet:
    assignment = _load_editable(db, actor_id, assignment_id)
    objective_set = assignment.objective_set
    if objective_set is None:
        raise NotFoundError(f"No objectives defined for assignment {assignment_id}")
    remaining = remove_objective(stored_objectives(objective_set), objective_id)
    status = ObjectiveStatus(objective_set.status)
    if not remaining:
        status = ObjectiveStatus.draft
    objective_set = _write(db, assignment, remaining, status)
    audit.log_objectives_save(actor_id, objective_set.id, assignment_id, status.value, len(remaining))
    return objective_set


def get_objective_set(db: Session, actor_id: str, assignment_id: str, is_admin: bool = False) -> ObjectiveSet:
    assignment = load_assignment(db, assignment_id)
    ensure_can_view(assignment, actor_id, is_admin)
    if assignment.objective_set is None:
        raise NotFoundError(f"No objectives defined for assignment {assignment_id}")
    return assignment.objective_set
