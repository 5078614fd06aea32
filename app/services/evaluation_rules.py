"""Checks shared by the self and referent evaluation services."""
from typing import Any, Iterable, Sequence, Type

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.exceptions import ValidationError
from app.services.objectives import is_filled, objective_label

MIN_SCORE = 1
MAX_SCORE = 5


def coerce_entries(entries: Iterable[Any], entry_cls: Type[BaseModel]) -> list:
    raw = [e.model_dump() if hasattr(e, "model_dump") else e for e in entries]
    try:
        return TypeAdapter(list[entry_cls]).validate_python(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(f"Invalid evaluation entry at {location}: {first.get('msg')}")


def check_alignment(objectives: Sequence, entries: Sequence) -> None:
    """Entry ``i`` must evaluate objective ``i``."""
    if len(entries) != len(objectives):
        raise ValidationError(
            f"Expected {len(objectives)} evaluation entries, got {len(entries)}"
        )
    misplaced = [
        o.id for o, e in zip(objectives, entries) if e.objective_id != o.id
    ]
    if misplaced:
        raise ValidationError("Evaluation entries do not match the objective order", misplaced)


def check_scores(objectives: Sequence, entries: Sequence) -> None:
    out_of_range = [
        (o, e.score) for o, e in zip(objectives, entries)
        if not MIN_SCORE <= e.score <= MAX_SCORE
    ]
    if out_of_range:
        details = ", ".join(f"'{objective_label(o)}' ({score})" for o, score in out_of_range)
        raise ValidationError(
            f"Scores must be between {MIN_SCORE} and {MAX_SCORE}: {details}",
            [o.id for o, _ in out_of_range],
        )


def check_required(objectives: Sequence, entries: Sequence, required: Sequence[str]) -> None:
    blanks = []
    for objective, entry in zip(objectives, entries):
        missing = [name for name in required if not is_filled(getattr(entry, name))]
        if missing:
            blanks.append((objective, missing))
    if blanks:
        details = "; ".join(
            f"'{objective_label(o)}' (missing: {', '.join(missing)})" for o, missing in blanks
        )
        raise ValidationError(f"Incomplete evaluation: {details}", [o.id for o, _ in blanks])


def validate_entries(objectives: Sequence, entries: Sequence, required: Sequence[str] = ()) -> None:
    check_alignment(objectives, entries)
    check_scores(objectives, entries)
    if required:
        check_required(objectives, entries, required)
