import itertools

import pytest

from app.schemas.objective import (
    CatalogLinkedObjective,
    FormationObjective,
    FreeformObjective,
    SmartCustomObjective,
)
from app.services.objectives import (
    REQUIRED_FIELDS,
    SMART_FIELDS,
    STATEMENT_FIELDS,
    is_objective_complete,
    missing_fields,
)


def _smart(cls, **extra):
    values = {name: f"{name} text" for name in SMART_FIELDS}
    values.update(extra)
    return cls(**values)


def _statement(cls):
    return cls(skill_description="Client communication", statement="Present monthly to the steering committee")


FULL_OBJECTIVES = [
    lambda: _smart(CatalogLinkedObjective, skill_id="skill-1"),
    lambda: _smart(SmartCustomObjective),
    lambda: _statement(FormationObjective),
    lambda: _statement(FreeformObjective),
]


def test_every_type_has_required_fields():
    assert {t.value for t in REQUIRED_FIELDS} == {
        "catalog_linked", "smart_custom", "formation", "freeform"
    }


@pytest.mark.parametrize("factory", FULL_OBJECTIVES)
def test_fully_filled_objective_is_complete(factory):
    objective = factory()
    assert missing_fields(objective) == []
    assert is_objective_complete(objective)


@pytest.mark.parametrize("cls", [CatalogLinkedObjective, SmartCustomObjective])
def test_smart_completeness_over_every_blank_combination(cls):
    for blanks in itertools.product([False, True], repeat=len(SMART_FIELDS)):
        values = {
            name: ("   " if blank else "filled") for name, blank in zip(SMART_FIELDS, blanks)
        }
        if cls is CatalogLinkedObjective:
            values["skill_id"] = "skill-1"
        objective = cls(**values)
        expected_missing = [name for name, blank in zip(SMART_FIELDS, blanks) if blank]
        assert missing_fields(objective) == expected_missing
        assert is_objective_complete(objective) == (not any(blanks))


@pytest.mark.parametrize("cls", [FormationObjective, FreeformObjective])
def test_statement_completeness_over_every_blank_combination(cls):
    for description, statement in itertools.product(["", " \t", "Negotiation"], repeat=2):
        objective = cls(skill_description=description, statement=statement)
        expected = [
            name for name, value in zip(STATEMENT_FIELDS, (description, statement))
            if not value.strip()
        ]
        assert missing_fields(objective) == expected


def test_freeform_ignores_smart_fields():
    # A freeform objective has no SMART block to fill
    objective = FreeformObjective(skill_description="Coaching", statement="Coach two juniors")
    assert not hasattr(objective, "measurable")
    assert is_objective_complete(objective)
