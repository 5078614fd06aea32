"""Objective variants and objective-set payloads.

Each objective type carries only its own fields; ``type`` is the discriminator.
"""
from pydantic import BaseModel, Field, TypeAdapter
from typing import Annotated, Literal, Optional, Union
from enum import Enum
from datetime import datetime
import uuid


class ObjectiveType(str, Enum):
    catalog_linked = "catalog_linked"
    smart_custom = "smart_custom"
    formation = "formation"
    freeform = "freeform"


class ObjectiveStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"


CUSTOM_THEME_NAME = "Custom objective"


class _ObjectiveBase(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    skill_description: str = ""
    theme_name: Optional[str] = None
    # Stamped by the set save; ignored on input
    status: ObjectiveStatus = ObjectiveStatus.draft


class _SmartObjective(_ObjectiveBase):
    smart_statement: str = ""
    specific: str = ""
    measurable: str = ""
    achievable: str = ""
    relevant: str = ""
    time_bound: str = ""


class CatalogLinkedObjective(_SmartObjective):
    type: Literal["catalog_linked"] = "catalog_linked"
    skill_id: str


class SmartCustomObjective(_SmartObjective):
    type: Literal["smart_custom"] = "smart_custom"
    theme_name: Optional[str] = CUSTOM_THEME_NAME


class FormationObjective(_ObjectiveBase):
    type: Literal["formation"] = "formation"
    theme_name: Optional[str] = CUSTOM_THEME_NAME
    statement: str = ""


class FreeformObjective(_ObjectiveBase):
    type: Literal["freeform"] = "freeform"
    theme_name: Optional[str] = CUSTOM_THEME_NAME
    statement: str = ""


Objective = Annotated[
    Union[CatalogLinkedObjective, SmartCustomObjective, FormationObjective, FreeformObjective],
    Field(discriminator="type"),
]

objective_list_adapter = TypeAdapter(list[Objective])

CUSTOM_OBJECTIVE_CLASSES = {
    ObjectiveType.smart_custom: SmartCustomObjective,
    ObjectiveType.formation: FormationObjective,
    ObjectiveType.freeform: FreeformObjective,
}


class ObjectiveSetSave(BaseModel):
    objectives: list[Objective]
    as_draft: bool = True

    model_config = {
        "json_schema_extra": {
            "example": {
                "as_draft": False,
                "objectives": [
                    {
                        "type": "freeform",
                        "skill_description": "Facilitate workshops",
                        "statement": "Run two client workshops before the end of the project",
                    }
                ],
            }
        }
    }


class CatalogObjectiveAdd(BaseModel):
    skill_id: str


class ObjectiveSetOut(BaseModel):
    id: str
    assignment_id: str
    status: ObjectiveStatus
    objectives: list[Objective]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {
        'from_attributes': True
    }
