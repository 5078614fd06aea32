from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from app.models.project import ProjectStatus


class ProjectOut(BaseModel):
    id: str
    title: str
    client_name: Optional[str]
    status: ProjectStatus
    author_id: Optional[str]
    referent_id: Optional[str]
    updated_at: Optional[datetime]

    model_config = {
        'from_attributes': True
    }


class ProjectFinishOut(BaseModel):
    project: ProjectOut
    notified_employee_ids: list[str]
