from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class NotificationOut(BaseModel):
    id: str
    title: str
    message: str
    kind: str
    priority: int
    link: Optional[str]
    payload: Optional[dict]
    is_read: bool
    created_at: Optional[datetime]

    model_config = {
        'from_attributes': True
    }
