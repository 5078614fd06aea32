from pydantic import BaseModel
from typing import Optional
from enum import Enum
from datetime import datetime

from app.schemas.objective import Objective
from app.schemas.evaluation import SelfEvaluationEntry, ReferentEvaluationEntry


class GapClassification(str, Enum):
    over_evaluation = "over_evaluation"
    under_evaluation = "under_evaluation"
    aligned = "aligned"


class CoachingViewRow(BaseModel):
    evaluation_id: str
    evaluation_status: str
    coach_id: str

    employee_id: str
    employee_name: str
    employee_department: Optional[str] = None

    project_id: str
    project_title: str
    client_name: Optional[str] = None
    project_status: str
    referent_id: Optional[str] = None
    referent_name: Optional[str] = None

    objectives: list[Objective]
    self_evaluation: list[SelfEvaluationEntry]
    referent_evaluation: list[ReferentEvaluationEntry]
    submitted_at: Optional[datetime] = None
    referent_submitted_at: Optional[datetime] = None

    self_score: Optional[float] = None
    referent_score: Optional[float] = None
    final_score: Optional[float] = None
    score_delta: Optional[float] = None
    classification: GapClassification
    talking_point: str


class EmployeeRollup(BaseModel):
    employee_id: str
    employee_name: str
    employee_department: Optional[str] = None
    evaluation_count: int
    average_final_score: Optional[float] = None
    last_submitted_at: Optional[datetime] = None


class CoachingSummary(BaseModel):
    coachee_count: int
    evaluation_count: int
    average_final_score: Optional[float] = None
