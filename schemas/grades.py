"""
schemas/grades.py

Competency evaluations (A / B / C) and the four-step report-card wizard.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from schemas.common import CamelModel
from services.forms import blank


class AchievementLevel(str, Enum):
    A = "A"
    B = "B"
    C = "C"


ACHIEVEMENT_LABELS = {
    AchievementLevel.A: "Logro esperado",
    AchievementLevel.B: "En proceso",
    AchievementLevel.C: "En inicio",
}

WIZARD_STEPS = {
    1: "environment",
    2: "student",
    3: "items",
    4: "details",
}


class Evaluation(CamelModel):
    id: Optional[str] = None
    student_id: Optional[str] = None
    enrollment_id: Optional[str] = None
    classroom_id: Optional[str] = None
    institution_id: Optional[str] = None
    course_id: Optional[str] = None
    competency_id: Optional[str] = None
    achievement_level: Optional[str] = None
    academic_year: Optional[int] = None
    description: Optional[str] = None
    evaluated_by: Optional[str] = None
    evaluation_date: Optional[str] = None
    observations: Optional[str] = None
    activity_context: Optional[str] = None
    evidence_urls: List[str] = []
    created_at: Optional[str] = None

    @field_validator("evidence_urls", mode="before")
    @classmethod
    def _null_list(cls, v):
        return v or []


class EvaluationIn(CamelModel):
    student_id: str = Field(min_length=1)
    enrollment_id: Optional[str] = None
    classroom_id: str = Field(min_length=1)
    institution_id: str = Field(min_length=1)
    course_id: str = Field(min_length=1)
    competency_id: str = Field(min_length=1)
    achievement_level: AchievementLevel
    academic_year: int = Field(ge=2000, le=2100)
    description: Optional[str] = None
    evaluated_by: str = Field(min_length=1)
    evaluation_date: date
    observations: Optional[str] = None
    activity_context: Optional[str] = None
    evidence_urls: List[str] = []


class CourseOption(CamelModel):
    id: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None


class CompetencyOption(CamelModel):
    id: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None
    course_id: Optional[str] = None


# =========================================================
# wizard
# =========================================================

class EnvironmentStep(CamelModel):
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    classroom_id: Optional[str] = None
    classroom_name: Optional[str] = None


class StudentStep(CamelModel):
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    enrollment_id: Optional[str] = None


class ReportItemIn(CamelModel):
    course_id: Optional[str] = None
    course_name: Optional[str] = None
    competency_id: Optional[str] = None
    competency_name: Optional[str] = None
    achievement_level: Optional[AchievementLevel] = None


class DetailsStep(CamelModel):
    academic_year: Optional[str] = None
    evaluated_by: Optional[str] = None
    evaluation_date: Optional[date] = None
    description: Optional[str] = None
    observations: Optional[str] = None
    activity_context: Optional[str] = None
    evidence_url: Optional[str] = None

    @field_validator("description", "observations", "activity_context", "evaluated_by", "evidence_url")
    @classmethod
    def _strip(cls, v):
        return None if blank(v) else v.strip()


class DraftCreate(EnvironmentStep):
    pass


class ReportCardDraftOut(CamelModel):
    id: str
    step: int
    step_name: str
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    classroom_id: Optional[str] = None
    classroom_name: Optional[str] = None
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    enrollment_id: Optional[str] = None
    items: List[dict] = []
    academic_year: Optional[str] = None
    evaluated_by: Optional[str] = None
    evaluation_date: Optional[str] = None
    description: Optional[str] = None
    observations: Optional[str] = None
    activity_context: Optional[str] = None
    evidence_url: Optional[str] = None
