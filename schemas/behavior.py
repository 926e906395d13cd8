"""
schemas/behavior.py

Incident reports. The incident service serialises java.time values either as
strings or as arrays ([2025, 3, 14], [9, 30], [2025, 3, 14, 9, 30, 0, 0]);
everything is normalised to strings before reaching the console.
"""

from datetime import date
from enum import Enum
from typing import Any, List, Optional

from pydantic import Field, field_validator

from schemas.common import CamelModel
from services.forms import BASIC_TEXT, blank, parse_time


class IncidentType(str, Enum):
    ACCIDENTE = "ACCIDENTE"
    CONFLICTO = "CONFLICTO"
    COMPORTAMIENTO = "COMPORTAMIENTO"
    EMOCIONAL = "EMOCIONAL"
    SALUD = "SALUD"


class SeverityLevel(str, Enum):
    LEVE = "LEVE"
    MODERADO = "MODERADO"
    GRAVE = "GRAVE"


class IncidentStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


# =========================================================
# java.time array normalisation
# =========================================================

def format_date(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        y, m, d = value[:3]
        return f"{int(y):04d}-{int(m):02d}-{int(d):02d}"
    return value


def format_time(value: Any) -> Optional[str]:
    """[h, m(, s)] or "HH:MM:SS" -> "HH:MM" for display"""
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        return f"{int(value[0]):02d}:{int(value[1]):02d}"
    if isinstance(value, str) and len(value) >= 5:
        return value[:5]
    return value


def format_datetime(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        parts = [int(p) for p in value[:6]] + [0] * (6 - min(len(value), 6))
        y, mo, d, h, mi, s = parts[:6]
        return f"{y:04d}-{mo:02d}-{d:02d}T{h:02d}:{mi:02d}:{s:02d}"
    return value


class Incident(CamelModel):
    id: Optional[str] = None
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    classroom_id: Optional[str] = None
    classroom_name: Optional[str] = None
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    incident_date: Optional[str] = None
    incident_time: Optional[str] = None
    academic_year: Optional[int] = None
    incident_type: Optional[str] = None
    severity_level: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    witnesses: Optional[str] = None
    other_students_involved: List[str] = []
    other_students_names: List[str] = []
    immediate_action: Optional[str] = None
    parents_notified: Optional[bool] = None
    notification_date: Optional[str] = None
    follow_up_required: Optional[bool] = None
    status: Optional[str] = None
    reported_by: Optional[str] = None
    reported_by_name: Optional[str] = None
    reported_at: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_by_name: Optional[str] = None
    resolved_at: Optional[str] = None

    @field_validator("incident_date", mode="before")
    @classmethod
    def _date(cls, v):
        return format_date(v)

    @field_validator("incident_time", mode="before")
    @classmethod
    def _time(cls, v):
        return format_time(v)

    @field_validator("reported_at", "resolved_at", "notification_date", mode="before")
    @classmethod
    def _datetime(cls, v):
        return format_datetime(v)

    @field_validator("other_students_involved", "other_students_names", mode="before")
    @classmethod
    def _null_list(cls, v):
        return v or []


# =========================================================
# form rules
# =========================================================

def _check_date(v: date) -> date:
    if v > date.today():
        raise ValueError("Incident date cannot be in the future")
    return v


def _check_year(v: int) -> int:
    current = date.today().year
    if not 2020 <= v <= current:
        raise ValueError(f"Academic year must be between 2020 and {current}")
    return v


def _check_basic(v: Optional[str], label: str, required: bool) -> Optional[str]:
    if blank(v):
        if required:
            raise ValueError(f"{label} is required")
        return None
    v = v.strip()
    if len(v) < 5:
        raise ValueError(f"{label} must be at least 5 characters")
    if len(v) > 500:
        raise ValueError(f"{label} cannot exceed 500 characters")
    if not BASIC_TEXT.match(v):
        raise ValueError(f"{label} contains invalid characters")
    return v


def _check_length(v: Optional[str], label: str, lo: int, hi: int) -> str:
    if blank(v):
        raise ValueError(f"{label} is required")
    v = v.strip()
    if len(v) < lo:
        raise ValueError(f"{label} must be at least {lo} characters")
    if len(v) > hi:
        raise ValueError(f"{label} cannot exceed {hi} characters")
    return v


def _incident_time(v: str) -> str:
    h, m = parse_time(v)
    return f"{h:02d}:{m:02d}:00"


def _clean_ids(v: Optional[List[str]]) -> List[str]:
    return [s.strip() for s in (v or []) if s and s.strip()]


class IncidentCreate(CamelModel):
    student_id: str = Field(min_length=1)
    incident_date: date
    incident_time: str
    academic_year: int
    incident_type: IncidentType
    severity_level: SeverityLevel
    description: str
    location: str
    witnesses: Optional[str] = None
    other_students_involved: List[str] = []
    immediate_action: str
    follow_up_required: bool = False
    reported_by: str = Field(min_length=1)

    @field_validator("incident_date")
    @classmethod
    def _date(cls, v):
        return _check_date(v)

    @field_validator("incident_time")
    @classmethod
    def _time(cls, v):
        return _incident_time(v)

    @field_validator("academic_year")
    @classmethod
    def _year(cls, v):
        return _check_year(v)

    @field_validator("description")
    @classmethod
    def _description(cls, v):
        return _check_length(v, "Description", 5, 1000)

    @field_validator("location")
    @classmethod
    def _location(cls, v):
        return _check_length(v, "Location", 5, 200)

    @field_validator("witnesses")
    @classmethod
    def _witnesses(cls, v):
        return _check_basic(v, "Witnesses", required=False)

    @field_validator("immediate_action")
    @classmethod
    def _action(cls, v):
        return _check_basic(v, "Immediate action", required=True)

    @field_validator("other_students_involved", mode="before")
    @classmethod
    def _others(cls, v):
        return _clean_ids(v)


class IncidentUpdate(CamelModel):
    """Same rules as creation, applied to the fields that were sent"""
    incident_date: Optional[date] = None
    incident_time: Optional[str] = None
    academic_year: Optional[int] = None
    incident_type: Optional[IncidentType] = None
    severity_level: Optional[SeverityLevel] = None
    description: Optional[str] = None
    location: Optional[str] = None
    witnesses: Optional[str] = None
    other_students_involved: Optional[List[str]] = None
    immediate_action: Optional[str] = None
    follow_up_required: Optional[bool] = None
    status: Optional[IncidentStatus] = None
    resolved_by: Optional[str] = None

    @field_validator("incident_date")
    @classmethod
    def _date(cls, v):
        return None if v is None else _check_date(v)

    @field_validator("incident_time")
    @classmethod
    def _time(cls, v):
        return None if v is None else _incident_time(v)

    @field_validator("academic_year")
    @classmethod
    def _year(cls, v):
        return None if v is None else _check_year(v)

    @field_validator("description")
    @classmethod
    def _description(cls, v):
        return None if v is None else _check_length(v, "Description", 5, 1000)

    @field_validator("location")
    @classmethod
    def _location(cls, v):
        return None if v is None else _check_length(v, "Location", 5, 200)

    @field_validator("witnesses")
    @classmethod
    def _witnesses(cls, v):
        return _check_basic(v, "Witnesses", required=False)

    @field_validator("immediate_action")
    @classmethod
    def _action(cls, v):
        return None if v is None else _check_basic(v, "Immediate action", required=True)

    @field_validator("other_students_involved", mode="before")
    @classmethod
    def _others(cls, v):
        return None if v is None else _clean_ids(v)
