"""
schemas/events.py

School events and the academic calendars they are assigned to.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from schemas.common import CamelModel
from services.forms import blank


class EventType(str, Enum):
    ACADEMICO = "ACADEMICO"
    CULTURAL = "CULTURAL"
    DEPORTIVO = "DEPORTIVO"
    EVALUACION = "EVALUACION"
    CAPACITACION = "CAPACITACION"
    CEREMONIAL = "CEREMONIAL"
    INCIDENTE = "INCIDENTE"


EVENT_TYPE_LABELS = {
    EventType.ACADEMICO: "Académico",
    EventType.CULTURAL: "Cultural",
    EventType.DEPORTIVO: "Deportivo",
    EventType.EVALUACION: "Evaluación",
    EventType.CAPACITACION: "Capacitación",
    EventType.CEREMONIAL: "Ceremonial",
    EventType.INCIDENTE: "Incidente",
}

MONTHS_ES = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sep", "oct", "nov", "dic"]


def format_display_date(iso: Optional[str]) -> str:
    """"2005-12-21" -> "21-dic-2005"; unparseable input comes back unchanged"""
    if not iso:
        return "-"
    try:
        y, m, d = (int(p) for p in iso[:10].split("-"))
    except ValueError:
        return iso
    if not 1 <= m <= 12 or not y or not d:
        return iso
    return f"{d:02d}-{MONTHS_ES[m - 1]}-{y}"


class Event(CamelModel):
    event_id: Optional[int] = None
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    event_type: Optional[str] = None
    is_holiday: Optional[bool] = None
    is_recurring: Optional[bool] = None
    is_national: Optional[bool] = None
    status: Optional[str] = None
    affects_classes: Optional[bool] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def display(self) -> dict:
        body = self.to_upstream()
        body["startDateLabel"] = format_display_date(self.start_date)
        body["endDateLabel"] = format_display_date(self.end_date)
        return body


class EventIn(CamelModel):
    institution_id: str
    title: str = Field(max_length=150)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    event_type: Optional[EventType] = None
    is_holiday: bool = False
    is_recurring: bool = False
    is_national: bool = False
    affects_classes: bool = False
    created_by: Optional[str] = None

    @field_validator("institution_id")
    @classmethod
    def _institution(cls, v):
        if blank(v):
            raise ValueError("Institution is required")
        return v

    @field_validator("title")
    @classmethod
    def _title(cls, v):
        if blank(v):
            raise ValueError("Title is required")
        return v.strip()

    @model_validator(mode="after")
    def _range(self):
        if self.end_date is None:
            self.end_date = self.start_date
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self


class Calendar(CamelModel):
    calendar_id: Optional[int] = None
    institution_id: Optional[str] = None
    academic_year: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CalendarIn(CamelModel):
    institution_id: str
    academic_year: int = Field(ge=2000, le=2100)
    start_date: date
    end_date: date

    @field_validator("institution_id")
    @classmethod
    def _institution(cls, v):
        if blank(v):
            raise ValueError("Institution is required")
        return v

    @model_validator(mode="after")
    def _range(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class EventCalendarLink(CamelModel):
    id: Optional[int] = None
    calendar_id: Optional[int] = None
    event_id: Optional[int] = None


class AssignEvents(CamelModel):
    event_ids: List[int] = Field(min_length=1)
