"""
schemas/attendance.py

Daily attendance records, justifications and bulk registration.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from schemas.common import CamelModel
from services.forms import TIME, blank, now_hhmm


class AttendanceStatus(str, Enum):
    PRESENTE = "PRESENTE"
    AUSENTE = "AUSENTE"
    TARDANZA = "TARDANZA"
    JUSTIFICADO = "JUSTIFICADO"
    PERMISO = "PERMISO"


# label + badge color per status, used by list chips and /meta/options
STATUS_LABELS = {
    AttendanceStatus.PRESENTE: ("Presente", "success"),
    AttendanceStatus.AUSENTE: ("Ausente", "error"),
    AttendanceStatus.TARDANZA: ("Tardanza", "warning"),
    AttendanceStatus.JUSTIFICADO: ("Justificado", "info"),
    AttendanceStatus.PERMISO: ("Permiso", "default"),
}


def status_option(status: AttendanceStatus) -> Dict[str, str]:
    label, color = STATUS_LABELS[status]
    return {"value": status.value, "label": label, "color": color}


def _time(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if not TIME.match(v):
        raise ValueError("Time must be HH:MM")
    return v


class AttendanceRecord(CamelModel):
    id: Optional[str] = None
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    classroom_id: Optional[str] = None
    classroom_name: Optional[str] = None
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    attendance_date: Optional[str] = None
    academic_year: Optional[int] = None
    attendance_status: Optional[str] = None
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None
    justified: Optional[bool] = None
    justification_reason: Optional[str] = None
    justification_document_url: Optional[str] = None
    registered_by: Optional[str] = None
    registered_by_name: Optional[str] = None
    registered_at: Optional[str] = None
    updated_at: Optional[str] = None


class AttendanceCreate(CamelModel):
    student_id: str = Field(min_length=1)
    classroom_id: str = Field(min_length=1)
    institution_id: str = Field(min_length=1)
    attendance_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    academic_year: int = Field(ge=2000, le=2100)
    attendance_status: AttendanceStatus
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None
    justified: bool = False
    justification_reason: Optional[str] = None
    justification_document_url: Optional[str] = None
    registered_by: str = Field(min_length=1)

    @field_validator("arrival_time", "departure_time")
    @classmethod
    def _check_time(cls, v):
        return _time(v)

    @model_validator(mode="after")
    def _defaults(self):
        if self.arrival_time is None:
            self.arrival_time = now_hhmm()
        if self.justified and blank(self.justification_reason):
            raise ValueError("A justified record needs a justification reason")
        return self


class AttendanceUpdate(CamelModel):
    attendance_status: Optional[AttendanceStatus] = None
    departure_time: Optional[str] = None
    justified: Optional[bool] = None
    justification_reason: Optional[str] = None
    justification_document_url: Optional[str] = None

    @field_validator("departure_time")
    @classmethod
    def _check_time(cls, v):
        return _time(v)


class Justification(CamelModel):
    reason: str
    document_url: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def _check_reason(cls, v):
        if blank(v):
            raise ValueError("Justification reason is required")
        return v.strip()


class BulkAttendance(CamelModel):
    student_ids: List[str]
    classroom_id: str
    institution_id: str
    attendance_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    academic_year: int = Field(ge=2000, le=2100)
    attendance_status: AttendanceStatus
    arrival_time: Optional[str] = None
    registered_by: str = Field(min_length=1)

    @field_validator("student_ids")
    @classmethod
    def _check_students(cls, v):
        # keep order, drop blanks and repeats
        unique = list(dict.fromkeys(s for s in v if s and s.strip()))
        if not unique:
            raise ValueError("Select at least one student")
        return unique

    @field_validator("classroom_id")
    @classmethod
    def _check_classroom(cls, v):
        if blank(v):
            raise ValueError("Classroom is required")
        return v

    @field_validator("institution_id")
    @classmethod
    def _check_institution(cls, v):
        if blank(v):
            raise ValueError("Institution is required")
        return v

    @field_validator("arrival_time")
    @classmethod
    def _check_time(cls, v):
        return _time(v) or now_hhmm()


class BulkFailure(CamelModel):
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    reason: Optional[str] = None


class BulkResult(CamelModel):
    total_requested: int = 0
    success_count: int = 0
    failure_count: int = 0
    successful_records: List[AttendanceRecord] = []
    failed_records: List[BulkFailure] = []


class AttendanceStats(CamelModel):
    total_records: int = 0
    present_count: int = 0
    absent_count: int = 0
    late_count: int = 0
    justified_count: int = 0
    permission_count: int = 0
    attendance_rate: float = 0.0


class ReferenceItem(CamelModel):
    id: str
    name: str
    institution_id: Optional[str] = None
    classroom_id: Optional[str] = None


def failure_summary(failures: List[BulkFailure]) -> List[Dict[str, Any]]:
    """Group identical (studentName, reason) failures for display"""
    grouped: Dict[tuple, Dict[str, Any]] = {}
    for f in failures:
        key = (f.student_name or f.student_id, f.reason)
        if key not in grouped:
            grouped[key] = {"studentName": key[0], "reason": f.reason, "count": 0}
        grouped[key]["count"] += 1
    return list(grouped.values())
