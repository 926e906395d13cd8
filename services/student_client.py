from typing import Any, Dict, List, Optional

from pydantic import field_validator

from config.settings import settings
from schemas.common import CamelModel
from services.upstream import UpstreamClient


class PersonalInfo(CamelModel):
    names: Optional[str] = None
    last_names: Optional[str] = None
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None


class Student(CamelModel):
    student_id: Optional[str] = None
    cui: Optional[str] = None
    personal_info: PersonalInfo = PersonalInfo()
    institution_id: Optional[str] = None
    classroom_id: Optional[str] = None
    status: Optional[str] = None

    @field_validator("personal_info", mode="before")
    @classmethod
    def _null_info(cls, v):
        return v or {}

    @property
    def full_name(self) -> str:
        info = self.personal_info
        name = f"{info.names or ''} {info.last_names or ''}".strip()
        return name or f"Estudiante {(self.student_id or '')[:8]}".strip()

    @property
    def label(self) -> str:
        doc = self.personal_info.document_number
        return f"{self.full_name} ({doc})" if doc else self.full_name

    def summary(self) -> Dict[str, Any]:
        return {
            "studentId": self.student_id,
            "name": self.full_name,
            "label": self.label,
            "documentNumber": self.personal_info.document_number,
            "institutionId": self.institution_id,
            "classroomId": self.classroom_id,
            "status": self.status,
        }


class StudentClient(UpstreamClient):
    """Read-only student lookups used by selectors"""

    service = "students"

    def _students(self, endpoint: str) -> List[Student]:
        return [Student.model_validate(s) for s in self.unwrap_list(self.get(endpoint))]

    def list_all(self) -> List[Student]:
        return self._students("")

    def get_by_id(self, student_id: str) -> Student:
        return Student.model_validate(self.unwrap(self.get(f"/{student_id}")) or {})

    def by_classroom(self, classroom_id: str) -> List[Student]:
        return self._students(f"/classroom/{classroom_id}")

    def by_institution(self, institution_id: str) -> List[Student]:
        return self._students(f"/institution/{institution_id}")


def matches_student(student: Student, term: Optional[str]) -> bool:
    """names, last names, document number or the full name"""
    if not term or not term.strip():
        return True
    t = term.strip().lower()
    info = student.personal_info
    fields = [info.names, info.last_names, info.document_number, student.full_name]
    return any(f and t in f.lower() for f in fields)


student_client = StudentClient(settings.STUDENT_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_student_client() -> StudentClient:
    return student_client
