import logging
from typing import Any, Dict, List, Optional

from config.settings import settings
from schemas.attendance import (
    AttendanceCreate, AttendanceRecord, AttendanceStats, AttendanceUpdate,
    BulkAttendance, BulkResult, Justification, ReferenceItem,
)
from services.upstream import UpstreamClient, safe_list

logger = logging.getLogger(__name__)


# ===============================================================
# reference name fallbacks
# ===============================================================

def _short(prefix: str, id_: str) -> str:
    return f"{prefix} {id_[:8]}" if id_ else "Desconocido"


def student_name(item: Dict[str, Any]) -> str:
    name = item.get("name")
    if name and name != "Desconocido":
        return name
    info = item.get("personalInfo") or {}
    names = info.get("names")
    last = info.get("lastnames") or info.get("lastNames")
    if names and last:
        return f"{names} {last}"
    if names:
        return names
    if item.get("fullName"):
        return item["fullName"]
    first, last = item.get("firstName"), item.get("lastName")
    if first and last:
        return f"{first} {last}"
    if first:
        return first
    return _short("Estudiante", item.get("id") or item.get("studentId") or "")


def classroom_name(item: Dict[str, Any]) -> str:
    return (
        item.get("classroomName") or item.get("name") or item.get("code")
        or _short("Aula", item.get("id") or item.get("classroomId") or "")
    )


def institution_name(item: Dict[str, Any]) -> str:
    return (
        item.get("name") or item.get("institutionName") or item.get("code")
        or _short("Institución", item.get("id") or item.get("institutionId") or "")
    )


class AttendanceClient(UpstreamClient):
    """Attendance service: records, justification, bulk and reference lookups"""

    service = "attendance"

    def _records(self, endpoint: str, **kwargs) -> List[AttendanceRecord]:
        return [AttendanceRecord.model_validate(r) for r in self.unwrap_list(self.get(endpoint, **kwargs))]

    def _record(self, payload: Any) -> AttendanceRecord:
        return AttendanceRecord.model_validate(self.unwrap(payload))

    # ===============================================================
    # CRUD
    # ===============================================================

    def list_all(self) -> List[AttendanceRecord]:
        return self._records("")

    def get_by_id(self, record_id: str) -> AttendanceRecord:
        return self._record(self.get(f"/{record_id}"))

    def create(self, data: AttendanceCreate) -> AttendanceRecord:
        return self._record(self.post("", json=data.to_upstream()))

    def update(self, record_id: str, data: AttendanceUpdate) -> AttendanceRecord:
        return self._record(self.put(f"/{record_id}", json=data.to_upstream(exclude_none=True)))

    def justify(self, record_id: str, data: Justification) -> AttendanceRecord:
        return self._record(self.patch(f"/{record_id}/justify", json=data.to_upstream(exclude_none=True)))

    def delete_record(self, record_id: str) -> None:
        self.delete(f"/{record_id}")

    def bulk_create(self, data: BulkAttendance) -> BulkResult:
        return BulkResult.model_validate(self.unwrap(self.post("/bulk", json=data.to_upstream())))

    # ===============================================================
    # queries
    # ===============================================================

    def by_student(self, student_id: str) -> List[AttendanceRecord]:
        return self._records(f"/student/{student_id}")

    def by_classroom(self, classroom_id: str) -> List[AttendanceRecord]:
        return self._records(f"/classroom/{classroom_id}")

    def by_institution(self, institution_id: str) -> List[AttendanceRecord]:
        return self._records(f"/institution/{institution_id}")

    def by_date(self, date: str) -> List[AttendanceRecord]:
        return self._records(f"/date/{date}")

    def by_classroom_and_date(self, classroom_id: str, date: str) -> List[AttendanceRecord]:
        return self._records(f"/classroom/{classroom_id}/date/{date}")

    def by_student_range(self, student_id: str, start: str, end: str) -> List[AttendanceRecord]:
        return self._records(f"/student/{student_id}/range", params={"startDate": start, "endDate": end})

    def student_stats(self, student_id: str, start: str, end: str) -> AttendanceStats:
        payload = self.get(f"/student/{student_id}/stats", params={"startDate": start, "endDate": end})
        return AttendanceStats.model_validate(self.unwrap(payload) or {})

    # ===============================================================
    # reference data (errors degrade to an empty list)
    # ===============================================================

    def _reference(self, endpoint: str) -> List[Dict[str, Any]]:
        return self.unwrap_list(self.get(endpoint))

    def students(self, institution_id: Optional[str] = None) -> List[ReferenceItem]:
        endpoint = f"/reference/students/institution/{institution_id}" if institution_id else "/reference/students"

        def load():
            return [
                ReferenceItem(
                    id=i.get("id") or i.get("studentId") or "",
                    name=student_name(i),
                    institution_id=i.get("institutionId"),
                    classroom_id=i.get("classroomId"),
                )
                for i in self._reference(endpoint)
            ]
        return safe_list("students", load)

    def classrooms(self, institution_id: Optional[str] = None) -> List[ReferenceItem]:
        endpoint = f"/reference/classrooms/institution/{institution_id}" if institution_id else "/reference/classrooms"

        def load():
            return [
                ReferenceItem(
                    id=i.get("id") or i.get("classroomId") or "",
                    name=classroom_name(i),
                    institution_id=i.get("institutionId"),
                )
                for i in self._reference(endpoint)
            ]
        return safe_list("classrooms", load)

    def institutions(self) -> List[ReferenceItem]:
        def load():
            return [
                ReferenceItem(id=i.get("id") or i.get("institutionId") or "", name=institution_name(i))
                for i in self._reference("/reference/institutions")
            ]
        return safe_list("institutions", load)


attendance_client = AttendanceClient(settings.ATTENDANCE_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_attendance_client() -> AttendanceClient:
    return attendance_client
