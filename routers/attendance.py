from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from config.settings import settings
from schemas.attendance import (
    AttendanceCreate, AttendanceStatus, AttendanceUpdate, BulkAttendance,
    Justification, failure_summary,
)
from schemas.common import ok
from services.attendance_client import AttendanceClient, get_attendance_client
from services.file_client import FileClient, get_file_client
from services.forms import FormValidationError
from services.listing import count_where, equals, list_response, matches_any, sort_by, unique_options
from services.upstream import gather

router = APIRouter(prefix="/attendance", tags=["Attendance"])

ATTENDANCE_PAGE_SIZE = 6


def _dump(records):
    return [r.to_upstream() for r in records]


# ==========================================================
# [list] records page
# ==========================================================
@router.get("")
def list_attendance(
    search: Optional[str] = None,
    status: Optional[AttendanceStatus] = None,
    date_: Optional[date] = Query(default=None, alias="date"),
    institution_id: Optional[str] = Query(default=None, alias="institutionId"),
    classroom_id: Optional[str] = Query(default=None, alias="classroomId"),
    justified: Literal["all", "yes", "no"] = "all",
    page: int = Query(1, ge=1),
    size: int = Query(ATTENDANCE_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    client: AttendanceClient = Depends(get_attendance_client),
):
    records = client.list_all()

    # stats always describe the whole data set, not the filtered page
    stats = {
        "total": len(records),
        "present": count_where(records, lambda r: r.attendance_status == AttendanceStatus.PRESENTE),
        "absent": count_where(records, lambda r: r.attendance_status == AttendanceStatus.AUSENTE),
        "late": count_where(records, lambda r: r.attendance_status == AttendanceStatus.TARDANZA),
        "justified": count_where(records, lambda r: bool(r.justified)),
    }
    filters = {
        "institutions": unique_options(records, "institution_id", "institution_name"),
        "classrooms": unique_options(records, "classroom_id", "classroom_name"),
    }

    filtered = [
        r for r in records
        if matches_any(r, search, ("student_name", "student_id"))
        and (status is None or r.attendance_status == status.value)
        and (date_ is None or r.attendance_date == date_.isoformat())
        and equals(r.institution_id, institution_id)
        and equals(r.classroom_id, classroom_id)
        and (justified == "all" or bool(r.justified) == (justified == "yes"))
    ]
    filtered = sort_by(filtered, "attendance_date", descending=True)
    return list_response(filtered, page, size, sort="attendanceDate,desc", stats=stats, filters=filters)


@router.get("/suggestions")
def student_suggestions(q: str = "", limit: int = Query(10, ge=1, le=50),
                        client: AttendanceClient = Depends(get_attendance_client)):
    """Autocomplete for the search box: distinct student names"""
    if not q.strip():
        return ok([])
    names = []
    for r in client.list_all():
        if r.student_name and q.strip().lower() in r.student_name.lower() and r.student_name not in names:
            names.append(r.student_name)
    return ok(names[:limit])


# ==========================================================
# [form] reference data, loaded concurrently
# ==========================================================
@router.get("/form-options")
async def form_options(
    institution_id: Optional[str] = Query(default=None, alias="institutionId"),
    client: AttendanceClient = Depends(get_attendance_client),
):
    students, classrooms, institutions = await gather(
        lambda: client.students(institution_id),
        lambda: client.classrooms(institution_id),
        client.institutions,
    )
    return ok({
        "students": _dump(students),
        "classrooms": _dump(classrooms),
        "institutions": _dump(institutions),
        "statuses": [s.value for s in AttendanceStatus],
    })


@router.get("/reference/students")
def reference_students(institution_id: Optional[str] = Query(default=None, alias="institutionId"),
                       client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.students(institution_id)))


@router.get("/reference/classrooms")
def reference_classrooms(institution_id: Optional[str] = Query(default=None, alias="institutionId"),
                         client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.classrooms(institution_id)))


@router.get("/reference/institutions")
def reference_institutions(client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.institutions()))


# ==========================================================
# [files] justification documents
# ==========================================================
@router.post("/files", status_code=201)
async def upload_document(file: UploadFile = File(...), folder: str = Form("justifications"),
                          files: FileClient = Depends(get_file_client)):
    if file.content_type not in settings.ALLOWED_UPLOAD_TYPES:
        raise FormValidationError({"file": f"Unsupported file type: {file.content_type}"})
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_MB * 1024 * 1024:
        raise FormValidationError({"file": f"File exceeds {settings.MAX_UPLOAD_MB} MB"})
    result = files.upload(file.filename or "document", content, file.content_type, folder)
    return ok(result, "File uploaded")


@router.delete("/files")
def delete_document(url: str, files: FileClient = Depends(get_file_client)):
    files.remove(url)
    return ok({"url": url}, "File deleted")


# ==========================================================
# [bulk] one status for many students
# ==========================================================
@router.post("/bulk", status_code=201)
def bulk_register(data: BulkAttendance, client: AttendanceClient = Depends(get_attendance_client)):
    result = client.bulk_create(data)
    body = result.to_upstream()
    body["failureSummary"] = failure_summary(result.failed_records)
    message = f"{result.success_count} of {result.total_requested} records registered"
    return ok(body, message)


# ==========================================================
# [queries] by student / classroom / institution / date
# ==========================================================
@router.get("/student/{student_id}")
def by_student(student_id: str, client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.by_student(student_id)))


@router.get("/student/{student_id}/range")
def by_student_range(student_id: str, start_date: date = Query(alias="startDate"),
                     end_date: date = Query(alias="endDate"),
                     client: AttendanceClient = Depends(get_attendance_client)):
    if start_date > end_date:
        raise FormValidationError({"endDate": "End date must not be before start date"})
    return ok(_dump(client.by_student_range(student_id, start_date.isoformat(), end_date.isoformat())))


@router.get("/student/{student_id}/stats")
def student_stats(student_id: str, start_date: date = Query(alias="startDate"),
                  end_date: date = Query(alias="endDate"),
                  client: AttendanceClient = Depends(get_attendance_client)):
    if start_date > end_date:
        raise FormValidationError({"endDate": "End date must not be before start date"})
    return ok(client.student_stats(student_id, start_date.isoformat(), end_date.isoformat()).to_upstream())


@router.get("/classroom/{classroom_id}")
def by_classroom(classroom_id: str, client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.by_classroom(classroom_id)))


@router.get("/classroom/{classroom_id}/date/{day}")
def by_classroom_and_date(classroom_id: str, day: date, client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.by_classroom_and_date(classroom_id, day.isoformat())))


@router.get("/institution/{institution_id}")
def by_institution(institution_id: str, client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.by_institution(institution_id)))


@router.get("/date/{day}")
def by_date(day: date, client: AttendanceClient = Depends(get_attendance_client)):
    return ok(_dump(client.by_date(day.isoformat())))


# ==========================================================
# [CRUD] single record
# ==========================================================
@router.post("", status_code=201)
def create_attendance(data: AttendanceCreate, client: AttendanceClient = Depends(get_attendance_client)):
    return ok(client.create(data).to_upstream(), "Attendance registered")


@router.get("/{record_id}")
def get_attendance(record_id: str, client: AttendanceClient = Depends(get_attendance_client)):
    return ok(client.get_by_id(record_id).to_upstream())


@router.put("/{record_id}")
def update_attendance(record_id: str, data: AttendanceUpdate,
                      client: AttendanceClient = Depends(get_attendance_client)):
    if not data.model_fields_set:
        raise HTTPException(status_code=400, detail="Nothing to update")
    return ok(client.update(record_id, data).to_upstream(), "Attendance updated")


@router.patch("/{record_id}/justify")
def justify_attendance(record_id: str, data: Justification,
                       client: AttendanceClient = Depends(get_attendance_client)):
    return ok(client.justify(record_id, data).to_upstream(), "Absence justified")


@router.delete("/{record_id}")
def delete_attendance(record_id: str, client: AttendanceClient = Depends(get_attendance_client)):
    client.delete_record(record_id)
    return ok({"id": record_id}, "Attendance deleted")
