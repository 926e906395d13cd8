from datetime import date

from fastapi import APIRouter

from config.settings import settings
from schemas.academic import AGE_LEVELS, PERFORMANCE_LEVELS
from schemas.attendance import AttendanceStatus, status_option
from schemas.behavior import IncidentStatus, IncidentType, SeverityLevel
from schemas.events import EVENT_TYPE_LABELS
from schemas.grades import ACHIEVEMENT_LABELS
from schemas.institutions import (
    CLASSROOM_TYPES, CONTACT_TYPES, GRADING_TYPES, SHIFTS, Gender, InstitutionLevel, InstitutionType,
)
from schemas.users import DOCUMENT_TYPES, ROLE_LABELS, UserRole

router = APIRouter(prefix="/meta", tags=["Meta"])


def _values(enum_cls):
    return [e.value for e in enum_cls]


@router.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV, "version": settings.APP_VERSION}


@router.get("/limits")
def limits():
    return {
        "page_size_default": settings.DEFAULT_PAGE_SIZE,
        "page_size_max": settings.MAX_PAGE_SIZE,
        "upload_max_mb": settings.MAX_UPLOAD_MB,
        "upload_types": settings.ALLOWED_UPLOAD_TYPES,
    }


# ==========================================================
# [options] every select box of the console
# ==========================================================
@router.get("/options")
def options():
    current_year = date.today().year
    return {
        "success": True,
        "data": {
            "attendanceStatuses": [status_option(s) for s in AttendanceStatus],
            "incidentTypes": _values(IncidentType),
            "incidentSeverities": _values(SeverityLevel),
            "incidentStatuses": _values(IncidentStatus),
            "eventTypes": [{"value": t.value, "label": label} for t, label in EVENT_TYPE_LABELS.items()],
            "userRoles": [{"value": r.value, "label": ROLE_LABELS[r.value]} for r in UserRole],
            "documentTypes": DOCUMENT_TYPES,
            "courseAgeLevels": AGE_LEVELS,
            "performanceLevels": PERFORMANCE_LEVELS,
            "achievementLevels": [{"value": k.value, "label": v} for k, v in ACHIEVEMENT_LABELS.items()],
            "institutionTypes": _values(InstitutionType),
            "institutionLevels": _values(InstitutionLevel),
            "genders": _values(Gender),
            "gradingTypes": GRADING_TYPES,
            "classroomTypes": CLASSROOM_TYPES,
            "contactTypes": CONTACT_TYPES,
            "shifts": list(SHIFTS),
            "academicYears": [f"{y}-{y + 1}" for y in range(current_year - 1, current_year + 2)],
        },
    }
