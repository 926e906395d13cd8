from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from config.settings import settings
from schemas.behavior import IncidentCreate, IncidentStatus, IncidentType, IncidentUpdate, SeverityLevel
from schemas.common import ok
from schemas.users import ROLE_LABELS
from services.incident_client import IncidentClient, get_incident_client
from services.listing import count_by, equals, list_response, matches_any
from services.student_client import StudentClient, get_student_client, matches_student
from services.user_client import UserClient, get_user_client

router = APIRouter(prefix="/behavior", tags=["Behavior"])

# roles grouped the way the reporter selector offers them
ROLE_GROUPS = {
    "administrative": ["ADMIN", "DIRECTOR", "AUXILIAR"],
    "educational": ["TUTOR"],
    "parents": ["PADRE", "MADRE"],
}


def _expand_roles(roles: Optional[str]) -> List[str]:
    """'PROFESOR,administrative' -> ['TUTOR', 'ADMIN', 'DIRECTOR', 'AUXILIAR']"""
    wanted: List[str] = []
    for r in (roles or "").split(","):
        r = r.strip()
        if not r:
            continue
        if r.lower() in ROLE_GROUPS:
            wanted.extend(ROLE_GROUPS[r.lower()])
        elif r.upper() == "PROFESOR":
            # there is no PROFESOR role upstream; teachers are TUTOR users
            wanted.append("TUTOR")
        else:
            wanted.append(r.upper())
    return list(dict.fromkeys(wanted))


# ==========================================================
# [list] incidents page
# ==========================================================
@router.get("/incidents")
def list_incidents(
    search: Optional[str] = None,
    type_: Optional[IncidentType] = Query(default=None, alias="type"),
    severity: Optional[SeverityLevel] = None,
    status: Optional[IncidentStatus] = None,
    student_id: Optional[str] = Query(default=None, alias="studentId"),
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(default=None, ge=1, le=settings.MAX_PAGE_SIZE),
    client: IncidentClient = Depends(get_incident_client),
):
    incidents = client.list_all()
    stats = {
        "total": len(incidents),
        "byType": count_by(incidents, "incident_type"),
        "bySeverity": count_by(incidents, "severity_level"),
        "byStatus": count_by(incidents, "status"),
    }
    filtered = [
        i for i in incidents
        if matches_any(i, search, ("student_name", "description", "location"))
        and equals(i.incident_type, type_.value if type_ else None)
        and equals(i.severity_level, severity.value if severity else None)
        and equals(i.status, status.value if status else None)
        and equals(i.student_id, student_id)
    ]
    # newest first: date then time, missing values last
    filtered.sort(key=lambda i: (i.incident_date or "", i.incident_time or ""), reverse=True)
    return list_response(filtered, page, size or settings.DEFAULT_PAGE_SIZE,
                         sort="incidentDate,desc", stats=stats)


@router.get("/incidents/{incident_id}")
def get_incident(incident_id: str, client: IncidentClient = Depends(get_incident_client)):
    return ok(client.get_by_id(incident_id).to_upstream())


@router.post("/incidents", status_code=201)
def create_incident(data: IncidentCreate, client: IncidentClient = Depends(get_incident_client)):
    return ok(client.create(data).to_upstream(), "Incident registered")


@router.put("/incidents/{incident_id}")
def update_incident(incident_id: str, data: IncidentUpdate,
                    client: IncidentClient = Depends(get_incident_client)):
    if not data.model_fields_set:
        raise HTTPException(status_code=400, detail="Nothing to update")
    return ok(client.update(incident_id, data).to_upstream(), "Incident updated")


@router.get("/students/{student_id}/incidents")
def incidents_by_student(student_id: str, client: IncidentClient = Depends(get_incident_client)):
    return ok([i.to_upstream() for i in client.by_student(student_id)])


# ==========================================================
# [selectors] student / reporter pickers
# ==========================================================
@router.get("/students")
def search_students(
    q: Optional[str] = None,
    institution_id: Optional[str] = Query(default=None, alias="institutionId"),
    classroom_id: Optional[str] = Query(default=None, alias="classroomId"),
    limit: int = Query(20, ge=1, le=100),
    students: StudentClient = Depends(get_student_client),
):
    if classroom_id:
        found = students.by_classroom(classroom_id)
    elif institution_id:
        found = students.by_institution(institution_id)
    else:
        found = students.list_all()
    found = [s for s in found if matches_student(s, q)]
    return ok([s.summary() for s in found[:limit]])


@router.get("/users")
def search_reporters(
    q: Optional[str] = None,
    roles: Optional[str] = None,
    institution_id: Optional[str] = Query(default=None, alias="institutionId"),
    status: Optional[str] = "ACTIVE",
    limit: int = Query(20, ge=1, le=100),
    users: UserClient = Depends(get_user_client),
):
    wanted = _expand_roles(roles)
    term = (q or "").strip().lower()
    found = []
    for u in users.list_all():
        if wanted and u.role not in wanted:
            continue
        if not equals(u.institution_id, institution_id) or not equals(u.status, status):
            continue
        if term and not any(term in (f or "").lower() for f in (u.full_name, u.email, u.user_name, u.document_number)):
            continue
        found.append({
            "userId": u.user_id,
            "name": u.full_name,
            "role": u.role,
            "roleLabel": ROLE_LABELS.get(u.role or "", u.role),
            "displayName": f"{u.full_name} ({ROLE_LABELS.get(u.role or '', u.role)})",
        })
    return ok(found[:limit])
