from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from config.settings import settings
from schemas.common import ok
from schemas.institutions import (
    ClassroomCreate, ClassroomIn, DirectorChange, InstitutionCreate, InstitutionUpdate,
)
from schemas.users import UserUpdate
from services.forms import FormValidationError
from services.institution_client import (
    InstitutionClient, director_change_payload, get_institution_client, institution_payload,
)
from services.listing import contains, equals, list_response
from services.user_client import UserClient, get_user_client

router = APIRouter(prefix="/institutions", tags=["Institutions"])
classroom_router = APIRouter(prefix="/classrooms", tags=["Institutions"])


def _is_candidate(user) -> bool:
    """Active directors not yet attached to any institution"""
    return user.role == "DIRECTOR" and user.status == "ACTIVE" and not user.institution_id


# ==========================================================
# [list]
# ==========================================================
@router.get("")
def list_institutions(
    status: Literal["all", "active", "inactive"] = "all",
    search: Optional[str] = None,
    level: Optional[str] = None,
    type_: Optional[str] = Query(default=None, alias="type"),
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(default=None, ge=1, le=settings.MAX_PAGE_SIZE),
    client: InstitutionClient = Depends(get_institution_client),
):
    if status == "active":
        institutions = client.list_active()
    elif status == "inactive":
        institutions = client.list_inactive()
    else:
        institutions = client.list_all()

    filtered = []
    for i in institutions:
        info = i.institution_information
        if not (contains(info.institution_name, search) or contains(info.code_institution, search)
                or contains(info.modular_code, search)):
            continue
        if not equals(info.institution_level, level) or not equals(info.institution_type, type_):
            continue
        filtered.append(i)
    filtered.sort(key=lambda i: (i.name or "").lower())
    return list_response(filtered, page, size or settings.DEFAULT_PAGE_SIZE, sort="institutionName,asc")


# ==========================================================
# [director] change
# ==========================================================
@router.get("/director-candidates")
def director_candidates(q: Optional[str] = None, users: UserClient = Depends(get_user_client)):
    term = (q or "").strip().lower()
    found = [
        u for u in users.list_all()
        if _is_candidate(u)
        and (not term or term in f"{u.full_name} {u.email or ''} {u.document_number or ''}".lower())
    ]
    return ok([u.to_upstream() for u in found])


@router.put("/{institution_id}/director")
def change_director(
    institution_id: str,
    data: DirectorChange,
    client: InstitutionClient = Depends(get_institution_client),
    users: UserClient = Depends(get_user_client),
):
    candidate = users.get_by_id(data.director_id)
    if not _is_candidate(candidate):
        raise FormValidationError({"directorId": "User is not an available director"})

    current = client.get_by_id(institution_id)
    updated = client.update(institution_id, director_change_payload(current, data.director_id))

    # attach the new director to the institution on the user side as well
    users.update(data.director_id, UserUpdate(institution_id=institution_id))
    return ok(updated.to_upstream(), "Director changed")


# ==========================================================
# [CRUD]
# ==========================================================
@router.get("/{institution_id}")
def get_institution(institution_id: str, client: InstitutionClient = Depends(get_institution_client)):
    return ok(client.get_by_id(institution_id).to_upstream())


@router.post("", status_code=201)
def create_institution(data: InstitutionCreate, client: InstitutionClient = Depends(get_institution_client)):
    created = client.create_with_users(institution_payload(data))
    return ok(created.to_upstream(), "Institution created")


@router.put("/{institution_id}")
def update_institution(institution_id: str, data: InstitutionUpdate,
                       client: InstitutionClient = Depends(get_institution_client)):
    updated = client.update(institution_id, data.to_upstream(exclude_none=True))
    return ok(updated.to_upstream(), "Institution updated")


@router.delete("/{institution_id}")
def delete_institution(institution_id: str, client: InstitutionClient = Depends(get_institution_client)):
    client.soft_delete(institution_id)
    return ok({"institutionId": institution_id, "status": "INACTIVE"}, "Institution deactivated")


@router.put("/{institution_id}/restore")
def restore_institution(institution_id: str, client: InstitutionClient = Depends(get_institution_client)):
    return ok(client.restore(institution_id).to_upstream(), "Institution restored")


# ==========================================================
# [classrooms]
# ==========================================================
@router.post("/{institution_id}/classrooms", status_code=201)
def create_classroom(institution_id: str, data: ClassroomIn,
                     client: InstitutionClient = Depends(get_institution_client)):
    body = ClassroomCreate(**data.model_dump(), institution_id=institution_id)
    return ok(client.create_classroom(body).to_upstream(), "Classroom created")


@classroom_router.put("/{classroom_id}")
def update_classroom(classroom_id: str, data: ClassroomIn,
                     client: InstitutionClient = Depends(get_institution_client)):
    return ok(client.update_classroom(classroom_id, data).to_upstream(), "Classroom updated")


@classroom_router.delete("/{classroom_id}")
def delete_classroom(classroom_id: str, client: InstitutionClient = Depends(get_institution_client)):
    client.delete_classroom(classroom_id)
    return ok({"classroomId": classroom_id, "status": "INACTIVE"}, "Classroom deactivated")


@classroom_router.patch("/{classroom_id}/restore")
def restore_classroom(classroom_id: str, client: InstitutionClient = Depends(get_institution_client)):
    return ok(client.restore_classroom(classroom_id).to_upstream(), "Classroom restored")
