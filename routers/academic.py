from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from config.settings import settings
from schemas.academic import CatalogEntry, CatalogRegistrationIn, StatusFilter
from schemas.common import ok
from services.academic_client import AcademicClient, get_academic_client
from services.listing import contains, equals, list_response

router = APIRouter(prefix="/academic", tags=["Academic catalog"])


def _find(client: AcademicClient, course_id: str) -> CatalogEntry:
    # the service has no single-record endpoint; detail pages search the full list
    for entry in client.list_all():
        if entry.course.id == course_id:
            return entry
    raise HTTPException(status_code=404, detail="Course not found")


# ==========================================================
# [list] search / filter / page
# ==========================================================
@router.get("")
def list_catalog(
    search: Optional[str] = None,
    status: StatusFilter = "all",
    area: Optional[str] = None,
    age_level: Optional[str] = Query(default=None, alias="ageLevel"),
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(default=None, ge=1, le=settings.MAX_PAGE_SIZE),
    client: AcademicClient = Depends(get_academic_client),
):
    entries = client.list_all()
    active = sum(1 for e in entries if e.course.active)
    stats = {
        "total": len(entries),
        "active": active,
        "inactive": len(entries) - active,
    }

    filtered = [
        e for e in entries
        if (contains(e.course.code, search) or contains(e.course.name, search))
        and (status == "all" or e.course.active == (status == "active"))
        and equals(e.course.area_curricular, area)
        and equals(e.course.age_level, age_level)
    ]
    filtered = sorted(filtered, key=lambda e: (e.course.code or "").lower())

    areas = sorted({e.course.area_curricular for e in entries if e.course.area_curricular})
    return list_response(
        filtered, page, size or settings.DEFAULT_PAGE_SIZE, sort="course.code,asc",
        stats=stats, filters={"areas": areas},
    )


@router.get("/{course_id}")
def get_catalog_entry(course_id: str, client: AcademicClient = Depends(get_academic_client)):
    return ok(_find(client, course_id).to_upstream())


# ==========================================================
# [write] register / update
# ==========================================================
@router.post("", status_code=201)
def register_catalog(data: CatalogRegistrationIn, client: AcademicClient = Depends(get_academic_client)):
    created = client.register(data)
    return ok(created, "Course registered")


@router.put("/{course_id}")
def update_catalog(course_id: str, data: CatalogRegistrationIn,
                   client: AcademicClient = Depends(get_academic_client)):
    data.course.id = course_id
    updated = client.update(data)
    return ok(updated, "Course updated")


# ==========================================================
# [status] soft delete / restore
# ==========================================================
@router.patch("/{course_id}/deactivate")
def deactivate_course(course_id: str, client: AcademicClient = Depends(get_academic_client)):
    client.deactivate(course_id)
    return ok({"id": course_id, "active": False}, "Course deactivated")


@router.patch("/{course_id}/activate")
def activate_course(course_id: str, client: AcademicClient = Depends(get_academic_client)):
    client.activate(course_id)
    return ok({"id": course_id, "active": True}, "Course activated")
