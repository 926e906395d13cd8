from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from config.settings import settings
from schemas.common import ok
from schemas.events import Event, EventIn, EventType
from services.event_client import EventClient, get_event_client
from services.institution_client import InstitutionClient, get_institution_client
from services.listing import contains, equals, paginate

router = APIRouter(prefix="/events", tags=["Events"])

EVENTS_PAGE_SIZE = 10


def order_upcoming_first(events: List[Event], today: Optional[date] = None) -> List[Event]:
    """Today and future events soonest first, then past events most recent first"""
    today = (today or date.today()).isoformat()
    upcoming = [e for e in events if (e.start_date or "")[:10] >= today]
    past = [e for e in events if (e.start_date or "")[:10] < today]
    upcoming.sort(key=lambda e: e.start_date or "")
    past.sort(key=lambda e: e.start_date or "", reverse=True)
    return upcoming + past


# ==========================================================
# [list]
# ==========================================================
@router.get("")
def list_events(
    active: bool = True,
    title: Optional[str] = None,
    institution: Optional[str] = None,
    event_type: Optional[EventType] = Query(default=None, alias="eventType"),
    page: int = Query(1, ge=1),
    size: int = Query(EVENTS_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    client: EventClient = Depends(get_event_client),
):
    events = client.list_active() if active else client.list_inactive()
    filtered = [
        e for e in events
        if contains(e.title, title)
        and equals(e.institution_name, institution)
        and equals(e.event_type, event_type.value if event_type else None)
    ]
    ordered = order_upcoming_first(filtered)
    page_items, meta = paginate(ordered, page, size, sort="startDate,upcoming")
    return {"success": True, "data": [e.display() for e in page_items], "meta": meta.model_dump()}


@router.get("/institutions")
def event_institutions(institutions: InstitutionClient = Depends(get_institution_client)):
    return ok(institutions.options())


@router.get("/{event_id}")
def get_event(event_id: int, client: EventClient = Depends(get_event_client)):
    return ok(client.get_event(event_id).display())


# ==========================================================
# [write]
# ==========================================================
@router.post("", status_code=201)
def create_event(data: EventIn, client: EventClient = Depends(get_event_client)):
    return ok(client.create_event(data).display(), "Event created")


@router.put("/{event_id}")
def update_event(event_id: int, data: EventIn, client: EventClient = Depends(get_event_client)):
    return ok(client.update_event(event_id, data).display(), "Event updated")


# ==========================================================
# [status] soft delete / restore
# ==========================================================
@router.delete("/{event_id}")
def delete_event(event_id: int, client: EventClient = Depends(get_event_client)):
    client.delete_event(event_id)
    return ok({"eventId": event_id, "status": "INACTIVE"}, "Event deactivated")


@router.patch("/{event_id}/restore")
def restore_event(event_id: int, client: EventClient = Depends(get_event_client)):
    client.restore_event(event_id)
    return ok({"eventId": event_id, "status": "ACTIVE"}, "Event restored")
