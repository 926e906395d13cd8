from typing import List, Optional

from fastapi import APIRouter, Depends

from schemas.common import ok
from schemas.events import AssignEvents, CalendarIn, Event
from services.event_client import EventClient, get_event_client
from services.forms import ErrorCollector
from services.listing import contains

router = APIRouter(prefix="/calendars", tags=["Calendars"])


def _available(client: EventClient, calendar_id: int) -> List[Event]:
    """Active events of the calendar's institution that are not linked yet"""
    calendar = client.get_calendar(calendar_id)
    linked = {link.event_id for link in client.calendar_links(calendar_id)}
    return [
        e for e in client.list_active()
        if e.institution_id == calendar.institution_id and e.event_id not in linked
    ]


@router.get("")
def list_calendars(client: EventClient = Depends(get_event_client)):
    calendars = sorted(client.list_calendars(), key=lambda c: c.academic_year or 0, reverse=True)
    return ok([c.to_upstream() for c in calendars])


@router.get("/{calendar_id}")
def get_calendar(calendar_id: int, client: EventClient = Depends(get_event_client)):
    return ok(client.get_calendar(calendar_id).to_upstream())


@router.post("", status_code=201)
def create_calendar(data: CalendarIn, client: EventClient = Depends(get_event_client)):
    errors = ErrorCollector()
    # one calendar per institution and academic year
    taken = any(
        c.institution_id == data.institution_id and c.academic_year == data.academic_year
        for c in client.list_calendars()
    )
    errors.check(not taken, "academicYear", "This institution already has a calendar for that year")
    errors.raise_if_any()
    return ok(client.create_calendar(data).to_upstream(), "Calendar created")


# ==========================================================
# [events] linked / available / assign
# ==========================================================
@router.get("/{calendar_id}/events")
def calendar_events(calendar_id: int, client: EventClient = Depends(get_event_client)):
    linked = {link.event_id for link in client.calendar_links(calendar_id)}
    events = [e for e in client.list_active() + client.list_inactive() if e.event_id in linked]
    events.sort(key=lambda e: e.start_date or "")
    return ok([e.display() for e in events])


@router.get("/{calendar_id}/available-events")
def available_events(calendar_id: int, q: Optional[str] = None,
                     client: EventClient = Depends(get_event_client)):
    events = [e for e in _available(client, calendar_id) if contains(e.title, q)]
    events.sort(key=lambda e: e.start_date or "")
    return ok([e.display() for e in events])


@router.post("/{calendar_id}/events")
def assign_events(calendar_id: int, data: AssignEvents, client: EventClient = Depends(get_event_client)):
    available = {e.event_id for e in _available(client, calendar_id)}
    errors = ErrorCollector()
    for event_id in data.event_ids:
        errors.check(
            event_id in available, f"eventIds.{event_id}",
            "Event does not belong to this institution or is already assigned",
        )
    errors.raise_if_any()
    ids = list(dict.fromkeys(data.event_ids))
    client.assign_events(calendar_id, ids)
    return ok({"calendarId": calendar_id, "eventIds": ids}, f"{len(ids)} event(s) assigned")
