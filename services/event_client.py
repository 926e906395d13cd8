from typing import Any, List

from config.settings import settings
from schemas.events import Calendar, CalendarIn, Event, EventCalendarLink, EventIn
from services.upstream import UpstreamClient


class EventClient(UpstreamClient):
    """Events service: /events and /calendars share one base URL"""

    service = "events"

    def _events(self, endpoint: str) -> List[Event]:
        return [Event.model_validate(e) for e in self.unwrap_list(self.get(endpoint))]

    def _event(self, payload: Any) -> Event:
        return Event.model_validate(self.unwrap(payload) or {})

    # ===============================================================
    # events
    # ===============================================================

    def list_active(self) -> List[Event]:
        return self._events("/events")

    def list_inactive(self) -> List[Event]:
        return self._events("/events/inactive")

    def get_event(self, event_id: int) -> Event:
        return self._event(self.get(f"/events/{event_id}"))

    def create_event(self, data: EventIn) -> Event:
        return self._event(self.post("/events", json=data.to_upstream()))

    def update_event(self, event_id: int, data: EventIn) -> Event:
        return self._event(self.put(f"/events/{event_id}", json=data.to_upstream()))

    def delete_event(self, event_id: int) -> None:
        self.delete(f"/events/{event_id}")

    def restore_event(self, event_id: int) -> None:
        self.patch(f"/events/{event_id}/restore")

    # ===============================================================
    # calendars
    # ===============================================================

    def list_calendars(self) -> List[Calendar]:
        return [Calendar.model_validate(c) for c in self.unwrap_list(self.get("/calendars"))]

    def get_calendar(self, calendar_id: int) -> Calendar:
        return Calendar.model_validate(self.unwrap(self.get(f"/calendars/{calendar_id}")) or {})

    def create_calendar(self, data: CalendarIn) -> Calendar:
        return Calendar.model_validate(self.unwrap(self.post("/calendars", json=data.to_upstream())) or {})

    def calendar_links(self, calendar_id: int) -> List[EventCalendarLink]:
        payload = self.get(f"/calendars/{calendar_id}/event-calendar")
        return [EventCalendarLink.model_validate(link) for link in self.unwrap_list(payload)]

    def assign_events(self, calendar_id: int, event_ids: List[int]) -> None:
        # body is the bare id list
        self.post(f"/calendars/{calendar_id}/events", json=event_ids)


event_client = EventClient(settings.EVENT_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_event_client() -> EventClient:
    return event_client
