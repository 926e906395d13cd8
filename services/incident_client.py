from typing import Any, List

from config.settings import settings
from schemas.behavior import Incident, IncidentCreate, IncidentUpdate
from services.upstream import UpstreamClient


class IncidentClient(UpstreamClient):
    """Incident (behavior) service"""

    service = "incidents"

    def _incidents(self, endpoint: str) -> List[Incident]:
        return [Incident.model_validate(i) for i in self.unwrap_list(self.get(endpoint))]

    def _incident(self, payload: Any) -> Incident:
        return Incident.model_validate(self.unwrap(payload) or {})

    def list_all(self) -> List[Incident]:
        return self._incidents("")

    def by_student(self, student_id: str) -> List[Incident]:
        return self._incidents(f"/student/{student_id}")

    def get_by_id(self, incident_id: str) -> Incident:
        return self._incident(self.get(f"/{incident_id}"))

    def create(self, data: IncidentCreate) -> Incident:
        # classroom and institution are resolved upstream from the student
        return self._incident(self.post("", json=data.to_upstream()))

    def update(self, incident_id: str, data: IncidentUpdate) -> Incident:
        return self._incident(self.put(f"/{incident_id}", json=data.to_upstream(exclude_none=True)))


incident_client = IncidentClient(settings.INCIDENT_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_incident_client() -> IncidentClient:
    return incident_client
