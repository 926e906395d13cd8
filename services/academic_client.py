from typing import Any, Dict, List

from config.settings import settings
from schemas.academic import CatalogEntry, CatalogRegistrationIn
from services.upstream import UpstreamClient


class AcademicClient(UpstreamClient):
    """Academic catalog service (courses, competencies, capacities, performances)"""

    service = "academic"

    def list_all(self) -> List[CatalogEntry]:
        return [CatalogEntry.model_validate(i) for i in self.unwrap_list(self.get("/list-all"))]

    def register(self, data: CatalogRegistrationIn) -> Any:
        """New registrations: ids are assigned upstream, the course starts active"""
        payload: Dict[str, Any] = {
            "institutionId": data.institution_id or settings.DEFAULT_INSTITUTION_ID,
            "course": {**data.course.to_upstream(exclude={"id"}), "active": True},
            "competency": data.competency.to_upstream(exclude={"id"}),
            "capacity": data.capacity.to_upstream(exclude={"id"}),
            "performance": data.performance.to_upstream(exclude={"id"}),
        }
        return self.post("/register-all", json=payload)

    def update(self, data: CatalogRegistrationIn) -> Any:
        payload = data.to_upstream(exclude_none=True)
        payload.setdefault("institutionId", settings.DEFAULT_INSTITUTION_ID)
        return self.put("/update-all", json=payload)

    def deactivate(self, course_id: str) -> None:
        self.put(f"/deactivate/{course_id}")

    def activate(self, course_id: str) -> None:
        self.put(f"/activate/{course_id}")


academic_client = AcademicClient(settings.ACADEMIC_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_academic_client() -> AcademicClient:
    return academic_client
