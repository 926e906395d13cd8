from typing import Any, Dict, List

from config.settings import settings
from schemas.institutions import (
    Classroom, ClassroomCreate, ClassroomIn, Institution, InstitutionCreate, InstitutionSections,
)
from services.upstream import UpstreamClient


class InstitutionClient(UpstreamClient):
    """
    Institution service (institutions + classrooms, one host).
    Responses come wrapped in {success, message, data}; success=false is an error.
    """

    service = "institutions"

    def _institutions(self, endpoint: str) -> List[Institution]:
        return [Institution.model_validate(i) for i in self.unwrap_list(self.get(endpoint))]

    def _institution(self, payload: Any) -> Institution:
        return Institution.model_validate(self.unwrap(payload) or {})

    def _classroom(self, payload: Any) -> Classroom:
        return Classroom.model_validate(self.unwrap(payload) or {})

    # ===============================================================
    # institutions
    # ===============================================================

    def list_all(self) -> List[Institution]:
        return self._institutions("/institutions")

    def list_active(self) -> List[Institution]:
        return self._institutions("/institutions/active")

    def list_inactive(self) -> List[Institution]:
        return self._institutions("/institutions/inactive")

    def get_by_id(self, institution_id: str) -> Institution:
        """Detail with director, auxiliaries and classrooms expanded"""
        return self._institution(self.get(f"/institutions/{institution_id}"))

    def create_with_users(self, payload: Dict[str, Any]) -> Institution:
        return self._institution(self.post("/institutions/with-users", json=payload))

    def update(self, institution_id: str, payload: Dict[str, Any]) -> Institution:
        return self._institution(self.put(f"/institutions/{institution_id}", json=payload))

    def soft_delete(self, institution_id: str) -> None:
        self.unwrap(self.delete(f"/institutions/{institution_id}"))

    def restore(self, institution_id: str) -> Institution:
        return self._institution(self.put(f"/institutions/{institution_id}/restore"))

    def options(self) -> List[Dict[str, Any]]:
        """{institutionId, name} pairs for form selects"""
        return [{"institutionId": i.institution_id, "name": i.name} for i in self.list_all()]

    # ===============================================================
    # classrooms
    # ===============================================================

    def create_classroom(self, data: ClassroomCreate) -> Classroom:
        return self._classroom(self.post("/classrooms", json=data.to_upstream(exclude_none=True)))

    def update_classroom(self, classroom_id: str, data: ClassroomIn) -> Classroom:
        return self._classroom(self.put(f"/classrooms/{classroom_id}", json=data.to_upstream(exclude_none=True)))

    def delete_classroom(self, classroom_id: str) -> None:
        self.unwrap(self.delete(f"/classrooms/{classroom_id}"))

    def restore_classroom(self, classroom_id: str) -> Classroom:
        return self._classroom(self.patch(f"/classrooms/{classroom_id}/restore"))


def institution_payload(data: InstitutionCreate) -> Dict[str, Any]:
    """Form -> upstream body; staff roles are fixed by their slot"""
    payload = data.to_upstream(exclude_none=True)
    payload["director"]["role"] = "DIRECTOR"
    for aux in payload.get("auxiliaries", []):
        aux["role"] = "AUXILIAR"
    return payload


def director_change_payload(current: Institution, director_id: str) -> Dict[str, Any]:
    """
    Update body that keeps everything as it is except the director.
    The detail response expands staff into user objects, so auxiliary ids
    are read back from them when the id list is empty.
    """
    payload = current.to_upstream(include=set(InstitutionSections.model_fields), exclude_none=True)
    payload["directorId"] = director_id
    payload["auxiliaryIds"] = current.auxiliary_ids or [a.user_id for a in current.auxiliaries if a.user_id]
    return payload


institution_client = InstitutionClient(settings.INSTITUTION_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_institution_client() -> InstitutionClient:
    return institution_client
