from typing import Any, List

from config.settings import settings
from schemas.users import User, UserCreate, UserUpdate
from services.upstream import UpstreamClient, UpstreamError


class UserClient(UpstreamClient):
    """User service; every response is wrapped in {success, message, data}"""

    service = "users"

    def _user(self, payload: Any) -> User:
        return User.model_validate(self.unwrap(payload) or {})

    def list_all(self) -> List[User]:
        return [User.model_validate(u) for u in self.unwrap_list(self.get(""))]

    def by_status(self, status: str) -> List[User]:
        return [User.model_validate(u) for u in self.unwrap_list(self.get(f"/status/{status}"))]

    def get_by_id(self, user_id: str) -> User:
        return self._user(self.get(f"/{user_id}"))

    def create(self, data: UserCreate) -> User:
        return self._user(self.post("", json=data.to_upstream()))

    def update(self, user_id: str, data: UserUpdate) -> User:
        try:
            return self._user(self.put(f"/{user_id}", json=data.to_upstream(exclude_none=True)))
        except UpstreamError as e:
            if e.status_code == 404:
                raise UpstreamError(self.service, 404, "User not found")
            raise

    def soft_delete(self, user_id: str) -> None:
        self.delete(f"/{user_id}")

    def restore(self, user_id: str) -> User:
        return self._user(self.patch(f"/{user_id}/restore"))


user_client = UserClient(settings.USER_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_user_client() -> UserClient:
    return user_client
