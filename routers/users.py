from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from config.settings import settings
from schemas.common import Status, ok
from schemas.users import UserCreate, UserRole, UserUpdate
from services.listing import equals, list_response
from services.user_client import UserClient, get_user_client

router = APIRouter(prefix="/users", tags=["Users"])


def _search_blob(u) -> str:
    return " ".join(
        filter(None, [u.first_name, u.last_name, u.email, u.user_name, u.document_number])
    ).lower()


# ==========================================================
# [list]
# ==========================================================
@router.get("")
def list_users(
    search: Optional[str] = None,
    status: Optional[Status] = None,
    role: Optional[UserRole] = None,
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(default=None, ge=1, le=settings.MAX_PAGE_SIZE),
    client: UserClient = Depends(get_user_client),
):
    users = client.list_all()
    term = (search or "").strip().lower()
    filtered = [
        u for u in users
        if equals(u.status, status.value if status else None)
        and equals(u.role, role.value if role else None)
        and (not term or term in _search_blob(u))
    ]
    filtered.sort(key=lambda u: ((u.last_name or "").lower(), (u.first_name or "").lower()))
    stats = {
        "total": len(users),
        "active": sum(1 for u in users if u.status == Status.ACTIVE.value),
        "inactive": sum(1 for u in users if u.status == Status.INACTIVE.value),
    }
    return list_response(filtered, page, size or settings.DEFAULT_PAGE_SIZE,
                         sort="lastName,asc", stats=stats)


@router.get("/status/{status}")
def users_by_status(status: Status, client: UserClient = Depends(get_user_client)):
    return ok([u.to_upstream() for u in client.by_status(status.value)])


@router.get("/{user_id}")
def get_user(user_id: str, client: UserClient = Depends(get_user_client)):
    return ok(client.get_by_id(user_id).to_upstream())


# ==========================================================
# [write]
# ==========================================================
@router.post("", status_code=201)
def create_user(data: UserCreate, client: UserClient = Depends(get_user_client)):
    return ok(client.create(data).to_upstream(), "User created")


@router.put("/{user_id}")
def update_user(user_id: str, data: UserUpdate, client: UserClient = Depends(get_user_client)):
    if not data.model_fields_set:
        raise HTTPException(status_code=400, detail="Nothing to update")
    return ok(client.update(user_id, data).to_upstream(), "User updated")


# ==========================================================
# [status] soft delete / restore
# ==========================================================
@router.delete("/{user_id}")
def delete_user(user_id: str, client: UserClient = Depends(get_user_client)):
    client.soft_delete(user_id)
    return ok({"userId": user_id, "status": Status.INACTIVE.value}, "User deactivated")


@router.patch("/{user_id}/restore")
def restore_user(user_id: str, client: UserClient = Depends(get_user_client)):
    return ok(client.restore(user_id).to_upstream(), "User restored")
