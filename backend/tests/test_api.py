import uuid
from collections.abc import Iterator

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from taskdesk.dependencies import get_db
from taskdesk.domain.roles import AdminPermissions
from taskdesk.main import app
from taskdesk.models import Base, User
from taskdesk.utils.security import create_access_token, hash_password


class Api:
    def __init__(self, client: TestClient, sync_engine) -> None:
        self.client = client
        self.sync_engine = sync_engine

    def seed(
        self,
        role: str = "user",
        *,
        email: str | None = None,
        password: str | None = None,
        **flags: bool,
    ) -> uuid.UUID:
        perms = AdminPermissions.defaults().merged(flags).to_dict() if role == "admin" else None
        with Session(self.sync_engine) as db:
            user = User(
                name=f"{role} account",
                email=email or f"{uuid.uuid4().hex[:8]}@example.com",
                password_hash=hash_password(password) if password else None,
                role=role,
                admin_permissions=perms,
            )
            db.add(user)
            db.commit()
            return user.id

    def count_users(self) -> int:
        with Session(self.sync_engine) as db:
            return db.execute(select(func.count()).select_from(User)).scalar_one()

    def stored(self, user_id: uuid.UUID) -> User | None:
        with Session(self.sync_engine, expire_on_commit=False) as db:
            return db.get(User, user_id)

    @staticmethod
    def auth(user_id: uuid.UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}


@pytest.fixture
def api(tmp_path) -> Iterator[Api]:
    db_path = tmp_path / "api.db"
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    factory = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield Api(TestClient(app), sync_engine)
    finally:
        app.dependency_overrides.pop(get_db, None)
        sync_engine.dispose()


def test_register_login_and_read_profile(api: Api) -> None:
    response = api.client.post(
        "/auth/register",
        json={"name": "Ada", "email": "Ada@Example.com", "password": "long-secret"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    user = response.json()["user"]
    assert user["email"] == "ada@example.com"
    assert user["role"] == "user"
    assert "password_hash" not in user
    assert "admin_permissions" not in user

    response = api.client.post(
        "/auth/login", json={"email": "ada@example.com", "password": "long-secret"}
    )
    assert response.status_code == status.HTTP_200_OK
    token = response.json()["access_token"]

    response = api.client.get("/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Ada"


def test_register_duplicate_email_conflicts(api: Api) -> None:
    api.seed(email="taken@example.com")
    response = api.client.post(
        "/auth/register",
        json={"name": "Again", "email": "taken@example.com", "password": "long-secret"},
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"]["code"] == "CONFLICT_ERROR"


def test_login_with_wrong_password_is_unauthorized(api: Api) -> None:
    api.seed(email="member@example.com", password="right-password")
    response = api.client.post(
        "/auth/login", json={"email": "member@example.com", "password": "wrong-password"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["code"] == "AUTH_ERROR"


def test_missing_token_uses_error_envelope(api: Api) -> None:
    response = api.client.get("/users/profile")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {
        "error": {"code": "AUTH_ERROR", "message": "Not authenticated", "details": None}
    }


def test_plain_user_cannot_reach_admin_routes(api: Api) -> None:
    member = api.seed()
    response = api.client.get("/admin/users", headers=api.auth(member))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["details"] == {"reason": "admin-required"}


def test_admin_without_info_flag_gets_update_info_reason(api: Api) -> None:
    actor = api.seed("admin", can_update_user_info=False)
    member = api.seed()

    response = api.client.patch(
        f"/admin/users/{member}", json={"name": "Renamed"}, headers=api.auth(actor)
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    error = response.json()["error"]
    assert error["code"] == "PERMISSION_DENIED"
    assert error["details"]["reason"] == "update-info"
    assert api.stored(member).name == "user account"


def test_super_admin_demotion_drops_permissions_key(api: Api) -> None:
    boss = api.seed("super-admin")
    target = api.seed("admin", can_delete_users=True)

    response = api.client.patch(
        f"/admin/users/{target}", json={"role": "user"}, headers=api.auth(boss)
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["role"] == "user"
    assert "admin_permissions" not in body
    assert api.stored(target).admin_permissions is None


def test_unknown_role_is_validation_error(api: Api) -> None:
    boss = api.seed("super-admin")
    member = api.seed()

    response = api.client.patch(
        f"/admin/users/{member}", json={"role": "owner"}, headers=api.auth(boss)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_bulk_delete_rejects_whole_batch(api: Api) -> None:
    actor = api.seed("admin", can_delete_users=True)
    ids = [str(api.seed()), str(api.seed("admin"))]
    before = api.count_users()

    response = api.client.post(
        "/admin/users/bulk-delete", json={"user_ids": ids}, headers=api.auth(actor)
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["details"]["reason"] == "scope"
    assert api.count_users() == before


def test_delete_self_is_forbidden(api: Api) -> None:
    boss = api.seed("super-admin")
    response = api.client.delete(f"/admin/users/{boss}", headers=api.auth(boss))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["details"]["reason"] == "self-delete"


def test_upsert_creates_then_updates(api: Api) -> None:
    boss = api.seed("super-admin")
    payload = {
        "name": "Helper",
        "email": "helper@example.com",
        "password": "helper-secret",
        "role": "admin",
    }

    created = api.client.post("/admin/users", json=payload, headers=api.auth(boss))
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["admin_permissions"] == AdminPermissions.defaults().to_dict()

    updated = api.client.post(
        "/admin/users",
        json={"email": "helper@example.com", "role": "user"},
        headers=api.auth(boss),
    )
    assert updated.status_code == status.HTTP_200_OK
    assert updated.json()["id"] == created.json()["id"]
    assert "admin_permissions" not in updated.json()


def test_my_permissions_for_admin(api: Api) -> None:
    actor = api.seed("admin", can_delete_users=True)
    response = api.client.get("/users/me/permissions", headers=api.auth(actor))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["role"] == "admin"
    assert body["admin_permissions"]["can_delete_users"] is True
    assert "users:delete" in body["permissions"]


def test_todo_routes_and_stats(api: Api) -> None:
    member = api.seed()
    headers = api.auth(member)

    created = api.client.post("/todos", json={"title": "Ship it"}, headers=headers)
    assert created.status_code == status.HTTP_201_CREATED
    todo_id = created.json()["id"]

    updated = api.client.put(f"/todos/{todo_id}", json={"completed": True}, headers=headers)
    assert updated.json()["completed"] is True

    stats = api.client.get("/stats", headers=headers).json()
    assert stats["user_stats"] == {"total": 1, "active": 0, "completed": 1, "pending": 0}
    assert stats["admin_stats"] is None

    other = api.seed()
    response = api.client.get(f"/todos/{todo_id}", headers=api.auth(other))
    assert response.status_code == status.HTTP_404_NOT_FOUND

    deleted = api.client.delete(f"/todos/{todo_id}", headers=headers)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert api.client.get("/todos", headers=headers).json() == []


def test_admin_todo_listing_is_super_admin_only(api: Api) -> None:
    admin = api.seed("admin", can_delete_users=True, can_promote_to_admin=True)
    response = api.client.get("/admin/todos", headers=api.auth(admin))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["details"]["reason"] == "todos-admin"

    boss = api.seed("super-admin")
    response = api.client.get("/admin/todos?limit=5", headers=api.auth(boss))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["pagination"] == {"total": 0, "page": 1, "limit": 5, "pages": 0}
