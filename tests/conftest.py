"""Pytest configuration and fixtures."""

import copy
import io
import time
import uuid
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from PIL import Image

from blog.core.config import Settings, get_settings
from blog.core.deps import get_backend
from blog.core.exceptions import BackendError
from blog.core.session import SessionContext
from blog.main import app
from blog.services.record_mapper import calculate_read_time

TEST_USER_ID = "5b1f0c7e-8d7a-4a55-9c2e-2f0b3c9d1a10"
TEST_EMAIL = "kate@example.com"
TEST_PASSWORD = "correct-horse"


def make_token(
    user_id: str = TEST_USER_ID,
    email: str = TEST_EMAIL,
    audience: str | None = None,
    secret: str | None = None,
) -> str:
    """Mint an access token the way the backend auth service does."""
    settings = get_settings()
    claims = {
        "sub": user_id,
        "email": email,
        "aud": audience or settings.jwt_audience,
        "role": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    return jwt.encode(
        claims,
        secret or settings.backend_jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def make_png(width: int = 40, height: int = 30) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "red").save(buffer, format="PNG")
    return buffer.getvalue()


class FakeBackend:
    """In-memory stand-in for BackendClient.

    Every call is appended to ``calls`` as ``(operation, *args)``. Set
    ``failures[operation]`` to a BackendError to make that operation fail.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.bucket = settings.storage_bucket
        self.tables: dict[str, list[dict[str, Any]]] = {
            settings.posts_table: [],
            settings.images_table: [],
        }
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, BackendError] = {}
        self.users = {
            TEST_EMAIL: {
                "password": TEST_PASSWORD,
                "user": {
                    "id": TEST_USER_ID,
                    "email": TEST_EMAIL,
                    "user_metadata": {"full_name": "Kate Goldenring"},
                    "created_at": "2024-01-01T00:00:00Z",
                },
            }
        }

    def _check(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]

    # Tables

    def seed(self, table: str, **row: Any) -> dict[str, Any]:
        """Insert a row directly, bypassing call recording."""
        now = datetime.now(timezone.utc).isoformat()
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        if table == self.settings.posts_table:
            row.setdefault("read_time", calculate_read_time(row.get("content", "")))
        self.tables[table].append(row)
        return copy.deepcopy(row)

    @staticmethod
    def _matches(row: dict[str, Any], eq: dict[str, Any] | None) -> bool:
        return all(str(row.get(col)) == str(value) for col, value in (eq or {}).items())

    async def select(
        self,
        table: str,
        *,
        eq: dict[str, Any] | None = None,
        in_: tuple[str, list[str]] | None = None,
        search: tuple[str, list[str]] | None = None,
        order: str | None = "created_at.desc",
        limit: int | None = None,
        offset: int | None = None,
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(("select", table, eq, in_, search))
        self._check("select")

        rows = [row for row in self.tables[table] if self._matches(row, eq)]
        if in_:
            column, values = in_
            rows = [row for row in rows if row.get(column) in values]
        if search:
            term, columns = search
            term = term.lower()
            rows = [
                row for row in rows
                if any(term in str(row.get(c) or "").lower() for c in columns)
            ]
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda row: row.get(column) or "", reverse=direction == "desc")

        start = offset or 0
        end = start + limit if limit is not None else None
        return copy.deepcopy(rows[start:end])

    async def insert(
        self,
        table: str,
        payload: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        self.calls.append(("insert", table, copy.deepcopy(payload)))
        self._check("insert")
        return self.seed(table, **copy.deepcopy(payload))

    async def update(
        self,
        table: str,
        payload: dict[str, Any],
        *,
        eq: dict[str, Any],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(("update", table, copy.deepcopy(payload), eq))
        self._check("update")

        updated = []
        for row in self.tables[table]:
            if self._matches(row, eq):
                row.update(copy.deepcopy(payload))
                row["updated_at"] = datetime.now(timezone.utc).isoformat()
                if table == self.settings.posts_table and "content" in payload:
                    row["read_time"] = calculate_read_time(row["content"])
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(
        self,
        table: str,
        *,
        eq: dict[str, Any],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(("delete", table, eq))
        self._check("delete")

        removed = [row for row in self.tables[table] if self._matches(row, eq)]
        self.tables[table] = [
            row for row in self.tables[table] if not self._matches(row, eq)
        ]
        return removed

    # Storage

    async def upload_object(
        self,
        path: str,
        data: bytes,
        content_type: str,
        *,
        access_token: str | None = None,
    ) -> str:
        self.calls.append(("upload_object", path, content_type))
        self._check("upload_object")
        self.objects[path] = data
        return f"{self.bucket}/{path}"

    async def remove_objects(
        self,
        paths: list[str],
        *,
        access_token: str | None = None,
    ) -> None:
        self.calls.append(("remove_objects", list(paths)))
        self._check("remove_objects")
        for path in paths:
            self.objects.pop(path, None)

    def public_url(self, path: str) -> str:
        return (
            f"{self.settings.backend_url}/storage/v1/object/public/{self.bucket}/{path}"
        )

    # Auth

    async def sign_in_with_password(self, email: str, password: str) -> dict[str, Any]:
        self.calls.append(("sign_in_with_password", email))
        self._check("sign_in_with_password")

        account = self.users.get(email)
        if not account or account["password"] != password:
            raise BackendError(
                "Invalid login credentials",
                status_code=400,
                code="invalid_credentials",
            )
        user = account["user"]
        return {
            "access_token": make_token(user["id"], user["email"]),
            "refresh_token": "refresh-token",
            "expires_in": 3600,
            "token_type": "bearer",
            "user": copy.deepcopy(user),
        }

    async def get_user(self, access_token: str) -> dict[str, Any]:
        self.calls.append(("get_user",))
        self._check("get_user")
        return copy.deepcopy(self.users[TEST_EMAIL]["user"])

    async def sign_out(self, access_token: str) -> None:
        self.calls.append(("sign_out",))
        self._check("sign_out")


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def fake_backend(settings: Settings) -> FakeBackend:
    return FakeBackend(settings)


@pytest.fixture
def session() -> SessionContext:
    """Authenticated session for service-level tests."""
    from blog.services.auth_service import AuthService

    return AuthService(None).restore(make_token())


@pytest_asyncio.fixture(scope="function")
async def client(fake_backend: FakeBackend) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with the backend replaced by the fake."""
    app.dependency_overrides[get_backend] = lambda: fake_backend

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {make_token()}"}


def storage_url(settings: Settings, path: str) -> str:
    return f"{settings.backend_url}/storage/v1/object/public/{settings.storage_bucket}/{path}"


FLICKR_IMAGE = "https://live.staticflickr.com/65535/53012345678_abcdef1234_b.jpg"
FLICKR_PAGE = "https://www.flickr.com/photos/someuser/53012345678/in/album-72177720310000000/"
FLICKR_SNIPPET = (
    f'<a data-flickr-embed="true" href="{FLICKR_PAGE}" title="Mount Rainier at dawn">'
    f'<img src="{FLICKR_IMAGE}" width="1024" height="683" alt="Rainier from Paradise"/></a>'
    '<script async src="//embedr.flickr.com/assets/client-code.js" charset="utf-8"></script>'
)
