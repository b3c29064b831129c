"""Async client for the managed backend (REST tables, object storage, auth)."""

from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from blog.core.config import Settings
from blog.core.exceptions import BackendError


class BackendClient:
    """Thin typed wrapper over the backend's REST, storage and auth APIs.

    One instance is shared for the lifetime of the application. Calls that
    act on behalf of a signed-in user take its ``access_token`` so row-level
    security policies apply; anonymous calls use the public anon key.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self.base_url = settings.backend_url
        self.bucket = settings.storage_bucket
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.backend_timeout),
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # REST tables
    # ------------------------------------------------------------------

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
        """Select rows from a table.

        - **eq**: column -> value equality filters
        - **in_**: (column, values) membership filter
        - **search**: (term, columns) case-insensitive OR match
        - **order**: ``column.asc|desc``
        """
        params: dict[str, str] = {"select": "*"}
        params.update(self._eq_params(eq))
        if in_:
            column, values = in_
            params[column] = f"in.({','.join(_quote_value(v) for v in values)})"
        if search:
            term, columns = search
            pattern = _search_pattern(term)
            params["or"] = "(" + ",".join(f"{c}.ilike.{pattern}" for c in columns) + ")"
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        if offset is not None:
            params["offset"] = str(offset)

        response = await self._request(
            "GET",
            f"/rest/v1/{table}",
            params=params,
            access_token=access_token,
        )
        return response.json()

    async def insert(
        self,
        table: str,
        payload: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        """Insert one row and return it as stored."""
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=payload,
            headers={"Prefer": "return=representation"},
            access_token=access_token,
        )
        rows = response.json()
        if not rows:
            raise BackendError(f"Insert into {table} returned no rows")
        return rows[0]

    async def update(
        self,
        table: str,
        payload: dict[str, Any],
        *,
        eq: dict[str, Any],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them as stored."""
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=self._eq_params(eq),
            json=payload,
            headers={"Prefer": "return=representation"},
            access_token=access_token,
        )
        return response.json()

    async def delete(
        self,
        table: str,
        *,
        eq: dict[str, Any],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        """Delete matching rows and return them."""
        response = await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=self._eq_params(eq),
            headers={"Prefer": "return=representation"},
            access_token=access_token,
        )
        return response.json()

    # ------------------------------------------------------------------
    # Object storage
    # ------------------------------------------------------------------

    async def upload_object(
        self,
        path: str,
        data: bytes,
        content_type: str,
        *,
        access_token: str | None = None,
    ) -> str:
        """Upload bytes to the bucket. Returns the storage key."""
        response = await self._request(
            "POST",
            f"/storage/v1/object/{self.bucket}/{quote(path)}",
            content=data,
            headers={
                "Content-Type": content_type,
                "Cache-Control": f"max-age={self.settings.storage_cache_control}",
                "x-upsert": "false",
            },
            access_token=access_token,
        )
        body = response.json() if response.content else {}
        return body.get("Key", f"{self.bucket}/{path}")

    async def remove_objects(
        self,
        paths: list[str],
        *,
        access_token: str | None = None,
    ) -> None:
        """Remove objects from the bucket."""
        await self._request(
            "DELETE",
            f"/storage/v1/object/{self.bucket}",
            json={"prefixes": paths},
            access_token=access_token,
        )

    def public_url(self, path: str) -> str:
        """Public URL of an object in the (public-read) bucket."""
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def sign_in_with_password(self, email: str, password: str) -> dict[str, Any]:
        """Password grant. Returns the session payload (tokens + user)."""
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return response.json()

    async def get_user(self, access_token: str) -> dict[str, Any]:
        """Fetch the user owning an access token."""
        response = await self._request(
            "GET",
            "/auth/v1/user",
            access_token=access_token,
        )
        return response.json()

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""
        await self._request(
            "POST",
            "/auth/v1/logout",
            access_token=access_token,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _eq_params(eq: dict[str, Any] | None) -> dict[str, str]:
        return {column: f"eq.{value}" for column, value in (eq or {}).items()}

    def _headers(self, access_token: str | None) -> dict[str, str]:
        key = self.settings.backend_anon_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {access_token or key}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        request_headers = self._headers(access_token)
        if headers:
            request_headers.update(headers)

        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                headers=request_headers,
                **kwargs,
            )
        except httpx.RequestError as e:
            logger.error(f"Backend request error: {method} {path} - {e}")
            raise BackendError(str(e) or e.__class__.__name__) from e

        if response.status_code >= 400:
            message, code = _error_details(response)
            logger.warning(
                f"Backend request failed: {method} {path} - "
                f"{response.status_code} {message}"
            )
            raise BackendError(message, status_code=response.status_code, code=code)

        logger.debug(f"Backend request: {method} {path} - {response.status_code}")
        return response


def _quote_value(value: str) -> str:
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _search_pattern(term: str) -> str:
    # Reserved characters of the or=(...) filter grammar.
    cleaned = "".join(ch for ch in term if ch not in ',()"\\*')
    return f"*{cleaned.strip()}*"


def _error_details(response: httpx.Response) -> tuple[str, str | None]:
    """Extract a message and error code from the backend's error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}", None

    if not isinstance(data, dict):
        return str(data), None

    message = (
        data.get("message")
        or data.get("error_description")
        or data.get("msg")
        or data.get("error")
        or f"HTTP {response.status_code}"
    )
    code = data.get("code") or data.get("error_code")
    return str(message), str(code) if code is not None else None
