"""Tests for the backend REST/storage/auth client."""

import json

import httpx
import pytest
import pytest_asyncio

from blog.backend.client import BackendClient
from blog.core.config import Settings
from blog.core.exceptions import BackendError

BASE_URL = "http://backend.test"


class Recorder:
    """MockTransport handler returning queued responses and keeping requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, json=[])

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest_asyncio.fixture
async def backend(recorder: Recorder):
    settings = Settings(
        backend_url=f"{BASE_URL}/",
        backend_anon_key="anon-key",
        storage_bucket="blog-images",
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    backend = BackendClient(settings, client=client)
    yield backend
    await backend.aclose()


@pytest.mark.asyncio
async def test_select_filters(backend: BackendClient, recorder: Recorder):
    """Test that filters are encoded as REST query parameters."""
    recorder.responses.append(httpx.Response(200, json=[{"id": "1"}]))

    rows = await backend.select(
        "blog_posts",
        eq={"category": "travel"},
        limit=5,
        offset=10,
    )

    assert rows == [{"id": "1"}]
    request = recorder.last
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/blog_posts"
    params = request.url.params
    assert params["select"] == "*"
    assert params["category"] == "eq.travel"
    assert params["order"] == "created_at.desc"
    assert params["limit"] == "5"
    assert params["offset"] == "10"


@pytest.mark.asyncio
async def test_select_anonymous_headers(backend: BackendClient, recorder: Recorder):
    await backend.select("blog_posts")

    headers = recorder.last.headers
    assert headers["apikey"] == "anon-key"
    assert headers["authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_select_user_token(backend: BackendClient, recorder: Recorder):
    await backend.select("blog_posts", access_token="user-jwt")

    headers = recorder.last.headers
    assert headers["apikey"] == "anon-key"
    assert headers["authorization"] == "Bearer user-jwt"


@pytest.mark.asyncio
async def test_select_in_and_search(backend: BackendClient, recorder: Recorder):
    await backend.select(
        "blog_images",
        in_=("public_url", ["http://a/x.jpg", 'say "hi"']),
        order=None,
    )
    params = recorder.last.url.params
    assert params["public_url"] == 'in.("http://a/x.jpg","say \\"hi\\"")'
    assert "order" not in params

    await backend.select("blog_posts", search=("Mont (Blanc), *", ["title", "content"]))
    params = recorder.last.url.params
    assert params["or"] == "(title.ilike.*Mont Blanc*,content.ilike.*Mont Blanc*)"


@pytest.mark.asyncio
async def test_insert_returns_row(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(httpx.Response(201, json=[{"id": "new", "title": "t"}]))

    row = await backend.insert("blog_posts", {"title": "t"}, access_token="user-jwt")

    assert row == {"id": "new", "title": "t"}
    request = recorder.last
    assert request.method == "POST"
    assert request.headers["prefer"] == "return=representation"
    assert json.loads(request.content) == {"title": "t"}


@pytest.mark.asyncio
async def test_insert_without_rows(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(httpx.Response(201, json=[]))

    with pytest.raises(BackendError):
        await backend.insert("blog_posts", {"title": "t"})


@pytest.mark.asyncio
async def test_update_and_delete(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(httpx.Response(200, json=[{"id": "1"}]))
    rows = await backend.update("blog_posts", {"title": "u"}, eq={"id": "1"})
    assert rows == [{"id": "1"}]
    assert recorder.last.method == "PATCH"
    assert recorder.last.url.params["id"] == "eq.1"

    recorder.responses.append(httpx.Response(200, json=[]))
    rows = await backend.delete("blog_posts", eq={"id": "1"})
    assert rows == []
    assert recorder.last.method == "DELETE"
    assert recorder.last.headers["prefer"] == "return=representation"


@pytest.mark.asyncio
async def test_upload_object(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(httpx.Response(200, json={"Key": "blog-images/posts/a.jpg"}))

    key = await backend.upload_object("posts/a.jpg", b"jpeg-bytes", "image/jpeg")

    assert key == "blog-images/posts/a.jpg"
    request = recorder.last
    assert request.method == "POST"
    assert request.url.path == "/storage/v1/object/blog-images/posts/a.jpg"
    assert request.headers["content-type"] == "image/jpeg"
    assert request.headers["cache-control"] == "max-age=3600"
    assert request.headers["x-upsert"] == "false"
    assert request.content == b"jpeg-bytes"


@pytest.mark.asyncio
async def test_remove_objects(backend: BackendClient, recorder: Recorder):
    await backend.remove_objects(["posts/a.jpg", "b.jpg"])

    request = recorder.last
    assert request.method == "DELETE"
    assert request.url.path == "/storage/v1/object/blog-images"
    assert json.loads(request.content) == {"prefixes": ["posts/a.jpg", "b.jpg"]}


@pytest.mark.asyncio
async def test_public_url(backend: BackendClient):
    assert backend.public_url("posts/a b.jpg") == (
        f"{BASE_URL}/storage/v1/object/public/blog-images/posts/a%20b.jpg"
    )


@pytest.mark.asyncio
async def test_sign_in_with_password(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(httpx.Response(200, json={"access_token": "jwt"}))

    payload = await backend.sign_in_with_password("kate@example.com", "secret")

    assert payload == {"access_token": "jwt"}
    request = recorder.last
    assert request.url.path == "/auth/v1/token"
    assert request.url.params["grant_type"] == "password"
    assert json.loads(request.content) == {"email": "kate@example.com", "password": "secret"}


@pytest.mark.asyncio
async def test_get_user_and_sign_out(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(httpx.Response(200, json={"id": "u1"}))
    assert await backend.get_user("user-jwt") == {"id": "u1"}
    assert recorder.last.url.path == "/auth/v1/user"
    assert recorder.last.headers["authorization"] == "Bearer user-jwt"

    recorder.responses.append(httpx.Response(204))
    await backend.sign_out("user-jwt")
    assert recorder.last.url.path == "/auth/v1/logout"


@pytest.mark.asyncio
async def test_error_response(backend: BackendClient, recorder: Recorder):
    """Test that error bodies become BackendError with status and code."""
    recorder.responses.append(
        httpx.Response(
            400,
            json={"code": "22P02", "message": 'invalid input syntax for type uuid: "x"'},
        )
    )

    with pytest.raises(BackendError) as exc_info:
        await backend.select("blog_posts", eq={"id": "x"})

    error = exc_info.value
    assert error.backend_status == 400
    assert error.code == "22P02"
    assert error.message == 'invalid input syntax for type uuid: "x"'
    assert error.status_code == 502


@pytest.mark.asyncio
async def test_auth_error_response(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(
        httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
        )
    )

    with pytest.raises(BackendError) as exc_info:
        await backend.sign_in_with_password("kate@example.com", "wrong")

    assert exc_info.value.message == "Invalid login credentials"
    assert exc_info.value.backend_status == 400


@pytest.mark.asyncio
async def test_non_json_error_response(backend: BackendClient, recorder: Recorder):
    recorder.responses.append(httpx.Response(503, text="Service Unavailable"))

    with pytest.raises(BackendError) as exc_info:
        await backend.select("blog_posts")

    assert exc_info.value.message == "Service Unavailable"
    assert exc_info.value.backend_status == 503


@pytest.mark.asyncio
async def test_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    settings = Settings(backend_url=BASE_URL, backend_anon_key="anon-key")
    backend = BackendClient(
        settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )

    with pytest.raises(BackendError) as exc_info:
        await backend.select("blog_posts")

    assert exc_info.value.message == "connection refused"
    assert exc_info.value.backend_status is None
    await backend.aclose()


def test_error_with_context():
    error = BackendError("timeout", status_code=504, code="x")
    wrapped = error.with_context("Failed to fetch blog posts")

    assert wrapped.message == "Failed to fetch blog posts: timeout"
    assert wrapped.backend_status == 504
    assert wrapped.code == "x"
