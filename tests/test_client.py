"""Tests for the outbound ``HttpClient`` wrapper."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
from aiohttp import test_utils, web
import pytest

from smoothlock.client import HttpClient
from smoothlock.exceptions import TransportError

# ---------------------------------------------------------------------------
# Helper: fake aiohttp response/session
# ---------------------------------------------------------------------------


class _FakeResponse:
    def __init__(self, status: int = 200, text_data: str = "", raw: bytes | None = None) -> None:
        self.status = status
        self._raw = raw if raw is not None else text_data.encode()

    async def text(self, encoding: str | None = None, errors: str = "strict") -> str:  # noqa: D401 – stub
        return self._raw.decode(encoding or "utf-8", errors)

    async def __aenter__(self):  # noqa: D401 – context
        return self

    async def __aexit__(self, exc_type, exc, tb):  # noqa: D401 – context
        pass


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: BaseException | None = None) -> None:
        self.response = response or _FakeResponse()
        self.error = error
        self.closed = False
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_request_returns_body_with_defaults():
    session = _FakeSession(_FakeResponse(text_data='{"current":1,"target":1}'))
    client = HttpClient(timeout=3, client_session=session)  # type: ignore[arg-type]

    body = await client.request("http://lock.local/status?token=ab")

    assert body == '{"current":1,"target":1}'
    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "http://lock.local/status?token=ab"
    assert kwargs["ssl"] is False
    assert kwargs["auth"] is None
    assert kwargs["timeout"].total == 3
    assert kwargs["data"] is None


@pytest.mark.asyncio
async def test_request_returns_body_for_error_status():
    session = _FakeSession(_FakeResponse(status=500, text_data="oops"))
    client = HttpClient(client_session=session)  # type: ignore[arg-type]

    assert await client.request("http://lock.local/lock", "POST", body="x") == "oops"
    assert session.calls[0][0] == "POST"
    assert session.calls[0][2]["data"] == "x"


def test_basic_auth_requires_both_credentials():
    assert HttpClient(username="u", password="p").auth == aiohttp.BasicAuth("u", "p")
    assert HttpClient(username="u").auth is None
    assert HttpClient(password="p").auth is None


@pytest.mark.asyncio
async def test_request_sends_basic_auth():
    session = _FakeSession()
    client = HttpClient(username="u", password="p", client_session=session)  # type: ignore[arg-type]

    await client.request("http://lock.local/unlock")

    assert session.calls[0][2]["auth"] == aiohttp.BasicAuth("u", "p")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, message",
    [
        (aiohttp.ClientConnectionError("Connection refused"), "Connection refused"),
        (asyncio.TimeoutError(), "Timed out after 1.5s"),
    ],
)
async def test_request_failures_raise_transport_error(error, message):
    session = _FakeSession(error=error)
    client = HttpClient(timeout=1.5, client_session=session)  # type: ignore[arg-type]

    with pytest.raises(TransportError) as excinfo:
        await client.request("http://lock.local/status")

    assert message in str(excinfo.value)
    assert excinfo.value.url == "http://lock.local/status"
    assert excinfo.value.__cause__ is error


@pytest.mark.asyncio
async def test_close_leaves_external_session_open():
    session = _FakeSession()
    client = HttpClient(client_session=session)  # type: ignore[arg-type]

    await client.close()

    assert session.closed is False


@pytest.mark.asyncio
async def test_owned_session_is_created_and_closed(monkeypatch):
    created: list[_FakeSession] = []

    def _factory() -> _FakeSession:
        created.append(_FakeSession(_FakeResponse(text_data="ok")))
        return created[-1]

    monkeypatch.setattr(aiohttp, "ClientSession", _factory)
    client = HttpClient()

    assert await client.request("http://lock.local/status") == "ok"
    assert await client.request("http://lock.local/status") == "ok"
    await client.close()

    assert len(created) == 1
    assert created[0].closed is True


@pytest.mark.asyncio
async def test_undecodable_body_is_replaced_not_raised():
    session = _FakeSession(_FakeResponse(raw=b"\xff\xfe\x00garbage"))
    client = HttpClient(client_session=session)  # type: ignore[arg-type]

    body = await client.request("http://lock.local/status")

    assert body.endswith("garbage")
    assert "�" in body


@pytest.mark.asyncio
async def test_undecodable_body_from_real_server():
    async def _status(_request: web.Request) -> web.Response:
        return web.Response(body=b"\xff\xfe\x00garbage", content_type="text/plain")

    app = web.Application()
    app.router.add_get("/status", _status)
    client = HttpClient(timeout=2)

    async with test_utils.TestServer(app) as server:
        body = await client.request(str(server.make_url("/status")))
    await client.close()

    assert "garbage" in body
