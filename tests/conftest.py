"""Global test fixtures for the smoothlock test suite.

Besides the fakes shared by most modules (a manual clock, a manual timer
factory and a scripted HTTP client), an autouse fixture tracks every
aiohttp ClientSession created during a test and closes it afterwards.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, List

import aiohttp
import pytest
import pytest_asyncio

from smoothlock.exceptions import TransportError


class _TrackingClientSession(aiohttp.ClientSession):
    """Subclass of ClientSession that registers every created instance."""

    _sessions: List[aiohttp.ClientSession] = []

    def __init__(self, *args, **kwargs):  # type: ignore[no-untyped-def]
        super().__init__(*args, **kwargs)
        self.__class__._sessions.append(self)


@pytest_asyncio.fixture(autouse=True)
async def ensure_client_sessions_closed(monkeypatch):  # type: ignore[missing-type-doc]
    """Close any ClientSession a test left open."""
    monkeypatch.setattr(aiohttp, "ClientSession", _TrackingClientSession)
    yield
    close_tasks = [sess.close() for sess in list(_TrackingClientSession._sessions) if not sess.closed]
    if close_tasks:
        await asyncio.gather(*close_tasks, return_exceptions=True)
    _TrackingClientSession._sessions.clear()


# -----------------------------------------------------------------------------
# Fakes
# -----------------------------------------------------------------------------


class FakeClock:
    """Manually advanced replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTimerHandle:
    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class FakeTimers:
    """Stand-in for ``loop.call_later`` driven by :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[FakeTimerHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimerHandle:
        handle = FakeTimerHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[FakeTimerHandle]:
        return [h for h in self.handles if not h.cancelled() and not h.fired]

    def advance(self, seconds: float) -> int:
        """Move time forward and fire due timers; return how many fired."""
        self.now += seconds
        fired = 0
        for handle in sorted(self.active, key=lambda h: h.when):
            if handle.when <= self.now:
                handle.fired = True
                handle.callback()
                fired += 1
        return fired


class FakeHttpClient:
    """Scripted replacement for ``HttpClient``.

    Each queued response is either a body string or an exception instance to
    raise. When the queue is empty ``default`` is used.
    """

    def __init__(self, default: Any = "") -> None:
        self.default = default
        self.responses: list[Any] = []
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def request(self, url: str, method: str = "GET", body: str | None = None) -> str:
        self.calls.append((url, method))
        response = self.responses.pop(0) if self.responses else self.default
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True

    def urls(self, fragment: str = "") -> list[str]:
        return [url for url, _ in self.calls if fragment in url]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture()
def http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture()
def transport_error() -> TransportError:
    return TransportError("Connection refused", url="http://lock.local/status")
