"""Outbound HTTP requests to the lock device."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from .const import DEFAULT_METHOD, DEFAULT_TIMEOUT
from .exceptions import TransportError

_LOGGER = logging.getLogger(__name__)


class HttpClient:
    """Send single requests to the device.

    The device is usually a local endpoint with a self-signed certificate,
    so certificate verification is disabled. ``timeout`` is in seconds.
    There are no retries: a failure is raised once as ``TransportError``.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        username: str | None = None,
        password: str | None = None,
        client_session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._auth = (
            aiohttp.BasicAuth(username, password)
            if username is not None and password is not None
            else None
        )
        self.__client_session = client_session
        self.__owns_session = client_session is None

    @property
    def auth(self) -> aiohttp.BasicAuth | None:
        """Return the basic auth credentials, if configured."""
        return self._auth

    @property
    def timeout(self) -> float | None:
        """Return the per-request timeout in seconds."""
        return self._timeout.total

    def __get_client_session(self) -> aiohttp.ClientSession:
        if self.__client_session is None or self.__client_session.closed:
            self.__client_session = aiohttp.ClientSession()
            self.__owns_session = True
        return self.__client_session

    async def request(
        self, url: str, method: str = DEFAULT_METHOD, body: str | None = None
    ) -> str:
        """Perform one request and return the response body."""
        session = self.__get_client_session()
        try:
            async with session.request(
                method,
                url,
                data=body or None,
                auth=self._auth,
                timeout=self._timeout,
                ssl=False,
            ) as response:
                text = await response.text(errors="replace")
                _LOGGER.debug("%s %s -> %s", method, url, response.status)
                return text
        except asyncio.TimeoutError as err:
            raise TransportError(
                f"Timed out after {self._timeout.total}s", url=url
            ) from err
        except aiohttp.ClientError as err:
            raise TransportError(str(err) or type(err).__name__, url=url) from err

    async def close(self) -> None:
        """Close the client session if this client created it."""
        if not self.__owns_session:
            return
        if self.__client_session is not None and not self.__client_session.closed:
            await self.__client_session.close()
        self.__client_session = None
