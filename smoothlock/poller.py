"""Periodic status polling."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from .client import HttpClient
from .const import STATUS_ROUTE, TOKEN_PARAM
from .exceptions import ParseError, TransportError
from .models import DeviceStatusResponse
from .tokens import TokenStore

_LOGGER = logging.getLogger(__name__)


class StatusPoller:
    """Pull the device status once at start and then every ``interval`` seconds."""

    def __init__(
        self,
        client: HttpClient,
        tokens: TokenStore,
        device_root: str,
        interval: float,
        on_status: Callable[[DeviceStatusResponse], None],
        on_failure: Callable[[TransportError], None],
    ) -> None:
        self._client = client
        self._tokens = tokens
        self._device_root = device_root
        self._interval = interval
        self._on_status = on_status
        self._on_failure = on_failure
        self._task: asyncio.Task | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        """Return True while the polling task is alive."""
        return self._task is not None and not self._task.done()

    def status_url(self, token: str) -> str:
        return f"{self._device_root}{STATUS_ROUTE}?{TOKEN_PARAM}={token}"

    async def poll_once(self) -> DeviceStatusResponse | None:
        """Ask the device for its status and hand the result to the callbacks.

        Never raises for device problems: transport failures go to
        ``on_failure`` and unparsable bodies are logged and dropped.
        """
        url = self.status_url(str(self._tokens.issue()))
        _LOGGER.debug("Getting status: %s", url)
        try:
            body = await self._client.request(url, "GET")
        except TransportError as err:
            _LOGGER.warning("Error getting status: %s", err)
            self._on_failure(err)
            return None

        _LOGGER.debug("Device response: %s", body)
        try:
            status = DeviceStatusResponse.parse(body)
        except ParseError as err:
            _LOGGER.warning("Error parsing status response: %s (%s)", body, err)
            return None

        self._on_status(status)
        return status

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Unexpected error while polling %s", self._device_root)
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start polling in the background."""
        if self.running:
            return
        _LOGGER.debug("Polling %s every %ss", self._device_root, self._interval)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
