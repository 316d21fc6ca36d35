"""Translate target states into device commands."""

from __future__ import annotations

import logging

from .client import HttpClient
from .const import AUTOLOCK_PARAM, LOCK_ROUTE, TOKEN_PARAM, UNLOCK_ROUTE
from .enums import AutolockMode, TargetState
from .exceptions import TransportError
from .tokens import TokenStore

_LOGGER = logging.getLogger(__name__)


class CommandDispatcher:
    """Send ``/lock`` and ``/unlock`` commands to the device.

    A dispatched command only expresses intent. The engine learns the
    actual lock position from a later poll or push, never from here.
    """

    def __init__(
        self,
        client: HttpClient,
        tokens: TokenStore,
        device_root: str,
        method: str = "GET",
        autolock: AutolockMode = AutolockMode.NONE,
        autolock_delay: int = 0,
    ) -> None:
        self._client = client
        self._tokens = tokens
        self._device_root = device_root
        self._method = method
        self._autolock = autolock
        self._autolock_delay = autolock_delay

    def build_url(self, target: TargetState, token: str) -> str:
        """Return the command URL for *target*."""
        route = LOCK_ROUTE if target == TargetState.SECURED else UNLOCK_ROUTE
        url = f"{self._device_root}{route}?{TOKEN_PARAM}={token}"
        if target == TargetState.UNSECURED and self._autolock == AutolockMode.DEVICE:
            # the device relocks by itself
            url += f"&{AUTOLOCK_PARAM}={self._autolock_delay}"
        return url

    async def dispatch(self, target: TargetState) -> bool:
        """Send the command for *target*; return True if the request went through."""
        url = self.build_url(target, str(self._tokens.issue()))
        _LOGGER.debug("Sending: %s", url)
        try:
            await self._client.request(url, self._method)
        except TransportError as err:
            _LOGGER.warning("Error sending %s: %s", url, err)
            return False
        _LOGGER.info("Sent %s", url)
        return True
