"""Relock timer used when smoothlock, not the device, owns autolock."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

_LOGGER = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """The part of ``asyncio.TimerHandle`` the scheduler relies on."""

    def cancel(self) -> None:
        ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


class AutolockScheduler:
    """One-shot relock timer.

    At most one timer is pending: :meth:`arm` cancels the previous timer
    before scheduling a new one, so repeated unlocks restart the countdown.
    """

    def __init__(
        self,
        delay: float,
        relock: Callable[[], Awaitable[Any]],
        call_later: CallLater | None = None,
    ) -> None:
        self._delay = delay
        self._relock = relock
        self._call_later = call_later
        self._handle: TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Return True if a relock is scheduled."""
        return self._handle is not None

    def arm(self) -> None:
        """Schedule a relock ``delay`` seconds from now, replacing any pending one."""
        self.cancel()
        call_later = self._call_later or asyncio.get_running_loop().call_later
        _LOGGER.info("Starting %s second timer for autolock", self._delay)
        self._handle = call_later(self._delay, self._expire)

    def cancel(self) -> None:
        """Cancel the pending relock, if any."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        _LOGGER.debug("Autolock timer cancelled")

    def _expire(self) -> None:
        self._handle = None
        _LOGGER.info("Autolocking...")
        task = asyncio.create_task(self._relock())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self) -> None:
        """Wait for relocks that are already running."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
