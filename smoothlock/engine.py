"""Module that implements the LockStateEngine class."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from .autolock import AutolockScheduler, CallLater
from .client import HttpClient
from .const import COMMAND_FAILED, POLL_FAILED
from .dispatcher import CommandDispatcher
from .entity import Entity
from .enums import AutolockMode, LockState, TargetState
from .exceptions import TransportError
from .listener import ListenerServer
from .models import AccessoryInfo, DeviceStatusResponse, EngineConfig, LockSnapshot
from .poller import StatusPoller
from .tokens import TokenStore

_LOGGER = logging.getLogger(__name__)


class LockStateEngine(Entity[LockSnapshot]):
    """Keep one lock's current and target state in sync with the device.

    The current state is written only from device evidence (a status poll
    or a push to the listener). The target state is also written
    optimistically when a new target is requested. Listeners registered
    with :meth:`on` receive ``update`` whenever the pair changes.

    All handlers are plain synchronous methods called from the event loop,
    so poll results, pushes and autolock timers never interleave.
    """

    def __init__(
        self,
        config: EngineConfig,
        client_session: aiohttp.ClientSession | None = None,
        *,
        http_client: HttpClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        call_later: CallLater | None = None,
    ) -> None:
        """Initialize the engine and its components from *config*."""
        super().__init__(LockSnapshot())
        self._config = config
        self._tokens = TokenStore(config.token_timeout, clock=clock)
        self._client = http_client or HttpClient(
            timeout=config.timeout,
            username=config.username,
            password=config.password,
            client_session=client_session,
        )
        self._dispatcher = CommandDispatcher(
            self._client,
            self._tokens,
            config.device_root,
            method=config.method,
            autolock=config.autolock,
            autolock_delay=config.autolock_delay,
        )
        self._poller = StatusPoller(
            self._client,
            self._tokens,
            config.device_root,
            config.poll_interval,
            on_status=self.handle_status,
            on_failure=self.handle_poll_failure,
        )
        self._autolock = AutolockScheduler(
            config.autolock_delay,
            lambda: self.request_target_state(TargetState.SECURED),
            call_later=call_later,
        )
        self._listener = ListenerServer(
            self, self._tokens, port=config.listener_port, host=config.listener_host
        )
        self._pending: set[asyncio.Task] = set()

    def __repr__(self) -> str:
        """Return custom __repr__ of the engine."""
        return (
            f"<{self.__class__.__name__} {self.name}: "
            f"{self.current_state.name}/{self.target_state.name}>"
        )

    async def __aenter__(self) -> LockStateEngine:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # ---------------------------------------------------------------------
    # Read side
    # ---------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def accessory_info(self) -> AccessoryInfo:
        """Return the descriptive information for the bridge."""
        return AccessoryInfo.from_config(self._config)

    @property
    def tokens(self) -> TokenStore:
        return self._tokens

    @property
    def poller(self) -> StatusPoller:
        return self._poller

    @property
    def listener(self) -> ListenerServer:
        return self._listener

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    @property
    def autolock(self) -> AutolockScheduler:
        return self._autolock

    @property
    def current_state(self) -> LockState:
        """Return the last known actual position of the lock."""
        return self.model.current

    @property
    def target_state(self) -> TargetState:
        """Return the last requested position of the lock."""
        return self.model.target

    def report_state(self) -> tuple[LockState, TargetState]:
        """Return the ``(current, target)`` pair."""
        return self.model.as_tuple()

    # ---------------------------------------------------------------------
    # Commands
    # ---------------------------------------------------------------------

    async def request_target_state(self, target: TargetState) -> bool:
        """Ask the device to move to *target*.

        The target is recorded immediately; confirmation arrives later
        through a poll or a push. Returns False if the command could not be
        sent, in which case the requested target is kept.
        """
        target = TargetState(target)
        self.update_model(target=target)
        if await self._dispatcher.dispatch(target):
            return True
        self.emit(COMMAND_FAILED, {"target": target})
        return False

    def set_target_state(self, target: TargetState) -> asyncio.Task:
        """Fire-and-forget variant of :meth:`request_target_state`."""
        task = asyncio.create_task(self.request_target_state(target))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def refresh(self) -> DeviceStatusResponse | None:
        """Poll the device now."""
        return await self._poller.poll_once()

    # ---------------------------------------------------------------------
    # Device evidence
    # ---------------------------------------------------------------------

    def _apply_current(
        self, current: LockState, *, rearm: bool = False, **changes: Any
    ) -> bool:
        previous = self.current_state
        changed = self.update_model(current=current, **changes)
        if current == LockState.SECURED:
            self._autolock.cancel()
        elif (
            current == LockState.UNSECURED
            and self._config.autolock == AutolockMode.PLUGIN
            and (
                rearm
                or (previous != LockState.UNSECURED and not self._autolock.pending)
            )
        ):
            self._autolock.arm()
        return changed

    def handle_status(self, status: DeviceStatusResponse) -> None:
        """Apply a parsed status reported by the device."""
        if self._apply_current(status.current_state, target=status.target_state):
            _LOGGER.debug(
                "Status changed: current=%s target=%s",
                status.current_state.name,
                status.target_state.name,
            )

    def handle_poll_failure(self, error: TransportError) -> None:
        """Mark the lock state as unknown after a failed poll."""
        self.update_model(current=LockState.UNKNOWN)
        self.emit(POLL_FAILED, {"error": error})

    def handle_locked(self) -> None:
        """The device pushed that it is locked."""
        self._apply_current(LockState.SECURED, target=TargetState.SECURED)

    def handle_unlocked(self) -> None:
        """The device pushed that it is unlocked.

        Every push restarts the autolock countdown in ``plugin`` mode.
        """
        self._apply_current(
            LockState.UNSECURED, rearm=True, target=TargetState.UNSECURED
        )

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    async def start(self) -> None:
        """Start the listener and the poller (which polls immediately)."""
        try:
            await self._listener.start()
        except OSError as err:
            _LOGGER.error(
                "Unable to start listen server on port %s: %s",
                self._config.listener_port,
                err,
            )
        self._poller.start()

    async def stop(self) -> None:
        """Stop polling, drop any pending relock and close the listener."""
        await self._poller.stop()
        self._autolock.cancel()
        await self._autolock.wait()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._listener.stop()
        await self._client.close()
