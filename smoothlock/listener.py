"""Inbound HTTP server the device calls back on."""

import asyncio
import contextlib
import logging
import socket
from typing import Iterator, Optional, Protocol

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from .const import (
    DEFAULT_LISTENER_HOST,
    DEFAULT_LISTENER_PORT,
    LISTENER_METHODS,
    LOCKED_ROUTE,
    REPLY_INVALID_REQUEST,
    REPLY_INVALID_TOKEN,
    REPLY_MISSING_TOKEN,
    REPLY_UPDATED,
    REPLY_VALID,
    UNLOCKED_ROUTE,
    VALIDATE_ROUTE,
)
from .tokens import TokenStore
from .utils import listener_display_host

_LOGGER = logging.getLogger(__name__)


class PushReceiver(Protocol):
    """Receives state evidence pushed by the device."""

    def handle_locked(self) -> None:
        """The device reports it is locked."""
        ...

    def handle_unlocked(self) -> None:
        """The device reports it is unlocked."""
        ...


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the host application."""

    def install_signal_handlers(self) -> None:
        return

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class ListenerServer:
    """Serve ``/locked``, ``/unlocked`` and ``/validate`` for the device.

    Every reply is a short plain-text body. Unknown paths get
    ``Invalid request`` and leave the state alone.
    """

    def __init__(
        self,
        receiver: PushReceiver,
        tokens: TokenStore,
        port: int = DEFAULT_LISTENER_PORT,
        host: str = DEFAULT_LISTENER_HOST,
    ) -> None:
        self._receiver = receiver
        self._tokens = tokens
        self._host = host
        self._port = port
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None
        self.app = self._create_app()

    @property
    def port(self) -> int:
        """Return the bound port (the configured one until started)."""
        return self._port

    @property
    def url(self) -> str:
        return f"http://{listener_display_host(self._host)}:{self._port}"

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ---------------------------------------------------------------------
    # Request handling
    # ---------------------------------------------------------------------

    def validate(self, token: Optional[str]) -> str:
        """Answer a ``/validate`` request."""
        if not self._tokens.enabled:
            return REPLY_VALID
        if not token:
            return REPLY_MISSING_TOKEN
        if not self._tokens.validate_and_consume(token):
            return REPLY_INVALID_TOKEN
        return REPLY_VALID

    def locked(self) -> str:
        _LOGGER.debug("Locked")
        self._receiver.handle_locked()
        _LOGGER.info("Updated current to locked")
        return REPLY_UPDATED

    def unlocked(self) -> str:
        _LOGGER.debug("Unlocked")
        self._receiver.handle_unlocked()
        _LOGGER.info("Updated current to unlocked")
        return REPLY_UPDATED

    def invalid(self, path: str) -> str:
        _LOGGER.warning("Invalid request: %s", path)
        return REPLY_INVALID_REQUEST

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title="smoothlock listener",
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )

        @app.api_route(
            f"/{LOCKED_ROUTE}", methods=LISTENER_METHODS, response_class=PlainTextResponse
        )
        async def locked() -> str:
            return self.locked()

        @app.api_route(
            f"/{UNLOCKED_ROUTE}", methods=LISTENER_METHODS, response_class=PlainTextResponse
        )
        async def unlocked() -> str:
            return self.unlocked()

        @app.api_route(
            f"/{VALIDATE_ROUTE}", methods=LISTENER_METHODS, response_class=PlainTextResponse
        )
        async def validate(token: Optional[str] = None) -> str:
            _LOGGER.debug("Validate")
            return self.validate(token)

        @app.api_route(
            "/{path:path}", methods=LISTENER_METHODS, response_class=PlainTextResponse
        )
        async def invalid(path: str) -> str:
            return self.invalid(path)

        return app

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self._host, self._port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    async def start(self) -> None:
        """Bind the port and serve requests in the background.

        Raises ``OSError`` if the port cannot be bound.
        """
        if self.running:
            return
        sock = self._bind()
        self._port = sock.getsockname()[1]
        config = uvicorn.Config(
            self.app,
            host=self._host,
            port=self._port,
            log_level="warning",
            lifespan="off",
        )
        self._server = _EmbeddedServer(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[sock]))
        while not self._server.started and not self._task.done():
            await asyncio.sleep(0.01)
        if self._task.done():
            sock.close()
            self._task.result()
            raise OSError(f"Listen server on port {self._port} failed to start")
        _LOGGER.info("Listen server: %s", self.url)

    async def stop(self) -> None:
        """Stop serving; in-flight device requests are left to time out."""
        if self._server is None or self._task is None:
            return
        server, task = self._server, self._task
        self._server = self._task = None
        server.should_exit = True
        await task
        _LOGGER.debug("Listen server stopped")
