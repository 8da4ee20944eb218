# webfixture/core/server.py
"""
Local ASGI test server.

Runs uvicorn on a pre-bound loopback socket in a daemon thread so tests
can start it, send real traffic, and stop it from the calling thread.
Startup waits for the ASGI lifespan to finish; a failed lifespan (for
example a deployed context that refuses to start) fails ``start()``.
"""
from __future__ import annotations

import logging
import socket
import threading
import time

import uvicorn

from webfixture.contracts.server import ASGIApp
from webfixture.core.config import settings
from webfixture.core.errors import ServerStartupError

logger = logging.getLogger(__name__)


class LocalServer:
    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        startup_timeout: float | None = None,
        log_level: str = "warning",
    ) -> None:
        self._host = host or settings.server_host
        self._requested_port = settings.server_port if port is None else port
        self._startup_timeout = startup_timeout or settings.startup_timeout
        self._log_level = log_level

        self._handler: ASGIApp | None = None
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._port: int | None = None

    def set_root_handler(self, handler: ASGIApp) -> None:
        if self.is_running:
            raise RuntimeError("Cannot replace the root handler of a running server")
        self._handler = handler

    @property
    def root_handler(self) -> ASGIApp | None:
        return self._handler

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def port(self) -> int:
        if self._port is None:
            raise RuntimeError("Server is not started")
        return self._port

    @property
    def uri(self) -> str:
        return f"http://{self._host}:{self.port}"

    @property
    def ws_uri(self) -> str:
        return f"ws://{self._host}:{self.port}"

    def start(self) -> None:
        if self.is_running:
            return
        if self._handler is None:
            raise ServerStartupError("No root handler set")

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self._host, self._requested_port))
        except OSError as exc:
            sock.close()
            raise ServerStartupError(
                f"Unable to bind {self._host}:{self._requested_port}: {exc}"
            ) from exc

        config = uvicorn.Config(
            self._handler,
            lifespan="on",
            log_level=self._log_level,
        )
        server = uvicorn.Server(config)
        thread = threading.Thread(
            target=server.run,
            kwargs={"sockets": [sock]},
            name=f"local-server-{sock.getsockname()[1]}",
            daemon=True,
        )
        thread.start()

        deadline = time.monotonic() + self._startup_timeout
        while not server.started:
            if not thread.is_alive():
                break
            if time.monotonic() > deadline:
                server.should_exit = True
                thread.join(self._startup_timeout)
                sock.close()
                raise ServerStartupError(
                    f"Server did not start within {self._startup_timeout}s"
                )
            time.sleep(0.01)

        if not server.started:
            thread.join(self._startup_timeout)
            sock.close()
            raise ServerStartupError("Server failed to start (lifespan startup failed)")

        self._server = server
        self._thread = thread
        self._port = sock.getsockname()[1]
        logger.info("Local server started at %s", self.uri)

    def stop(self) -> None:
        if self._server is None or self._thread is None:
            return
        self._server.should_exit = True
        self._thread.join(self._startup_timeout)
        if self._thread.is_alive():
            logger.warning("Local server thread did not exit within timeout")
        else:
            logger.info("Local server stopped")
        self._server = None
        self._thread = None
        self._port = None

    def __enter__(self) -> "LocalServer":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
