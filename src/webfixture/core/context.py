# webfixture/core/context.py
"""
Deployable web-app context bound to one exploded fixture directory.

A context is an ASGI app. It is constructed with its base directory and
path prefix fixed, collects configurations (such as endpoint discovery)
and attributes, and builds its FastAPI app when started.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from fastapi import FastAPI
from starlette.responses import PlainTextResponse
from starlette.routing import BaseRoute
from starlette.websockets import WebSocketClose

from webfixture.contracts.server import Receive, Scope, Send
from webfixture.core.descriptor import WebDescriptor, load_descriptor
from webfixture.core.errors import ContextStartupError

logger = logging.getLogger(__name__)

# 1013 = "try again later"
WS_UNAVAILABLE = 1013


class ContextState(str, Enum):
    STOPPED = "stopped"
    STARTED = "started"
    FAILED = "failed"
    UNAVAILABLE = "unavailable"


class Configuration(Protocol):
    """A startup step applied to a context before its app is built."""

    def configure(self, context: "WebAppContext") -> None:
        ...


class WebAppContext:
    def __init__(
        self,
        base_dir: Path,
        context_path: str,
        *,
        config_dir_name: str = "WEB-INF",
        classes_dir_name: str = "classes",
        descriptor_name: str = "web.xml",
        discovery_attribute: str = "webfixture.endpoint_discovery",
    ) -> None:
        if not context_path.startswith("/") or (
            len(context_path) > 1 and context_path.endswith("/")
        ):
            raise ValueError(f"Invalid context path '{context_path}'")

        self._base_dir = Path(base_dir)
        self._context_path = context_path
        self._web_inf = self._base_dir / config_dir_name
        self._classes_dir = self._web_inf / classes_dir_name
        self._descriptor_path = self._web_inf / descriptor_name
        self.discovery_attribute = discovery_attribute

        self.attributes: dict[str, Any] = {}
        self.throw_unavailable_on_startup_exception = False

        self._configurations: list[Configuration] = []
        self._routes: list[BaseRoute] = []
        self._discovered: list[BaseRoute] = []
        self._starting = False
        self._app: FastAPI | None = None
        self._descriptor = WebDescriptor.empty()
        self._state = ContextState.STOPPED
        self._error: BaseException | None = None

    # -- Attributes ------------------------------------------------------------

    @property
    def context_path(self) -> str:
        return self._context_path

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def web_inf(self) -> Path:
        return self._web_inf

    @property
    def classes_dir(self) -> Path:
        return self._classes_dir

    @property
    def descriptor_path(self) -> Path:
        return self._descriptor_path

    @property
    def descriptor(self) -> WebDescriptor:
        return self._descriptor

    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def is_started(self) -> bool:
        return self._state is ContextState.STARTED

    @property
    def error(self) -> BaseException | None:
        """The failure from the last start attempt, if any."""
        return self._error

    @property
    def configurations(self) -> list[Configuration]:
        return list(self._configurations)

    @property
    def routes(self) -> list[BaseRoute]:
        return [*self._routes, *self._discovered]

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = value

    def add_configuration(self, configuration: Configuration) -> None:
        self._configurations.append(configuration)

    def add_route(self, route: BaseRoute) -> None:
        """Add a route; routes added by configurations live until the next stop."""
        if self._starting:
            self._discovered.append(route)
        else:
            self._routes.append(route)

    # -- Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        if self.is_started:
            return

        self._discovered = []
        self._error = None
        self._starting = True
        try:
            self._descriptor = load_descriptor(self._descriptor_path)
            for configuration in self._configurations:
                configuration.configure(self)
            self._app = FastAPI(
                title=self._descriptor.display_name or self._context_path,
                routes=self.routes,
                docs_url=None,
                redoc_url=None,
                openapi_url=None,
            )
        except Exception as exc:
            self._app = None
            self._discovered = []
            self._error = exc
            if self.throw_unavailable_on_startup_exception:
                self._state = ContextState.FAILED
                logger.error("Context %s failed to start: %s", self._context_path, exc)
                raise ContextStartupError(self._context_path, exc) from exc
            self._state = ContextState.UNAVAILABLE
            logger.warning(
                "Context %s is unavailable: %s", self._context_path, exc, exc_info=True
            )
            return
        finally:
            self._starting = False

        self._state = ContextState.STARTED
        logger.info(
            "Started context %s (%d route(s))", self._context_path, len(self.routes)
        )

    def stop(self) -> None:
        if self._state is ContextState.STOPPED:
            return
        self._app = None
        self._discovered = []
        self._state = ContextState.STOPPED
        logger.info("Stopped context %s", self._context_path)

    def describe(self) -> dict[str, Any]:
        return {
            "context_path": self._context_path,
            "base_dir": str(self._base_dir),
            "state": self._state.value,
            "attributes": dict(self.attributes),
            "throw_unavailable_on_startup_exception": self.throw_unavailable_on_startup_exception,
            "configurations": [type(c).__name__ for c in self._configurations],
            "display_name": self._descriptor.display_name,
            "routes": [getattr(r, "path", repr(r)) for r in self.routes],
        }

    # -- ASGI ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        app = self._app
        if app is not None:
            await app(scope, receive, send)
            return

        if scope["type"] == "http":
            response = PlainTextResponse("Service Unavailable", status_code=503)
            await response(scope, receive, send)
        elif scope["type"] == "websocket":
            await WebSocketClose(code=WS_UNAVAILABLE)(scope, receive, send)

    def __repr__(self) -> str:
        return f"WebAppContext({self._context_path!r}, state={self._state.value})"
