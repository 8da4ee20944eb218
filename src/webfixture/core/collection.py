# webfixture/core/collection.py
"""
Ordered collection of deployed contexts, used as a server's root handler.

Membership is append-only and ordered by deployment. Requests are routed
to the context with the longest matching path prefix; managed contexts
follow the collection's start/stop transitions.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Iterator

from starlette.routing import Mount, Router

from webfixture.contracts.server import Receive, Scope, Send
from webfixture.core.context import WebAppContext

logger = logging.getLogger(__name__)


class ContextCollection:
    def __init__(self) -> None:
        self._contexts: list[WebAppContext] = []
        self._by_prefix: list[WebAppContext] = []
        self._managed: list[WebAppContext] = []
        self._started = False
        self._startup_error: BaseException | None = None
        self._router = Router(lifespan=self._lifespan)

    # -- Membership ------------------------------------------------------------

    def add_handler(self, context: WebAppContext) -> None:
        self._contexts.append(context)
        # Longest prefix first; the sort is stable so equal prefixes keep
        # deployment order. Routing and match_path share this order.
        self._by_prefix = sorted(
            self._contexts, key=lambda c: len(c.context_path), reverse=True
        )
        self._router.routes = [Mount(c.context_path, app=c) for c in self._by_prefix]
        logger.debug("Added context %s (%d total)", context.context_path, len(self))

    def manage(self, context: WebAppContext) -> None:
        """Tie ``context``'s lifecycle to this collection.

        A context managed after the collection started is started at once.
        """
        if not any(c is context for c in self._managed):
            self._managed.append(context)
        if self._started and not context.is_started:
            context.start()

    def is_managed(self, context: WebAppContext) -> bool:
        return any(c is context for c in self._managed)

    @property
    def contexts(self) -> list[WebAppContext]:
        return list(self._contexts)

    def match_path(self, path: str) -> WebAppContext | None:
        """
        Return the context whose path prefix is the longest prefix of ``path``.

        Example:
          "/echo"       matches "/echo/ws"
          "/echo/admin" wins over "/echo" for "/echo/admin/x"
        """
        if not path:
            return None

        norm = path.rstrip("/") or "/"
        for c in self._by_prefix:
            cp = c.context_path
            if norm == cp or norm.startswith(cp + "/"):
                return c
        return None

    def __iter__(self) -> Iterator[WebAppContext]:
        return iter(list(self._contexts))

    def __len__(self) -> int:
        return len(self._contexts)

    # -- Lifecycle -------------------------------------------------------------

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def startup_error(self) -> BaseException | None:
        return self._startup_error

    def start(self) -> None:
        if self._started:
            return
        self._startup_error = None
        started: list[WebAppContext] = []
        for context in list(self._managed):
            try:
                context.start()
            except Exception as exc:
                self._startup_error = exc
                logger.error("Context collection failed to start: %s", exc)
                self._stop_all(reversed(started))
                raise
            started.append(context)
        self._started = True
        logger.info("Started %d context(s)", len(self._managed))

    def stop(self) -> None:
        if not self._started:
            return
        self._stop_all(reversed(self._managed))
        self._started = False

    def _stop_all(self, contexts: Iterable[WebAppContext]) -> None:
        for context in contexts:
            try:
                context.stop()
            except Exception:
                logger.exception("Context %s shutdown error", context.context_path)

    @asynccontextmanager
    async def _lifespan(self, app: Any) -> AsyncIterator[None]:
        self.start()
        try:
            yield
        finally:
            self.stop()

    # -- ASGI ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._router(scope, receive, send)

    def __repr__(self) -> str:
        return f"ContextCollection({[c.context_path for c in self._contexts]})"
