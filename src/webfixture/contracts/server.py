# webfixture/contracts/server.py
"""
Server contract consumed by the fixture registry.

The registry only needs to hand over its root handler and drive the
start/stop lifecycle; anything else about the server is its own business.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, MutableMapping, Protocol, runtime_checkable

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]


@runtime_checkable
class Server(Protocol):
    def set_root_handler(self, handler: ASGIApp) -> None:
        ...

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...
