# webfixture/contracts/endpoint.py
"""
Endpoint marker for discovery.

Classes placed into ``WEB-INF/classes`` are picked up by endpoint discovery
when decorated with :func:`server_endpoint`::

    from starlette.endpoints import WebSocketEndpoint
    from webfixture.contracts.endpoint import server_endpoint

    @server_endpoint("/echo")
    class EchoEndpoint(WebSocketEndpoint):
        encoding = "text"

        async def on_receive(self, websocket, data):
            await websocket.send_text(data)

Both ``WebSocketEndpoint`` and ``HTTPEndpoint`` subclasses are accepted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar

from starlette.endpoints import HTTPEndpoint, WebSocketEndpoint

T = TypeVar("T", bound=type)

ENDPOINT_ATTR = "_wf_endpoint"


@dataclass(frozen=True)
class EndpointDef:
    path: str
    name: str | None = None


def server_endpoint(path: str, *, name: str | None = None) -> Callable[[T], T]:
    """Mark a Starlette endpoint class for discovery under ``path``."""
    if not path.startswith("/"):
        raise ValueError(f"Endpoint path must start with '/': {path!r}")

    def decorator(cls: T) -> T:
        if not (
            isinstance(cls, type)
            and issubclass(cls, (HTTPEndpoint, WebSocketEndpoint))
        ):
            raise TypeError(
                f"@server_endpoint expects an HTTPEndpoint or WebSocketEndpoint "
                f"subclass, got {cls!r}"
            )
        setattr(cls, ENDPOINT_ATTR, EndpointDef(path=path, name=name))
        return cls

    return decorator


def endpoint_def(cls: type) -> EndpointDef | None:
    # Only the class's own marker counts; subclasses must be re-decorated.
    return cls.__dict__.get(ENDPOINT_ATTR)
