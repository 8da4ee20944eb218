# webfixture/core/discovery.py
"""
Endpoint discovery for deployed contexts.

Walks a context's ``WEB-INF/classes`` directory, loads every artifact as
an isolated module and collects what it exports under the artifact's
name:

- a Starlette endpoint class marked with ``@server_endpoint``
- a FastAPI ``APIRouter`` instance, mounted at the module's optional
  ``__prefix__`` (default "")

Default behaviour
-----------------
An artifact ``com/example/EchoEndpoint.class`` is executed as module
``webfixture.webapps.<context>.com.example`` and ``EchoEndpoint`` is
looked up in it. Other names defined in the same artifact are ignored;
each endpoint gets its own artifact, as in a classes directory.

Modules loaded here are never inserted into ``sys.modules``, so two
contexts can deploy the same identifier with different content.
"""
from __future__ import annotations

import importlib.abc
import importlib.util
import logging
import re
import types
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Union

from fastapi import APIRouter
from starlette.endpoints import WebSocketEndpoint
from starlette.routing import BaseRoute, Route, WebSocketRoute

from webfixture.contracts.endpoint import endpoint_def
from webfixture.core.errors import DiscoveryError
from webfixture.core.layout import identifier_from_relpath

if TYPE_CHECKING:
    from webfixture.core.context import WebAppContext

logger = logging.getLogger(__name__)


@dataclass
class FoundEndpoint:
    identifier: str
    path: str
    endpoint: type
    name: str | None = None

    @property
    def is_websocket(self) -> bool:
        return issubclass(self.endpoint, WebSocketEndpoint)

    def to_routes(self) -> list[BaseRoute]:
        if self.is_websocket:
            return [WebSocketRoute(self.path, self.endpoint, name=self.name)]
        return [Route(self.path, self.endpoint, name=self.name)]


@dataclass
class FoundRouter:
    identifier: str
    router: APIRouter
    prefix: str = ""

    def to_routes(self) -> list[BaseRoute]:
        holder = APIRouter()
        holder.include_router(self.router, prefix=self.prefix)
        return list(holder.routes)


Found = Union[FoundEndpoint, FoundRouter]


def module_namespace(context_name: str) -> str:
    return "webfixture.webapps." + re.sub(r"\W", "_", context_name)


class ArtifactLoader(importlib.abc.SourceLoader):
    """Source loader for one artifact file.

    ``set_data`` is inherited as a no-op, so no bytecode cache is written
    next to the artifact.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def get_filename(self, fullname: str) -> str:
        return str(self.path)

    def get_data(self, path: str) -> bytes:
        return Path(path).read_bytes()


def load_artifact(path: Path, module_name: str) -> types.ModuleType:
    """Execute an artifact file as a fresh module without registering it."""
    loader = ArtifactLoader(path)
    spec = importlib.util.spec_from_loader(module_name, loader)
    if spec is None:
        raise DiscoveryError(f"Unable to load artifact {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        loader.exec_module(module)
    except OSError as exc:
        raise DiscoveryError(f"Unable to read artifact {path}: {exc}") from exc
    except Exception as exc:
        raise DiscoveryError(f"Failed to load artifact {path}: {exc}") from exc
    return module


def _collect(module: types.ModuleType, identifier: str, name: str) -> Found | None:
    obj = getattr(module, name, None)

    if isinstance(obj, APIRouter):
        return FoundRouter(
            identifier=identifier,
            router=obj,
            prefix=getattr(module, "__prefix__", ""),
        )

    if not isinstance(obj, type):
        logger.debug("Discovery: %s exports nothing named '%s'", identifier, name)
        return None

    definition = endpoint_def(obj)
    if definition is None:
        logger.debug("Discovery: %s is not a server endpoint", identifier)
        return None

    return FoundEndpoint(
        identifier=identifier,
        path=definition.path,
        endpoint=obj,
        name=definition.name,
    )


def _route_paths(found: Found) -> set[str]:
    return {getattr(r, "path", "") for r in found.to_routes()}


def scan_endpoints(
    classes_dir: Path, *, namespace: str, suffix: str = ".class"
) -> list[Found]:
    """Return everything discoverable below ``classes_dir`` in path order."""
    if not classes_dir.is_dir():
        logger.debug("Discovery: %s does not exist, nothing to scan", classes_dir)
        return []

    found: list[Found] = []
    claimed: dict[str, str] = {}

    for artifact in sorted(classes_dir.rglob(f"*{suffix}")):
        if not artifact.is_file():
            continue
        rel = artifact.relative_to(classes_dir).as_posix()
        try:
            identifier = identifier_from_relpath(rel, suffix)
        except ValueError:
            logger.debug("Discovery: skipping %s", rel)
            continue

        module_name, _, name = f"{namespace}.{identifier}".rpartition(".")
        module = load_artifact(artifact, module_name)

        item = _collect(module, identifier, name)
        if item is None:
            continue

        for path in sorted(_route_paths(item)):
            if path in claimed:
                raise DiscoveryError(
                    f"Endpoint path '{path}' declared by both "
                    f"'{claimed[path]}' and '{identifier}'"
                )
            claimed[path] = identifier

        found.append(item)
        logger.debug("Discovery: found %s in %s", type(item).__name__, identifier)

    return found


class EndpointDiscovery:
    """Context configuration that registers discovered endpoints as routes."""

    def __init__(self, suffix: str = ".class") -> None:
        self._suffix = suffix

    def configure(self, context: "WebAppContext") -> None:
        if not context.attributes.get(context.discovery_attribute):
            logger.debug("Discovery disabled for %s", context.context_path)
            return

        if context.descriptor.metadata_complete:
            logger.info(
                "Descriptor for %s is metadata-complete, skipping discovery",
                context.context_path,
            )
            return

        found = scan_endpoints(
            context.classes_dir,
            namespace=module_namespace(context.context_path.lstrip("/")),
            suffix=self._suffix,
        )
        for item in found:
            for route in item.to_routes():
                context.add_route(route)

        logger.info("Discovery: %d artifact(s) in %s", len(found), context.context_path)
