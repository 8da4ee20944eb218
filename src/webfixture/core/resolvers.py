# webfixture/core/resolvers.py
"""
Resolver implementations for descriptors and artifacts.

- DirectoryResourceResolver: named files under a test-resources directory
- DirectoryArtifactResolver: pre-built artifacts stored under a directory
- ImportArtifactResolver:    classes reachable through the import system
- MappingArtifactResolver:   in-memory identifier -> bytes
- ChainArtifactResolver:     first resolver that succeeds wins
"""
from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
from pathlib import Path
from typing import Mapping

from webfixture.contracts.resolver import ArtifactResolver
from webfixture.core.errors import ArtifactNotFound, ResourceNotFound
from webfixture.core.layout import artifact_relpath, identifier_segments
from webfixture.core.loader import import_attr

logger = logging.getLogger(__name__)


def _read_within(root: Path, rel: Path) -> bytes | None:
    """Read ``root/rel`` if it is a file that does not escape ``root``."""
    base = root.resolve()
    target = (base / rel).resolve()
    if not target.is_relative_to(base) or not target.is_file():
        return None
    return target.read_bytes()


class DirectoryResourceResolver:
    """Resolve test resources by name below a directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, name: str) -> bytes:
        if not name:
            raise ResourceNotFound(name, "empty resource name")
        try:
            data = _read_within(self._root, Path(name))
        except OSError as exc:
            raise ResourceNotFound(name, str(exc)) from exc
        if data is None:
            raise ResourceNotFound(name, f"not found under {self._root}")
        logger.debug("Resolved resource '%s' from %s", name, self._root)
        return data


class DirectoryArtifactResolver:
    """Resolve artifacts laid out as ``root/<identifier-as-path><suffix>``."""

    def __init__(self, root: Path | str, suffix: str = ".class") -> None:
        self._root = Path(root)
        self._suffix = suffix

    def resolve(self, identifier: str) -> bytes:
        try:
            rel = artifact_relpath(identifier, self._suffix)
        except ValueError as exc:
            raise ArtifactNotFound(identifier, str(exc)) from exc
        try:
            data = _read_within(self._root, Path(*rel.parts))
        except OSError as exc:
            raise ArtifactNotFound(identifier, str(exc)) from exc
        if data is None:
            raise ArtifactNotFound(identifier, f"no {rel} under {self._root}")
        return data


class ImportArtifactResolver:
    """
    Resolve ``package.module.Name`` through the import system.

    ``Name`` must be a top-level attribute of ``package.module``; discovery
    looks the artifact's terminal name up at module level, so nested
    classes cannot be placed. The artifact bytes are the source of the
    module defining the class (or of ``package.module`` for other objects),
    which discovery loads back in isolation.
    """

    def resolve(self, identifier: str) -> bytes:
        try:
            segments = identifier_segments(identifier)
        except ValueError as exc:
            raise ArtifactNotFound(identifier, str(exc)) from exc
        if len(segments) < 2:
            raise ArtifactNotFound(identifier, "expected 'package.module.Name'")

        module_name, attr = ".".join(segments[:-1]), segments[-1]
        try:
            spec = importlib.util.find_spec(module_name)
        except (ImportError, ValueError):
            spec = None
        if spec is None:
            raise ArtifactNotFound(
                identifier,
                f"'{module_name}' is not an importable module "
                "(only top-level names can be placed)",
            )

        try:
            obj = import_attr(f"{module_name}:{attr}")
        except (ImportError, AttributeError) as exc:
            raise ArtifactNotFound(identifier, str(exc)) from exc

        if inspect.isclass(obj) and obj.__qualname__ == attr:
            return self._source_bytes(identifier, obj)
        return self._source_bytes(identifier, importlib.import_module(module_name))

    @staticmethod
    def _source_bytes(identifier: str, obj: object) -> bytes:
        try:
            source_file = inspect.getsourcefile(obj)  # type: ignore[arg-type]
        except TypeError as exc:
            raise ArtifactNotFound(identifier, str(exc)) from exc
        if source_file is None:
            raise ArtifactNotFound(identifier, "defining module has no source file")
        try:
            return Path(source_file).read_bytes()
        except OSError as exc:
            raise ArtifactNotFound(identifier, str(exc)) from exc


class MappingArtifactResolver:
    def __init__(self, artifacts: Mapping[str, bytes] | None = None) -> None:
        self._artifacts: dict[str, bytes] = dict(artifacts or {})

    def add(self, identifier: str, data: bytes) -> None:
        self._artifacts[identifier] = data

    def resolve(self, identifier: str) -> bytes:
        try:
            return self._artifacts[identifier]
        except KeyError:
            raise ArtifactNotFound(
                identifier, f"known: {sorted(self._artifacts)}"
            ) from None


class ChainArtifactResolver:
    def __init__(self, *resolvers: ArtifactResolver) -> None:
        self._resolvers = list(resolvers)

    def resolve(self, identifier: str) -> bytes:
        misses: list[str] = []
        for resolver in self._resolvers:
            try:
                return resolver.resolve(identifier)
            except ArtifactNotFound as exc:
                misses.append(str(exc))
        raise ArtifactNotFound(identifier, "; ".join(misses) or "no resolvers")
