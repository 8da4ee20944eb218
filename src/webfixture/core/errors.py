# webfixture/core/errors.py
"""
Exception hierarchy for fixture building and deployment.

Every error surfaces synchronously to the caller of the operation that
triggered it. Nothing here is retried.
"""
from __future__ import annotations

from pathlib import Path


class FixtureError(Exception):
    pass


class IOFailure(FixtureError):
    """A filesystem operation on a fixture tree failed."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ResourceNotFound(FixtureError):
    def __init__(self, name: str, detail: str = "") -> None:
        msg = f"Test resource '{name}' not found"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.name = name


class ArtifactNotFound(FixtureError):
    def __init__(self, identifier: str, detail: str = "") -> None:
        msg = f"Artifact '{identifier}' could not be resolved"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.identifier = identifier


class DescriptorError(FixtureError):
    pass


class DiscoveryError(FixtureError):
    pass


class ContextStartupError(FixtureError):
    """A deployed context failed to start and is configured to fail loud."""

    def __init__(self, context_path: str, cause: BaseException) -> None:
        super().__init__(f"Context '{context_path}' failed to start: {cause}")
        self.context_path = context_path
        self.cause = cause


class ServerStartupError(FixtureError):
    pass
