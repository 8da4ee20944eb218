# webfixture/contracts/resolver.py
"""
Resolver contracts used by artifact placement.

Both resolvers have a two-outcome contract: return the bytes, or raise the
matching not-found error. Fixture code never looks at where the bytes came
from.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ResourceResolver(Protocol):
    """Looks up named test resources (descriptors)."""

    def resolve(self, name: str) -> bytes:
        """
        Return the bytes of resource ``name``.

        Raises:
            ResourceNotFound: If no such resource exists.
        """
        ...


@runtime_checkable
class ArtifactResolver(Protocol):
    """Looks up compiled artifacts by logical identifier."""

    def resolve(self, identifier: str) -> bytes:
        """
        Return the bytes of the artifact named by a dotted identifier.

        Raises:
            ArtifactNotFound: If the identifier cannot be resolved.
        """
        ...
