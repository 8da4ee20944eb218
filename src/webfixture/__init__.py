"""Exploded web-app fixtures for integration tests."""
from webfixture.contracts import server_endpoint
from webfixture.core.collection import ContextCollection
from webfixture.core.context import ContextState, WebAppContext
from webfixture.core.errors import (
    ArtifactNotFound,
    ContextStartupError,
    DescriptorError,
    DiscoveryError,
    FixtureError,
    IOFailure,
    ResourceNotFound,
    ServerStartupError,
)
from webfixture.core.registry import WebAppFixtures
from webfixture.core.server import LocalServer
from webfixture.core.webapp import WebApp, create_fixture

__version__ = "0.1.0"

__all__ = [
    "server_endpoint",
    "ContextCollection",
    "ContextState", "WebAppContext",
    "ArtifactNotFound", "ContextStartupError", "DescriptorError", "DiscoveryError",
    "FixtureError", "IOFailure", "ResourceNotFound", "ServerStartupError",
    "WebAppFixtures",
    "LocalServer",
    "WebApp", "create_fixture",
]
