"""Public contracts for fixture building and deployment."""
from webfixture.contracts.endpoint import EndpointDef, endpoint_def, server_endpoint
from webfixture.contracts.resolver import ArtifactResolver, ResourceResolver
from webfixture.contracts.server import ASGIApp, Server

__all__ = [
    "EndpointDef", "endpoint_def", "server_endpoint",
    "ArtifactResolver", "ResourceResolver",
    "ASGIApp", "Server",
]
