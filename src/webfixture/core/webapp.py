# webfixture/core/webapp.py
"""
Exploded web-app fixture.

A ``WebApp`` owns one freshly emptied directory tree under the test root
and the context that will serve it. Test code populates the tree with a
descriptor and endpoint artifacts, then deploys the context into the
shared collection::

    app = fixtures.new_fixture("echo-test")
    app.create_web_inf()
    app.copy_class("com.example.EchoEndpoint")
    app.deploy()
"""
from __future__ import annotations

import logging
from pathlib import Path

from webfixture.contracts.resolver import ArtifactResolver, ResourceResolver
from webfixture.core import fs
from webfixture.core.collection import ContextCollection
from webfixture.core.context import WebAppContext
from webfixture.core.discovery import EndpointDiscovery
from webfixture.core.layout import WebAppLayout, validate_context_name

logger = logging.getLogger(__name__)


class WebApp:
    def __init__(
        self,
        context_name: str,
        *,
        layout: WebAppLayout,
        contexts: ContextCollection,
        resources: ResourceResolver,
        artifacts: ArtifactResolver,
        default_descriptor: str = "empty-web.xml",
        discovery_attribute: str = "webfixture.endpoint_discovery",
    ) -> None:
        self._name = validate_context_name(context_name)
        self._layout = layout
        self._contexts = contexts
        self._resources = resources
        self._artifacts = artifacts
        self._default_descriptor = default_descriptor

        # Ensure context directory.
        self._context_dir = fs.ensure_empty(layout.context_dir(context_name))

        # Ensure WEB-INF and classes.
        self._web_inf = fs.ensure_exists(layout.config_dir(context_name))
        self._classes_dir = fs.ensure_exists(layout.classes_dir(context_name))

        self._context = WebAppContext(
            base_dir=self._context_dir,
            context_path=layout.context_path(context_name),
            config_dir_name=layout.config_dir_name,
            classes_dir_name=layout.classes_dir_name,
            descriptor_name=layout.descriptor_name,
            discovery_attribute=discovery_attribute,
        )
        self._context.set_attribute(discovery_attribute, True)
        self._context.add_configuration(EndpointDiscovery(suffix=layout.artifact_suffix))

        logger.debug("Created fixture '%s' at %s", context_name, self._context_dir)

    @property
    def name(self) -> str:
        return self._name

    @property
    def context(self) -> WebAppContext:
        return self._context

    @property
    def context_path(self) -> str:
        return self._context.context_path

    @property
    def context_dir(self) -> Path:
        return self._context_dir

    @property
    def web_inf(self) -> Path:
        return self._web_inf

    @property
    def classes_dir(self) -> Path:
        return self._classes_dir

    @property
    def descriptor_path(self) -> Path:
        return self._layout.descriptor_path(self._name)

    # -- Artifact placement ----------------------------------------------------

    def create_web_inf(self) -> Path:
        """Place the default (empty) descriptor."""
        return self.copy_web_inf(self._default_descriptor)

    def copy_web_inf(self, resource_name: str) -> Path:
        """Copy test resource ``resource_name`` to ``WEB-INF/web.xml``."""
        data = self._resources.resolve(resource_name)
        dest = fs.write_bytes(self.descriptor_path, data)
        logger.debug("Placed descriptor '%s' in %s", resource_name, self._name)
        return dest

    def copy_class(self, artifact: str | type) -> Path:
        """Copy the artifact for a class or dotted identifier into ``WEB-INF/classes``.

        Resolution happens before anything is written, so an unresolvable
        identifier leaves the classes directory untouched.
        """
        identifier = artifact if isinstance(artifact, str) else _class_identifier(artifact)
        dest = self._layout.artifact_path(self._name, identifier)
        data = self._artifacts.resolve(identifier)
        fs.write_bytes(dest, data)
        logger.debug("Placed artifact '%s' in %s", identifier, self._name)
        return dest

    # -- Registration ----------------------------------------------------------

    def deploy(self) -> None:
        """Register the context with the shared collection.

        Not idempotent: deploying twice registers the context twice.
        """
        self._context.throw_unavailable_on_startup_exception = True
        self._contexts.add_handler(self._context)
        self._contexts.manage(self._context)
        logger.info("Deployed %s from %s", self.context_path, self._context_dir)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s", self._context.describe())

    def __repr__(self) -> str:
        return f"WebApp({self._name!r}, dir={str(self._context_dir)!r})"


def _class_identifier(cls: type) -> str:
    if "<locals>" in cls.__qualname__:
        raise ValueError(f"Cannot place locally defined class {cls.__qualname__}")
    return f"{cls.__module__}.{cls.__qualname__}"


def create_fixture(
    root_dir: Path | str,
    context_name: str,
    *,
    contexts: ContextCollection,
    resources: ResourceResolver,
    artifacts: ArtifactResolver,
    **kwargs,
) -> WebApp:
    """Lay out a fresh fixture tree under ``root_dir`` with default layout names."""
    return WebApp(
        context_name,
        layout=WebAppLayout(root=Path(root_dir)),
        contexts=contexts,
        resources=resources,
        artifacts=artifacts,
        **kwargs,
    )
