# webfixture/core/registry.py
"""
Fixture registry: owns the shared context collection and the server.

The server is injected (anything with ``set_root_handler``/``start``/
``stop``); the registry installs its collection as the server's root
handler when started.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from webfixture.contracts.resolver import ArtifactResolver, ResourceResolver
from webfixture.contracts.server import Server
from webfixture.core import fs
from webfixture.core.collection import ContextCollection
from webfixture.core.config import Settings, settings as default_settings
from webfixture.core.context import WebAppContext
from webfixture.core.errors import ServerStartupError
from webfixture.core.layout import WebAppLayout
from webfixture.core.manifest import build_fixtures, load_fixtures_config
from webfixture.core.resolvers import DirectoryResourceResolver, ImportArtifactResolver
from webfixture.core.webapp import WebApp

logger = logging.getLogger(__name__)


class WebAppFixtures:
    def __init__(
        self,
        test_dir: Path | str | None = None,
        server: Server | None = None,
        *,
        resources: ResourceResolver | None = None,
        artifacts: ArtifactResolver | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or default_settings
        s = self._settings

        self._test_dir = fs.ensure_exists(Path(test_dir or s.test_root))
        self._layout = WebAppLayout(
            root=self._test_dir,
            config_dir_name=s.config_dir_name,
            classes_dir_name=s.classes_dir_name,
            descriptor_name=s.descriptor_name,
            artifact_suffix=s.artifact_suffix,
        )
        self._server = server
        self._resources = resources or DirectoryResourceResolver(s.resources_dir)
        self._artifacts = artifacts or ImportArtifactResolver()
        self._contexts = ContextCollection()

    @property
    def test_dir(self) -> Path:
        return self._test_dir

    @property
    def layout(self) -> WebAppLayout:
        return self._layout

    @property
    def server(self) -> Server | None:
        return self._server

    @property
    def resources(self) -> ResourceResolver:
        return self._resources

    @property
    def artifacts(self) -> ArtifactResolver:
        return self._artifacts

    @property
    def contexts(self) -> ContextCollection:
        return self._contexts

    def new_fixture(self, context_name: str) -> WebApp:
        return WebApp(
            context_name,
            layout=self._layout,
            contexts=self._contexts,
            resources=self._resources,
            artifacts=self._artifacts,
            default_descriptor=self._settings.default_descriptor,
            discovery_attribute=self._settings.discovery_attribute,
        )

    create_web_app = new_fixture

    def load_manifest(self, patterns: Iterable[str] | None = None) -> list[WebApp]:
        """Build every fixture declared in the YAML manifests matching ``patterns``."""
        patterns = self._settings.fixtures_config_paths if patterns is None else patterns
        return build_fixtures(self, load_fixtures_config(patterns))

    def root_handler(self) -> ContextCollection:
        return self._contexts

    # -- Server lifecycle ------------------------------------------------------

    def start(self) -> None:
        if self._server is None:
            raise ServerStartupError("No server configured for this registry")
        self._server.set_root_handler(self._contexts)
        try:
            self._server.start()
        except ServerStartupError as exc:
            cause = self._contexts.startup_error
            if cause is None:
                raise
            raise ServerStartupError(f"Server failed to start: {cause}") from cause
        logger.info("Fixture server started with %d context(s)", len(self._contexts))

    def stop(self) -> None:
        if self._server is not None:
            self._server.stop()

    def __enter__(self) -> "WebAppFixtures":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __iter__(self) -> Iterator[WebAppContext]:
        return iter(self._contexts)

    def __len__(self) -> int:
        return len(self._contexts)
