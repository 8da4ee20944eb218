# webfixture/core/manifest.py
"""
Declarative fixture manifests.

Fixtures can be declared in YAML instead of code and built in one go
against a registry. Expected structure::

    fixtures:
      - name: echo-test
        descriptor: empty-web.xml
        classes:
          - com.example.EchoEndpoint
        deploy: true

``${VAR}`` / ``${VAR:-default}`` placeholders are substituted. Entries
with the same name in later files replace earlier ones.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable

from webfixture.core.config import settings
from webfixture.core.loader import expand_env, read_yaml_documents

if TYPE_CHECKING:
    from webfixture.core.registry import WebAppFixtures
    from webfixture.core.webapp import WebApp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixtureSpec:
    """YAML-declared fixture."""

    name: str
    descriptor: str | None = None
    classes: list[str] = field(default_factory=list)
    deploy: bool = True


@dataclass(frozen=True)
class FixturesConfig:
    fixtures: list[FixtureSpec] = field(default_factory=list)


def load_fixtures_config(patterns: Iterable[str] | None = None) -> FixturesConfig:
    """Load fixture declarations; defaults to ``settings.fixtures_config_paths``."""
    if patterns is None:
        patterns = settings.fixtures_config_paths
    fixtures_map: dict[str, dict[str, Any]] = {}

    for path, data in read_yaml_documents(patterns):
        for f in expand_env(data.get("fixtures") or []):
            if "name" not in f:
                raise ValueError(f"Fixture entry without a name in {path}: {f}")
            fixtures_map[f["name"]] = f

    specs = [
        FixtureSpec(
            name=raw["name"],
            descriptor=raw.get("descriptor"),
            classes=list(raw.get("classes") or []),
            deploy=raw.get("deploy", True),
        )
        for raw in fixtures_map.values()
    ]

    logger.info("Loaded %d fixture spec(s): %s", len(specs), [s.name for s in specs])
    return FixturesConfig(fixtures=specs)


def build_fixtures(registry: "WebAppFixtures", cfg: FixturesConfig) -> list["WebApp"]:
    """Create, populate and (optionally) deploy every fixture in ``cfg``."""
    built: list["WebApp"] = []
    for spec in cfg.fixtures:
        app = registry.new_fixture(spec.name)
        if spec.descriptor:
            app.copy_web_inf(spec.descriptor)
        for identifier in spec.classes:
            app.copy_class(identifier)
        if spec.deploy:
            app.deploy()
        built.append(app)
    return built
