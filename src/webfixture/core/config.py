# webfixture/core/config.py
"""
Central configuration for fixture building.

Environment variables (prefix ``WEBFIXTURE_``) override defaults. The
layout names are settings so tests can assert against them, but the
defaults are the conventional exploded web-app layout and rarely change.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(
        env_prefix="WEBFIXTURE_", env_file=".env", extra="ignore"
    )

    log_level: str = "INFO"
    log_json: bool = True

    # Where fixtures and test resources live
    test_root: str = Field(
        default="target/tests",
        description="Directory under which fixture trees are created",
    )
    resources_dir: str = Field(
        default="tests/resources",
        description="Directory searched for descriptor resources",
    )
    default_descriptor: str = "empty-web.xml"

    # Layout convention
    config_dir_name: str = "WEB-INF"
    classes_dir_name: str = "classes"
    descriptor_name: str = "web.xml"
    artifact_suffix: str = ".class"

    # Context attribute that switches endpoint discovery on
    discovery_attribute: str = "webfixture.endpoint_discovery"

    # Local server
    server_host: str = "127.0.0.1"
    server_port: int = 0
    startup_timeout: float = Field(default=10.0, gt=0)

    # Optional YAML fixture manifests (glob patterns)
    fixtures_config_paths: list[str] = Field(
        default_factory=lambda: ["config/fixtures.yaml"]
    )


settings = Settings()
