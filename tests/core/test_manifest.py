"""Tests for YAML fixture manifests."""
from __future__ import annotations

from pathlib import Path

import pytest

from webfixture.core.errors import ArtifactNotFound
from webfixture.core.manifest import FixtureSpec, build_fixtures, load_fixtures_config
from webfixture.core.registry import WebAppFixtures


class TestLoadFixturesConfig:
    def test_load_simple_fixture(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("ECHO_CTX", "echo-test")
        config_file = tmp_path / "fixtures.yaml"
        config_file.write_text(
            """
fixtures:
  - name: "${ECHO_CTX}"
    descriptor: empty-web.xml
    classes:
      - com.example.EchoEndpoint
""",
            encoding="utf-8",
        )

        cfg = load_fixtures_config([str(config_file)])

        assert cfg.fixtures == [
            FixtureSpec(
                name="echo-test",
                descriptor="empty-web.xml",
                classes=["com.example.EchoEndpoint"],
                deploy=True,
            )
        ]

    def test_later_files_override(self, tmp_path: Path):
        (tmp_path / "a.yaml").write_text(
            "fixtures:\n  - name: x\n    deploy: true\n", encoding="utf-8"
        )
        (tmp_path / "b.yaml").write_text(
            "fixtures:\n  - name: x\n    deploy: false\n", encoding="utf-8"
        )

        cfg = load_fixtures_config([str(tmp_path / "*.yaml")])

        assert len(cfg.fixtures) == 1
        assert cfg.fixtures[0].deploy is False

    def test_missing_name_raises(self, tmp_path: Path):
        (tmp_path / "f.yaml").write_text(
            "fixtures:\n  - descriptor: empty-web.xml\n", encoding="utf-8"
        )

        with pytest.raises(ValueError, match="without a name"):
            load_fixtures_config([str(tmp_path / "f.yaml")])

    def test_no_files(self, tmp_path: Path):
        assert load_fixtures_config([str(tmp_path / "none-*.yaml")]).fixtures == []


class TestBuildFixtures:
    def test_builds_and_deploys(self, fixtures: WebAppFixtures, tmp_path: Path):
        manifest = tmp_path / "fixtures.yaml"
        manifest.write_text(
            """
fixtures:
  - name: echo-test
    descriptor: empty-web.xml
    classes: [com.example.EchoEndpoint, com.example.HelloEndpoint]
  - name: staged
    deploy: false
""",
            encoding="utf-8",
        )

        apps = build_fixtures(fixtures, load_fixtures_config([str(manifest)]))

        echo, staged = apps
        assert (echo.web_inf / "web.xml").is_file()
        assert (echo.classes_dir / "com/example/HelloEndpoint.class").is_file()
        assert not staged.descriptor_path.exists()
        assert [c.context_path for c in fixtures.contexts] == ["/echo-test"]

    def test_unresolved_class_propagates(self, fixtures: WebAppFixtures, tmp_path: Path):
        manifest = tmp_path / "fixtures.yaml"
        manifest.write_text(
            "fixtures:\n  - name: bad\n    classes: [com.example.Missing]\n",
            encoding="utf-8",
        )

        with pytest.raises(ArtifactNotFound):
            build_fixtures(fixtures, load_fixtures_config([str(manifest)]))

        assert len(fixtures.contexts) == 0


class TestRegistryLoadManifest:
    def test_load_manifest(self, fixtures: WebAppFixtures, tmp_path: Path):
        (tmp_path / "fixtures.yaml").write_text(
            "fixtures:\n  - name: from-yaml\n    descriptor: empty-web.xml\n",
            encoding="utf-8",
        )

        (app,) = fixtures.load_manifest([str(tmp_path / "fixtures.yaml")])

        assert app.context_path == "/from-yaml"
        assert app.descriptor_path.is_file()
        assert len(fixtures.contexts) == 1
