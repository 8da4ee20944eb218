from __future__ import annotations

from pathlib import Path

import pytest

from webfixture.core.registry import WebAppFixtures
from webfixture.core.resolvers import DirectoryArtifactResolver, DirectoryResourceResolver

RESOURCES = Path(__file__).parent / "resources"


@pytest.fixture
def resources_dir() -> Path:
    return RESOURCES


@pytest.fixture
def resources() -> DirectoryResourceResolver:
    return DirectoryResourceResolver(RESOURCES)


@pytest.fixture
def artifacts() -> DirectoryArtifactResolver:
    return DirectoryArtifactResolver(RESOURCES / "classes")


@pytest.fixture
def test_root(tmp_path: Path) -> Path:
    root = tmp_path / "tests"
    root.mkdir()
    return root


@pytest.fixture
def fixtures(
    test_root: Path,
    resources: DirectoryResourceResolver,
    artifacts: DirectoryArtifactResolver,
) -> WebAppFixtures:
    return WebAppFixtures(test_root, resources=resources, artifacts=artifacts)


def tree(root: Path) -> list[str]:
    """Relative POSIX paths of everything below ``root``, sorted."""
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*"))


@pytest.fixture
def list_tree():
    return tree
