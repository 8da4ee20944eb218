# webfixture/core/loader.py
"""
Dynamic imports, plus the YAML reading and ${VAR} expansion used by
fixture manifests.
"""
from __future__ import annotations

import importlib
import logging
import os
import re
from glob import glob
from pathlib import Path
from typing import Any, Iterable

import yaml

logger = logging.getLogger(__name__)

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def import_attr(path: str) -> Any:
    """
    Dynamically import an attribute from a module.

    Args:
        path: Import path in format 'module.path:attribute'. The attribute
            part may itself be dotted for nested classes.

    Raises:
        ValueError: If path format is invalid
        ImportError: If module cannot be imported
        AttributeError: If attribute doesn't exist
    """
    if ":" not in path:
        raise ValueError(f"Invalid import path '{path}', expected 'module:attr'")

    mod_name, attr = path.split(":", 1)

    try:
        obj: Any = importlib.import_module(mod_name)
    except ImportError as exc:
        logger.debug("Failed to import module '%s'", mod_name)
        raise ImportError(f"Cannot import module '{mod_name}'") from exc

    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise AttributeError(
                f"Module '{mod_name}' has no attribute '{attr}'"
            ) from exc
    return obj


def expand_env(value: Any) -> Any:
    """
    Replace ``${VAR}`` and ``${VAR:-default}`` in every string of a parsed
    manifest. An unset variable without a default is a ``ValueError``.
    """
    if isinstance(value, dict):
        return {k: expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env(v) for v in value]
    if not isinstance(value, str):
        return value

    def lookup(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        found = os.environ.get(name, default)
        if found is None:
            raise ValueError(
                f"Manifest references ${{{name}}} but it is not set and has no default"
            )
        return found

    return ENV_VAR_PATTERN.sub(lookup, value)


def read_yaml_documents(patterns: Iterable[str]) -> list[tuple[Path, dict[str, Any]]]:
    """
    Read every YAML file matching ``patterns`` as ``(path, mapping)`` pairs.

    Paths are de-duplicated and sorted so later files win when the caller
    merges by key. An empty file reads as ``{}``; any other non-mapping
    document is rejected.
    """
    patterns = list(patterns)
    paths = sorted({Path(m).resolve() for p in patterns for m in glob(p)})
    if not paths:
        logger.warning("No manifest files match %s", patterns)
        return []

    docs: list[tuple[Path, dict[str, Any]]] = []
    for path in paths:
        logger.debug("Reading manifest %s", path)
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Manifest {path} must contain a mapping, got {type(data).__name__}"
            )
        docs.append((path, data))
    return docs
