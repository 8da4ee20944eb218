# webfixture/core/fs.py
"""
Directory and file helpers used to lay out fixture trees.

All helpers are idempotent and wrap ``OSError`` into :class:`IOFailure`.
Writes go through a temporary sibling file and an atomic rename so a
failed copy never leaves a truncated destination behind.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from webfixture.core.errors import IOFailure

logger = logging.getLogger(__name__)


def ensure_exists(path: Path) -> Path:
    """Create ``path`` (and parents) as a directory if missing."""
    if path.exists() and not path.is_dir():
        raise IOFailure(f"Path exists and is not a directory: {path}", path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IOFailure(f"Unable to create directory {path}: {exc}", path) from exc
    return path


def ensure_empty(path: Path) -> Path:
    """Make ``path`` an existing, empty directory.

    Existing children are removed; the directory itself is kept so that
    handles other code may hold on it stay valid. A symlink at ``path`` is
    removed and replaced by a real directory; its target is left untouched.
    """
    if path.is_symlink():
        try:
            path.unlink()
        except OSError as exc:
            raise IOFailure(f"Unable to remove symlink {path}: {exc}", path) from exc
        logger.debug("Removed symlink %s", path)
        return ensure_exists(path)

    if path.exists() and not path.is_dir():
        raise IOFailure(f"Path exists and is not a directory: {path}", path)

    if path.exists():
        try:
            for child in path.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        except OSError as exc:
            raise IOFailure(f"Unable to clear directory {path}: {exc}", path) from exc
        logger.debug("Cleared directory %s", path)
        return path

    return ensure_exists(path)


def write_bytes(dest: Path, data: bytes) -> Path:
    """Write ``data`` to ``dest`` atomically, overwriting any existing file."""
    ensure_exists(dest.parent)
    if dest.is_dir():
        raise IOFailure(f"Destination is a directory: {dest}", dest)

    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp"
        )
    except OSError as exc:
        raise IOFailure(f"Unable to write {dest}: {exc}", dest) from exc
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp, dest)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise IOFailure(f"Unable to write {dest}: {exc}", dest) from exc

    logger.debug("Wrote %s (%d bytes)", dest, len(data))
    return dest


def is_empty_dir(path: Path) -> bool:
    return path.is_dir() and not any(path.iterdir())
