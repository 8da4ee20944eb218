# webfixture/core/layout.py
"""Filesystem layout for exploded web-app fixtures.

Layout (root = test directory):
  {root}/
    {context_name}/
      WEB-INF/
        web.xml
        classes/
          {identifier-as-path}.class

Mapping an artifact identifier to a path is a pure function: hierarchy
segments become directories, the terminal segment becomes the file name.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

_CONTEXT_NAME = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_context_name(context_name: str) -> str:
    if not context_name or context_name in (".", "..") or not _CONTEXT_NAME.match(
        context_name
    ):
        raise ValueError(
            f"Invalid context name '{context_name}': expected a non-empty, "
            "filesystem-safe name ([A-Za-z0-9._-])"
        )
    return context_name


def identifier_segments(identifier: str) -> list[str]:
    """Split a dotted identifier, rejecting anything that is not a plain name.

    ``com.example.EchoEndpoint`` -> ``["com", "example", "EchoEndpoint"]``
    """
    segments = identifier.split(".") if identifier else []
    if not segments or not all(s.isidentifier() for s in segments):
        raise ValueError(
            f"Invalid artifact identifier '{identifier}': expected dotted names"
        )
    return segments


def artifact_relpath(identifier: str, suffix: str = ".class") -> PurePosixPath:
    """Relative path of an artifact below the classes directory.

    ``artifact_relpath("com.example.EchoEndpoint")``
    -> ``com/example/EchoEndpoint.class``
    """
    *parents, name = identifier_segments(identifier)
    return PurePosixPath(*parents, f"{name}{suffix}")


def identifier_from_relpath(relpath: PurePosixPath | str, suffix: str = ".class") -> str:
    """Inverse of :func:`artifact_relpath`."""
    rel = PurePosixPath(relpath)
    if not rel.name.endswith(suffix):
        raise ValueError(f"'{rel}' does not end with '{suffix}'")
    stem = rel.name[: len(rel.name) - len(suffix)]
    return ".".join([*rel.parent.parts, stem])


@dataclass(frozen=True)
class WebAppLayout:
    root: Path
    config_dir_name: str = "WEB-INF"
    classes_dir_name: str = "classes"
    descriptor_name: str = "web.xml"
    artifact_suffix: str = ".class"

    def context_dir(self, context_name: str) -> Path:
        # Not resolved: a symlinked context directory must not redirect the
        # fixture outside the root.
        return self.root.absolute() / validate_context_name(context_name)

    def config_dir(self, context_name: str) -> Path:
        return self.context_dir(context_name) / self.config_dir_name

    def classes_dir(self, context_name: str) -> Path:
        return self.config_dir(context_name) / self.classes_dir_name

    def descriptor_path(self, context_name: str) -> Path:
        return self.config_dir(context_name) / self.descriptor_name

    def artifact_path(self, context_name: str, identifier: str) -> Path:
        rel = artifact_relpath(identifier, self.artifact_suffix)
        return self.classes_dir(context_name).joinpath(*rel.parts)

    @staticmethod
    def context_path(context_name: str) -> str:
        """URL path prefix for a context: one leading slash, no trailing one."""
        return "/" + validate_context_name(context_name)
