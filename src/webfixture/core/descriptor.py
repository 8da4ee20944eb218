# webfixture/core/descriptor.py
"""
Deployment descriptor (``WEB-INF/web.xml``) parsing.

Only the parts that matter for a test deployment are read:

- ``<display-name>``
- ``<context-param>`` name/value pairs
- the ``metadata-complete`` attribute on the root element, which turns
  endpoint discovery off

Element names are matched without their XML namespace so both the
``jakartaee`` and legacy ``javaee`` schemas parse.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from webfixture.core.errors import DescriptorError

logger = logging.getLogger(__name__)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(elem: ET.Element, name: str) -> str | None:
    for child in elem:
        if _local(child.tag) == name:
            return (child.text or "").strip()
    return None


@dataclass(frozen=True)
class WebDescriptor:
    display_name: str | None = None
    context_params: dict[str, str] = field(default_factory=dict)
    metadata_complete: bool = False
    source: Path | None = None

    @classmethod
    def empty(cls) -> "WebDescriptor":
        return cls()


def parse_descriptor(data: bytes, source: Path | None = None) -> WebDescriptor:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise DescriptorError(f"Malformed descriptor {source or ''}: {exc}") from exc

    if _local(root.tag) != "web-app":
        raise DescriptorError(
            f"Descriptor root must be <web-app>, got <{_local(root.tag)}>"
        )

    params: dict[str, str] = {}
    for elem in root:
        if _local(elem.tag) != "context-param":
            continue
        name = _child_text(elem, "param-name")
        if not name:
            raise DescriptorError("<context-param> without <param-name>")
        params[name] = _child_text(elem, "param-value") or ""

    return WebDescriptor(
        display_name=_child_text(root, "display-name"),
        context_params=params,
        metadata_complete=root.get("metadata-complete", "false").strip().lower() == "true",
        source=source,
    )


def load_descriptor(path: Path) -> WebDescriptor:
    """Load the descriptor at ``path``; a missing file yields an empty one."""
    if not path.exists():
        logger.debug("No descriptor at %s, using empty descriptor", path)
        return WebDescriptor.empty()
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DescriptorError(f"Unable to read descriptor {path}: {exc}") from exc
    return parse_descriptor(data, source=path)
