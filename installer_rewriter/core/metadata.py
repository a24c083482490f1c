"""Repository metadata parsing — Maven version listings and latest-version lookups."""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any

logger = logging.getLogger(__name__)


class MetadataError(ValueError):
    """Raised when a repository index document cannot be parsed."""


def parse_maven_metadata(document: bytes) -> list[str]:
    """Return the declared versions of a ``maven-metadata.xml`` document.

    Versions come back in document order from
    ``/metadata/versioning/versions/version``. An empty document yields an
    empty list.
    """
    if not document.strip():
        return []
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise MetadataError(f"Malformed maven-metadata.xml: {exc}") from exc
    if root.tag != "metadata":
        raise MetadataError(f"Unexpected root element <{root.tag}> in maven-metadata.xml")
    return [
        (node.text or "").strip()
        for node in root.findall("./versioning/versions/version")
        if node.text and node.text.strip()
    ]


def parse_latest_version(document: bytes) -> str:
    """Extract ``version`` from a latest-version JSON response."""
    try:
        payload: Any = json.loads(document)
    except ValueError as exc:
        raise MetadataError(f"Malformed latest-version response: {exc}") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("version"), str):
        raise MetadataError("Latest-version response has no 'version' string")
    return payload["version"]
