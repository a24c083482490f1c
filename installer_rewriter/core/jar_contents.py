"""In-memory editable jar archive.

``JarContents`` loads every entry of a jar (zip) archive into memory and
exposes the small set of edits the rewrites need: deleting single entries or
whole folders, merging another archive on top, and serializing back to bytes.

Every edit that actually alters the entry table flips the ``changed`` flag.
Edits that find nothing to do (deleting a missing entry, merging identical
content) leave it untouched, which is what makes rewrites idempotent.

Entry metadata is never shared between archives: ``zipfile`` updates a
``ZipInfo`` in place while writing it, so every write works on a copy.
A closed archive rejects edits and serialization with ``ValueError``.
"""

from __future__ import annotations

import copy
import io
import logging
import os
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)

MANIFEST_PATH = "META-INF/MANIFEST.MF"


class JarFormatError(ValueError):
    """Raised when archive bytes cannot be read as a zip file."""


def parse_main_attributes(manifest: bytes) -> dict[str, str]:
    """Parse the main section of a jar manifest.

    The main section ends at the first blank line. Lines starting with a
    single space continue the previous value.
    """
    attributes: dict[str, str] = {}
    last_key: str | None = None
    for raw in manifest.decode("utf-8", errors="replace").splitlines():
        if not raw:
            break
        if raw.startswith(" ") and last_key is not None:
            attributes[last_key] += raw[1:]
            continue
        key, sep, value = raw.partition(":")
        if not sep:
            continue
        last_key = key.strip()
        attributes[last_key] = value.strip()
    return attributes


class JarContents:
    """Mutable, in-memory view of a jar archive.

    Parameters
    ----------
    entries:
        Mapping of entry name to ``(ZipInfo, data)`` in archive order.
    """

    def __init__(self, entries: dict[str, tuple[zipfile.ZipInfo, bytes]]) -> None:
        self._entries = entries
        self._changed = False
        self._closed = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | str) -> JarContents:
        """Read a jar from disk."""
        return cls.from_bytes(Path(path).read_bytes())

    @classmethod
    def from_bytes(cls, data: bytes) -> JarContents:
        """Read a jar from raw archive bytes."""
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                entries = {
                    info.filename: (info, archive.read(info.filename))
                    for info in archive.infolist()
                }
        except zipfile.BadZipFile as exc:
            raise JarFormatError(f"Not a valid jar archive: {exc}") from exc
        return cls(entries)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def changed(self) -> bool:
        """``True`` once any edit altered the archive."""
        return self._changed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def read(self, name: str) -> bytes:
        """Return the bytes of a single entry."""
        self._check_open()
        return self._entries[name][1]

    def manifest_attribute(self, name: str) -> str | None:
        """Look up a main attribute of ``META-INF/MANIFEST.MF``."""
        entry = self._entries.get(MANIFEST_PATH)
        if entry is None:
            return None
        return parse_main_attributes(entry[1]).get(name)

    @property
    def version_marker(self) -> str | None:
        """The ``Implementation-Version`` recorded in the manifest."""
        return self.manifest_attribute("Implementation-Version")

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def delete(self, name: str) -> None:
        """Remove a single entry, if present."""
        self._check_open()
        if self._entries.pop(name, None) is not None:
            self._changed = True

    def delete_folder(self, folder: str) -> None:
        """Remove a folder entry and everything below it."""
        self._check_open()
        prefix = folder.rstrip("/") + "/"
        doomed = [name for name in self._entries if name.startswith(prefix)]
        for name in doomed:
            del self._entries[name]
        if doomed:
            self._changed = True

    def merge(self, other: JarContents, overwrite: bool) -> None:
        """Copy every entry of *other* into this archive.

        Parameters
        ----------
        other:
            The archive to merge from. It is not modified.
        overwrite:
            When ``True`` conflicting entries take *other*'s content,
            otherwise the existing entry wins.
        """
        self._check_open()
        other._check_open()
        for name, (info, data) in other._entries.items():
            existing = self._entries.get(name)
            if existing is not None and (not overwrite or existing[1] == data):
                continue
            self._entries[name] = (copy.copy(info), data)
            self._changed = True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Serialize the archive, keeping each entry's original metadata."""
        self._check_open()
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            # The manifest goes first so jar tooling can find it.
            ordered = sorted(self._entries.items(), key=lambda item: item[0] != MANIFEST_PATH)
            for _name, (info, data) in ordered:
                archive.writestr(copy.copy(info), data)
        return buffer.getvalue()

    def save(self, path: Path | str) -> None:
        """Write the archive to *path*, replacing it atomically."""
        target = Path(path)
        tmp = target.with_name(f".{target.name}.tmp")
        tmp.write_bytes(self.to_bytes())
        os.replace(tmp, target)
        logger.debug("Wrote %d entries to %s", len(self._entries), target)

    def close(self) -> None:
        """Drop the in-memory entries. Safe to call more than once."""
        if not self._closed:
            self._entries = {}
            self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("Attempt to use a closed jar")

    def __repr__(self) -> str:
        return f"<JarContents entries={len(self._entries)} changed={self._changed}>"
