"""Abstract installer source — the contract shared by every storage backend.

A source knows how to enumerate the installer versions it holds, load one
version into an editable ``Installer``, back up and republish it, and keep
its checksum sidecars current. Two backends implement it:

* ``MavenSource`` — a remote Maven repository reached over HTTP.
* ``DirectorySource`` — a local directory tree.
"""

from __future__ import annotations

import abc
import logging
from concurrent.futures import Executor, Future

from installer_rewriter.models.artifacts import Installer

logger = logging.getLogger(__name__)


class SourceFilesystemError(OSError):
    """Raised when a source's local storage cannot be read or written."""


class InstallerSource(abc.ABC):
    """Abstract base for installer storage backends.

    Subclasses **must** implement ``list_versions``, ``load``, ``save`` and
    ``resolve_location``. The remaining operations have no-op defaults.
    """

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def list_versions(self, version_filter: str | None = None) -> list[str]:
        """Enumerate every version the source holds.

        Parameters
        ----------
        version_filter:
            When given, only versions starting with this prefix are returned.
        """
        ...

    @abc.abstractmethod
    def load(self, version: str) -> Installer | None:
        """Load one version synchronously. ``None`` when it is not published."""
        ...

    @abc.abstractmethod
    def save(self, installer: Installer | None) -> None:
        """Publish a rewritten installer. ``None`` is a no-op."""
        ...

    @abc.abstractmethod
    def resolve_location(self, version: str) -> str:
        """Canonical location (URL or path) of a version's installer."""
        ...

    # ------------------------------------------------------------------
    # Shared behaviour
    # ------------------------------------------------------------------

    def fetch(self, version: str, executor: Executor) -> Future[Installer | None]:
        """Load *version* on *executor* without blocking the caller."""
        return executor.submit(self.load, version)

    def exists(self, version: str) -> bool:
        """Cheap existence probe. Backends without one report ``False``."""
        return False

    def backup(self, version: str) -> None:
        """Copy the currently published installer to the backup location."""

    def update_checksums(self, location: str) -> None:
        """Recompute and publish the checksum sidecars for *location*."""

    @staticmethod
    def _apply_filter(versions: list[str], version_filter: str | None) -> list[str]:
        if version_filter is None:
            return versions
        return [v for v in versions if v.startswith(version_filter)]

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"
