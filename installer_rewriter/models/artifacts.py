"""Installer artifact model — one version's jar plus its storage path."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from installer_rewriter.core.jar_contents import JarContents

INSTALLER_SUFFIX = "-installer.jar"


def installer_file_name(base_name: str, version: str) -> str:
    """Canonical file name: ``<baseName>-<version>-installer.jar``."""
    return f"{base_name}-{version}{INSTALLER_SUFFIX}"


class Installer(BaseModel):
    """An installer loaded for one processing unit.

    The ``jar`` is owned by this object for the duration of a single
    fetch -> rewrite -> save cycle. ``path`` is relative to the source root
    and never changes.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    version: str
    path: str
    jar: JarContents

    @property
    def changed(self) -> bool:
        return self.jar.changed
