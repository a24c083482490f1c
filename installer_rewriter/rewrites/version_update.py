"""Installer version update — swap the bundled installer code for a newer build.

The installer jar carries the installer's own program code next to the
version-specific install profile. This rewrite replaces that program code
with the contents of a reference installer, leaving the profile alone.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from installer_rewriter.config import RewriterSettings
from installer_rewriter.core.jar_contents import JarContents
from installer_rewriter.core.metadata import parse_latest_version
from installer_rewriter.models.artifacts import Installer
from installer_rewriter.rewrites.base import InstallerRewrite

logger = logging.getLogger(__name__)

# Folders holding previously bundled installer code and its maven metadata.
OBSOLETE_FOLDERS: tuple[str, ...] = (
    "net",
    "com",
    "joptsimple",
    "neoforged",
    "META-INF/maven",
)
# Signature files of the old code, invalid once the code changes.
OBSOLETE_ENTRIES: tuple[str, ...] = (
    "META-INF/NEOFORGE.SF",
    "META-INF/NEOFORGE.RSA",
)


class NewVersionUpdate(InstallerRewrite):
    """Bring every installer up to the reference installer's version.

    Parameters
    ----------
    reference:
        The loaded reference installer. Owned by the rewrite and released
        by ``close()``.
    target_version:
        Version to compare against. Defaults to the reference manifest's
        ``Implementation-Version``.
    """

    def __init__(self, reference: JarContents, target_version: str | None = None) -> None:
        self._reference = reference
        self.target_version = target_version or reference.version_marker
        if self.target_version is None:
            raise ValueError("Reference installer has no Implementation-Version")

    @property
    def name(self) -> str:
        return "New version update"

    def rewrite(self, installer: Installer) -> None:
        if self._reference.closed:
            raise ValueError("Reference installer is already closed")
        jar = installer.jar
        if jar.version_marker == self.target_version:
            return

        logger.debug(
            "Updating %s from installer %s to %s",
            installer.version,
            jar.version_marker,
            self.target_version,
        )
        for folder in OBSOLETE_FOLDERS:
            jar.delete_folder(folder)
        for entry in OBSOLETE_ENTRIES:
            jar.delete(entry)

        jar.merge(self._reference, overwrite=True)

    def close(self) -> None:
        self._reference.close()


def download_latest_installer(
    session: requests.Session, settings: RewriterSettings
) -> Path:
    """Download the newest reference installer into the cache directory.

    Reuses a previously downloaded copy of the same version.
    """
    response = session.get(settings.latest_installer_api, timeout=settings.request_timeout)
    response.raise_for_status()
    version = parse_latest_version(response.content)

    target = Path(settings.installer_cache_dir) / f"installer-{version}.jar"
    if target.is_file():
        logger.info("Using cached reference installer %s", target)
        return target

    url = settings.installer_download_template.format(version=version)
    logger.info("Downloading reference installer %s from %s", version, url)
    response = session.get(url, timeout=settings.request_timeout)
    response.raise_for_status()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(response.content)
    return target


def load_latest_installer(
    session: requests.Session, settings: RewriterSettings
) -> NewVersionUpdate:
    """Build a ``NewVersionUpdate`` from the latest published reference installer."""
    return NewVersionUpdate(JarContents.load(download_latest_installer(session, settings)))
