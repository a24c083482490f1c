"""Local directory source — installers stored anywhere below a root folder.

Layout is free-form: every file named ``<baseName>-<version>-installer.jar``
below the root is a candidate. Checksum sidecars live beside the installer,
and backups mirror the installer's path relative to the root.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from installer_rewriter.core.hasher import (
    checksum_sidecar_names,
    compute_checksums,
    stale_sidecar_names,
)
from installer_rewriter.core.jar_contents import JarContents
from installer_rewriter.models.artifacts import INSTALLER_SUFFIX, Installer
from installer_rewriter.models.config import DirectorySourceConfig
from installer_rewriter.sources.base import InstallerSource, SourceFilesystemError

logger = logging.getLogger(__name__)


class DirectorySource(InstallerSource):
    """Installer source backed by a local directory tree.

    Parameters
    ----------
    config:
        Root directory, optional backup root and the base names stripped
        from file names when deriving versions.
    """

    def __init__(self, config: DirectorySourceConfig) -> None:
        self.config = config
        self._root = Path(config.root)
        self._backup = Path(config.backup) if config.backup is not None else None

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def version_of(self, file_name: str) -> str | None:
        """Derive the version from an installer file name.

        Returns ``None`` for names that do not follow the naming convention.
        """
        if not file_name.endswith(INSTALLER_SUFFIX):
            return None
        stem = file_name[: -len(INSTALLER_SUFFIX)]
        for base_name in self.config.base_names:
            prefix = f"{base_name}-"
            if stem.startswith(prefix):
                return stem[len(prefix):] or None
        return None

    def _installers(self) -> list[Path]:
        if not self._root.is_dir():
            raise SourceFilesystemError(f"Installer root is not a readable directory: {self._root}")
        try:
            return sorted(p for p in self._root.rglob(f"*{INSTALLER_SUFFIX}") if p.is_file())
        except OSError as exc:
            raise SourceFilesystemError(f"Failed to scan {self._root}: {exc}") from exc

    def _relative(self, path: Path) -> str:
        return path.relative_to(self._root).as_posix()

    def _index(self) -> dict[str, Path]:
        """Map a unique key to every installer below the root.

        The key is the version when a single file carries it. Files sharing a
        version are keyed by their path relative to the root instead, so each
        of them is still listed and processed on its own.
        """
        by_version: dict[str, list[Path]] = {}
        for path in self._installers():
            version = self.version_of(path.name)
            if version is not None:
                by_version.setdefault(version, []).append(path)

        index: dict[str, Path] = {}
        for version, paths in by_version.items():
            if len(paths) == 1:
                index[version] = paths[0]
                continue
            logger.warning(
                "%d installers share version %s, addressing them by path: %s",
                len(paths),
                version,
                ", ".join(self._relative(p) for p in paths),
            )
            for path in paths:
                index[self._relative(path)] = path
        return index

    def _find(self, key: str) -> Path | None:
        """Resolve a listed key: a version or a path relative to the root."""
        path = self._index().get(key)
        if path is not None:
            return path
        candidate = self._root / key
        if self.version_of(candidate.name) is not None and candidate.is_file():
            return candidate
        return None

    def list_versions(self, version_filter: str | None = None) -> list[str]:
        return [
            key
            for key, path in self._index().items()
            if self._apply_filter([self.version_of(path.name)], version_filter)
        ]

    def resolve_location(self, version: str) -> str:
        path = self._find(version)
        if path is None:
            raise FileNotFoundError(f"No installer for version {version} under {self._root}")
        return str(path)

    def exists(self, version: str) -> bool:
        return self._find(version) is not None

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def load(self, version: str) -> Installer | None:
        path = self._find(version)
        if path is None:
            logger.info("No installer found for %s", version)
            return None
        return Installer(
            version=self.version_of(path.name) or version,
            path=self._relative(path),
            jar=JarContents.load(path),
        )

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def _backup_copy(self, source: Path) -> None:
        assert self._backup is not None
        target = self._backup / source.relative_to(self._root)
        if target.exists():
            # The first backup holds the original published bytes; keep it.
            logger.debug("Backup %s already exists, keeping it", target)
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        logger.debug("Backed up %s to %s", source, target)

    def backup(self, version: str) -> None:
        """Copy the installer and its sidecars into the backup tree.

        *version* is any listed key or the installer's path relative to the root.
        """
        if self._backup is None:
            return
        path = self._find(version)
        if path is None:
            return
        self._backup_copy(path)
        for name in stale_sidecar_names(path.name):
            sidecar = path.parent / name
            if sidecar.exists():
                self._backup_copy(sidecar)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, installer: Installer | None) -> None:
        if installer is None:
            return

        path = (self._root / installer.path).absolute()
        self.backup(installer.path)

        path.parent.mkdir(parents=True, exist_ok=True)
        installer.jar.save(path)
        logger.info("Saved to %s", path)

        # Backups already hold the old sidecars; drop them before regenerating.
        for name in stale_sidecar_names(path.name):
            sidecar = path.parent / name
            if sidecar.exists():
                sidecar.unlink()

        self._write_checksums(path)

    def update_checksums(self, location: str) -> None:
        path = Path(location)
        if not path.is_absolute():
            path = self._root / path
        if not path.is_file():
            logger.warning("Cannot refresh checksums, %s does not exist", path)
            return
        self._write_checksums(path)

    def _write_checksums(self, path: Path) -> None:
        checksums = compute_checksums(path.read_bytes())
        names = checksum_sidecar_names(path.name)
        for algorithm, digest in checksums.items():
            name = names[algorithm]
            sidecar = path.parent / name
            tmp = sidecar.with_name(f".{name}.tmp")
            tmp.write_text(digest, encoding="utf-8")
            os.replace(tmp, sidecar)
        logger.debug("Wrote %d checksum files for %s", len(checksums), path)

    def __repr__(self) -> str:
        return f"<DirectorySource root={str(self._root)!r} backup={self._backup}>"
