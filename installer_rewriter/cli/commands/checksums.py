"""``installer-rewriter checksums`` — refresh checksum sidecars of every installer."""

from __future__ import annotations

import logging
from pathlib import Path

from installer_rewriter.cli._options import (
    FilterOption,
    MavenPathOption,
    MavenTokenOption,
    MavenUserOption,
    RewriteDirOption,
    RewriteMavenOption,
    build_source,
    console,
    fail,
)
from installer_rewriter.config import RewriterSettings
from installer_rewriter.core.metadata import MetadataError
from installer_rewriter.sources import SourceFilesystemError, TransportError

logger = logging.getLogger(__name__)


def checksums_cmd(
    rewrite_maven: str = RewriteMavenOption,
    maven_user: str = MavenUserOption,
    maven_token: str = MavenTokenOption,
    maven_path: str = MavenPathOption,
    rewrite_dir: Path = RewriteDirOption,
    version_filter: str = FilterOption,
) -> None:
    """Recompute and publish md5/sha1/sha256/sha512 files for every installer."""
    source = build_source(
        RewriterSettings(),
        rewrite_maven=rewrite_maven,
        maven_user=maven_user,
        maven_token=maven_token,
        maven_path=maven_path,
        rewrite_dir=rewrite_dir,
        backup=None,
    )
    try:
        versions = source.list_versions(version_filter)
    except (MetadataError, TransportError, SourceFilesystemError) as exc:
        raise fail(f"Cannot list versions: {exc}")

    failed: list[str] = []
    for version in versions:
        try:
            source.update_checksums(source.resolve_location(version))
        except (TransportError, OSError) as exc:
            logger.error("Failed to refresh checksums of %s: %s", version, exc)
            failed.append(version)

    console.print(f"Refreshed checksums of [bold]{len(versions) - len(failed)}[/bold] versions")
    if failed:
        raise fail(f"Checksum refresh failed for: {', '.join(failed)}")
