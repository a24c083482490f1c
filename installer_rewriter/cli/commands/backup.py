"""``installer-rewriter backup`` — back up every installer without rewriting."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

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


def backup_cmd(
    backup: Path = typer.Option(
        ...,
        "--backup",
        help="Directory receiving the backups.",
    ),
    rewrite_maven: str = RewriteMavenOption,
    maven_user: str = MavenUserOption,
    maven_token: str = MavenTokenOption,
    maven_path: str = MavenPathOption,
    rewrite_dir: Path = RewriteDirOption,
    version_filter: str = FilterOption,
) -> None:
    """Copy every listed installer into the backup directory."""
    source = build_source(
        RewriterSettings(),
        rewrite_maven=rewrite_maven,
        maven_user=maven_user,
        maven_token=maven_token,
        maven_path=maven_path,
        rewrite_dir=rewrite_dir,
        backup=backup,
    )
    try:
        versions = source.list_versions(version_filter)
    except (MetadataError, TransportError, SourceFilesystemError) as exc:
        raise fail(f"Cannot list versions: {exc}")

    failed: list[str] = []
    for version in versions:
        try:
            source.backup(version)
        except (TransportError, OSError) as exc:
            logger.error("Failed to back up %s: %s", version, exc)
            failed.append(version)

    console.print(
        f"Backed up [bold]{len(versions) - len(failed)}[/bold] of {len(versions)} versions to {backup}"
    )
    if failed:
        raise fail(f"Backup failed for: {', '.join(failed)}")
