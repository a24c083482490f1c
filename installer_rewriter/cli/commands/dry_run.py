"""``installer-rewriter dry-run`` — list versions and report missing installers.

Nothing is downloaded or written: every listed version is only probed for
existence.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from installer_rewriter.cli._options import (
    BackupOption,
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


def dry_run_cmd(
    rewrite_maven: str = RewriteMavenOption,
    maven_user: str = MavenUserOption,
    maven_token: str = MavenTokenOption,
    maven_path: str = MavenPathOption,
    rewrite_dir: Path = RewriteDirOption,
    backup: Path = BackupOption,
    version_filter: str = FilterOption,
) -> None:
    """List the versions a rewrite would process and flag missing installers."""
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
        missing = [v for v in versions if not source.exists(v)]
    except (MetadataError, TransportError, SourceFilesystemError) as exc:
        raise fail(f"Dry run failed: {exc}")

    table = Table(title=f"{len(versions)} versions")
    table.add_column("Version", style="cyan")
    table.add_column("Installer", justify="center")
    for version in versions:
        present = "[red]missing[/red]" if version in missing else "[green]present[/green]"
        table.add_row(version, present)
    console.print(table)

    if missing:
        console.print(f"[yellow]{len(missing)} installers missing:[/yellow] {', '.join(missing)}")
    else:
        console.print("[green]All listed installers are present.[/green]")
