"""``installer-rewriter rewrite`` — rewrite and republish every installer.

Lists the source's versions, applies the selected rewrites to each installer
concurrently and republishes the installers that changed.
"""

from __future__ import annotations

from pathlib import Path

import requests
import typer
from rich.panel import Panel

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
from installer_rewriter.cli._render import print_report
from installer_rewriter.config import RewriterSettings
from installer_rewriter.core.jar_contents import JarContents, JarFormatError
from installer_rewriter.core.metadata import MetadataError
from installer_rewriter.core.orchestrator import Rewriter
from installer_rewriter.rewrites import InstallerRewrite, NewVersionUpdate, load_latest_installer
from installer_rewriter.sources import SourceFilesystemError, TransportError


def _build_rewrites(
    settings: RewriterSettings,
    installer_version_update: bool,
    installer_jar: Path | None,
) -> list[InstallerRewrite]:
    rewrites: list[InstallerRewrite] = []
    if installer_jar is not None:
        try:
            rewrites.append(NewVersionUpdate(JarContents.load(installer_jar)))
        except (OSError, JarFormatError, ValueError) as exc:
            raise fail(f"Cannot use reference installer {installer_jar}: {exc}")
    elif installer_version_update:
        try:
            with requests.Session() as session:
                rewrites.append(load_latest_installer(session, settings))
        except (requests.RequestException, MetadataError, JarFormatError, ValueError) as exc:
            raise fail(f"Cannot fetch the latest reference installer: {exc}")
    return rewrites


def rewrite_cmd(
    rewrite_maven: str = RewriteMavenOption,
    maven_user: str = MavenUserOption,
    maven_token: str = MavenTokenOption,
    maven_path: str = MavenPathOption,
    rewrite_dir: Path = RewriteDirOption,
    backup: Path = BackupOption,
    version_filter: str = FilterOption,
    thread_limit: int = typer.Option(
        None,
        "--thread-limit",
        min=1,
        help="Maximum number of installers processed at the same time.",
    ),
    installer_version_update: bool = typer.Option(
        False,
        "--installer-version-update",
        help="Update every installer to the latest legacy installer build.",
    ),
    installer_jar: Path = typer.Option(
        None,
        "--installer-jar",
        help="Update every installer to this local reference installer instead.",
    ),
) -> None:
    """Rewrite every installer and republish the ones that changed."""
    settings = RewriterSettings()
    source = build_source(
        settings,
        rewrite_maven=rewrite_maven,
        maven_user=maven_user,
        maven_token=maven_token,
        maven_path=maven_path,
        rewrite_dir=rewrite_dir,
        backup=backup,
    )
    rewrites = _build_rewrites(settings, installer_version_update, installer_jar)
    limit = thread_limit or settings.thread_limit

    console.print(
        Panel(
            "\n".join([
                f"[bold]Source:[/bold]   {source!r}",
                f"[bold]Filter:[/bold]   {version_filter or '-'}",
                f"[bold]Rewrites:[/bold] {', '.join(r.name for r in rewrites) or 'none'}",
                f"[bold]Limit:[/bold]    {limit or 'unbounded'}",
            ]),
            title="[bold]Installer Rewriter[/bold]",
            border_style="cyan",
        )
    )
    if not rewrites:
        console.print("[yellow]No rewrites selected; installers will only be checked.[/yellow]")

    rewriter = Rewriter(rewrites)
    try:
        report = rewriter.run(source, version_filter, limit)
    except (MetadataError, TransportError, SourceFilesystemError) as exc:
        rewriter.close()
        raise fail(f"Cannot list versions: {exc}")

    print_report(console, report)
    if not report.ok:
        raise typer.Exit(code=1)
