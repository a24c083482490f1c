"""Source options shared by every command, and the source factory behind them."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from installer_rewriter.config import RewriterSettings
from installer_rewriter.models.config import DirectorySourceConfig, MavenSourceConfig
from installer_rewriter.sources import InstallerSource, create_source

console = Console()

RewriteMavenOption = typer.Option(
    None,
    "--rewrite-maven",
    help="Base URL of the Maven repository whose installers are rewritten.",
)
MavenUserOption = typer.Option(
    None,
    "--maven-user",
    help="Repository user (defaults to INSTALLER_REWRITER_MAVEN_USER).",
)
MavenTokenOption = typer.Option(
    None,
    "--maven-token",
    help="Repository token (defaults to INSTALLER_REWRITER_MAVEN_TOKEN).",
)
MavenPathOption = typer.Option(
    None,
    "--maven-path",
    help="group:artifact coordinates of the installer artifacts.",
)
RewriteDirOption = typer.Option(
    None,
    "--rewrite-dir",
    help="Directory tree whose installers are rewritten.",
)
BackupOption = typer.Option(
    None,
    "--backup",
    help="Directory receiving backups of every installer before it is overwritten.",
)
FilterOption = typer.Option(
    None,
    "--filter",
    help="Only process versions starting with this prefix.",
)


def fail(message: str) -> typer.Exit:
    """Print *message* as an error and return the exit to raise."""
    console.print(f"[bold red]{message}[/bold red]")
    return typer.Exit(code=1)


def build_source(
    settings: RewriterSettings,
    *,
    rewrite_maven: str | None,
    maven_user: str | None,
    maven_token: str | None,
    maven_path: str | None,
    rewrite_dir: Path | None,
    backup: Path | None,
) -> InstallerSource:
    """Create the source selected on the command line.

    ``--rewrite-maven`` and ``--rewrite-dir`` are mutually exclusive and
    one of them is required.
    """
    if rewrite_maven and rewrite_dir:
        raise fail("--rewrite-maven and --rewrite-dir cannot be combined.")

    if rewrite_dir is not None:
        config = DirectorySourceConfig(
            root=rewrite_dir,
            backup=backup,
            base_names=settings.base_names,
        )
        return create_source(config, settings)

    if rewrite_maven:
        user = maven_user or settings.maven_user
        token = maven_token or settings.maven_token
        missing = [
            flag
            for flag, value in (
                ("--maven-user", user),
                ("--maven-token", token),
                ("--maven-path", maven_path),
            )
            if not value
        ]
        if missing:
            raise fail(f"--rewrite-maven requires {', '.join(missing)}.")
        try:
            config = MavenSourceConfig(
                url=rewrite_maven,
                user=user,
                token=token,
                artifact_path=maven_path,
                backup=backup,
            )
        except ValueError as exc:
            raise fail(f"Invalid Maven source: {exc}")
        return create_source(config, settings)

    raise fail("No source configured: pass --rewrite-maven or --rewrite-dir.")
