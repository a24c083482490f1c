"""Main Typer application — imports and registers all CLI commands.

Entry point: ``installer-rewriter`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from installer_rewriter.cli.commands.backup import backup_cmd
from installer_rewriter.cli.commands.checksums import checksums_cmd
from installer_rewriter.cli.commands.dry_run import dry_run_cmd
from installer_rewriter.cli.commands.rewrite import rewrite_cmd
from installer_rewriter.config import RewriterSettings
from installer_rewriter.logs import configure_logging

app = typer.Typer(
    name="installer-rewriter",
    help="Rewrite and republish installer jars across every published version.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to INSTALLER_REWRITER_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(log_level or RewriterSettings().log_level)


# Register subcommands
app.command(name="rewrite", help="Rewrite installers and republish the changed ones.")(rewrite_cmd)
app.command(name="dry-run", help="List versions and report missing installers.")(dry_run_cmd)
app.command(name="backup", help="Back up every installer without rewriting.")(backup_cmd)
app.command(name="checksums", help="Refresh checksum files of every installer.")(checksums_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
