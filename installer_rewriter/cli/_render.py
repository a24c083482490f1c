"""Rich rendering of run results."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from installer_rewriter.models.outcome import RunReport, UnitState

_STATE_STYLE = {
    UnitState.DONE: "[green]saved[/green]",
    UnitState.SKIPPED: "[dim]skipped[/dim]",
    UnitState.FAILED: "[red]failed[/red]",
}


def print_report(console: Console, report: RunReport, *, show_skipped: bool = False) -> None:
    """Print a per-version table followed by a one-line summary."""
    rows = [o for o in report.outcomes if show_skipped or o.state != UnitState.SKIPPED]
    if rows:
        table = Table(title="Rewrite results")
        table.add_column("Version", style="cyan")
        table.add_column("Result", justify="center")
        table.add_column("Path")
        table.add_column("Error", style="red")
        for outcome in sorted(rows, key=lambda o: o.version):
            table.add_row(
                outcome.version,
                _STATE_STYLE.get(outcome.state, outcome.state.value),
                outcome.path or "",
                outcome.error or "",
            )
        console.print(table)

    console.print(
        f"[bold]{len(report.outcomes)}[/bold] versions: "
        f"[green]{len(report.done)} saved[/green], "
        f"{len(report.skipped)} skipped, "
        f"[red]{len(report.failed)} failed[/red]"
    )
