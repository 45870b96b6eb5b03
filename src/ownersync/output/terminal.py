"""Rich terminal reporter — rulesets and sync outcomes."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ownersync.rules.codeowners import format_owner
from ownersync.rules.models import Ruleset
from ownersync.sync.models import SyncAction, SyncReport, SyncResult

_ACTION_STYLE = {
    SyncAction.UNCHANGED: "bold black on green",
    SyncAction.CREATE: "bold white on blue",
    SyncAction.UPDATE: "bold black on yellow",
    SyncAction.CLEAR: "bold white on red",
}


def _action_pill(action: SyncAction) -> Text:
    return Text(f" {action.value.upper()} ", style=_ACTION_STYLE.get(action, ""))


def ruleset_table(ruleset: Ruleset, title: str) -> Table:
    table = Table(title=title, title_style="bold", border_style="dim")
    table.add_column("Pattern", style="cyan")
    table.add_column("Owners", style="magenta")
    for rule in ruleset:
        table.add_row(rule.pattern, " ".join(format_owner(o) for o in rule.owners))
    return table


def render_ruleset(ruleset: Optional[Ruleset], title: str, console: Optional[Console] = None) -> None:
    """Print a ruleset, or a note when the file is absent."""
    console = console or Console(stderr=True)
    if ruleset is None:
        console.print(f"[yellow]⚠[/yellow]  {title}: file does not exist")
        return
    if not ruleset:
        console.print(f"[dim]{title}: no rules[/dim]")
        return
    console.print(ruleset_table(ruleset, title))


def _commit_cell(result: SyncResult) -> str:
    if result.commit_sha:
        return result.commit_sha[:12]
    if result.changed and result.dry_run:
        return "(dry run)"
    return "-"


def render(report: SyncReport, *, verbose: bool = False, console: Optional[Console] = None) -> None:
    """Print the outcome of a sync / check run."""
    console = console or Console(stderr=True)

    if not report.results:
        console.print("[dim]No owners files declared.[/dim]")
        return

    table = Table(title="ownersync", show_lines=True, title_style="bold", border_style="dim")
    table.add_column("Action", justify="center", width=12)
    table.add_column("Repository", style="cyan")
    table.add_column("Branch", style="green")
    table.add_column("Path", style="magenta")
    table.add_column("Commit")

    for result in report.results:
        table.add_row(
            _action_pill(result.action),
            result.file.full_name,
            result.file.branch,
            result.path,
            _commit_cell(result),
        )
    console.print(table)

    if verbose:
        for result in report.drifted:
            label = f"{result.file.full_name}@{result.file.branch}"
            render_ruleset(result.current, f"{label} current", console)
            render_ruleset(result.file.ruleset or [], f"{label} desired", console)

    console.print()
    drifted = len(report.drifted)
    if not drifted:
        console.print("[bold green]✅ All owners files are up to date.[/bold green]")
    elif report.committed:
        console.print(f"[bold green]✓ Committed {len(report.committed)} change(s).[/bold green]")
    else:
        console.print(f"[bold yellow]⚠️  {drifted} owners file(s) out of date.[/bold yellow]")
    console.print(f"[dim]Duration:[/dim] {report.duration_ms:.0f}ms")
