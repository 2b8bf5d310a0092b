"""Rich terminal output for a merge run."""

from rich.console import Console
from rich.table import Table
from rich.markup import escape
from rich.text import Text
from rich import box

from .models import EvaluationResult, RunSummary

console = Console(stderr=True)


def _outcome(result: EvaluationResult) -> Text:
    if result.failure is not None:
        return Text(result.failure.kind.value, style="bold red")
    if result.merged:
        return Text("merged", style="bold green")
    if result.dry_run:
        return Text("would merge", style="cyan")
    return Text("skipped", style="yellow")


def _detail(result: EvaluationResult) -> Text:
    if result.failure is not None:
        return Text(str(result.failure))
    if result.merged:
        return Text(result.sha[:12])
    if result.dry_run:
        return Text("dry run")
    return Text("checks not passed")


def build_summary_table(summary: RunSummary) -> Table:
    table = Table(
        title=escape(f"{summary.repository.full_name} (label {summary.label})"),
        box=box.SIMPLE,
    )
    table.add_column("PR", justify="right", style="bold")
    table.add_column("Outcome")
    table.add_column("Detail", overflow="fold")
    for result in summary.results:
        table.add_row(f"#{result.number}", _outcome(result), _detail(result))
    return table


def print_summary(summary: RunSummary, out: Console = console) -> None:
    if not summary.results:
        out.print(f"[yellow]No open pull requests in {summary.repository.full_name} "
                  f"carry the label {escape(summary.label)}.[/yellow]")
        return
    out.print(build_summary_table(summary))
    out.print(
        f"{len(summary.merged)} merged, {len(summary.skipped)} skipped, "
        f"{len(summary.failures)} failed of {summary.candidates} labeled "
        f"({summary.total_open} open)"
    )
