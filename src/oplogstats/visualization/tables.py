"""Rich-powered table and progress rendering for oplog statistics."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

from ..aggregators.metrics import derive
from ..aggregators.table import AggregateTable

_console = Console()

COLUMNS = ("Entry", "Documents", "Total size", "Share (%)")


def build_stats_table(table: AggregateTable, title: str | None = None) -> Table:
    """Build a Rich table with one row per key, largest total size first."""
    out = Table(title=title, box=box.SIMPLE_HEAVY)
    out.add_column(COLUMNS[0])
    for name in COLUMNS[1:]:
        out.add_column(name, justify="right", style="cyan")

    # Namespaces may contain "[" and "]"; keep keys out of markup parsing.
    for row in derive(table.snapshot()):
        out.add_row(Text(row.key), str(row.doc_count), row.size_text, row.share_text)
    return out


def print_stats(table: AggregateTable, console: Console | None = None, title: str | None = None) -> None:
    """Render the current statistics to ``console`` (stdout by default)."""
    (console or _console).print(build_stats_table(table, title=title))


def progress_bar(console: Console | None = None) -> Progress:
    """Progress indicator for the document stream.

    Usage::

        with progress_bar() as progress:
            task = progress.add_task("oplog", total=limit)
            ...
            progress.advance(task)
    """
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console or _console,
        transient=False,
    )
