"""Console progress display and result tables."""

from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from .batch import STATUS_ERROR, STATUS_FAILED, STATUS_PROCESSING, STATUS_SUCCESS
from .models import IdentificationResult

_STATUS_MARKUP = {
    STATUS_PROCESSING: "Processing...",
    STATUS_SUCCESS: "[green]✅ Success[/green]",
    STATUS_FAILED: "[red]❌ Failed[/red]",
    STATUS_ERROR: "[red]❌ Error[/red]",
}
_FINAL_STATUSES = {STATUS_SUCCESS, STATUS_FAILED, STATUS_ERROR}


class ProgressDisplay:
    """Progress bar driven by the batch status callback."""

    def __init__(self, total: int, console: Optional[Console] = None) -> None:
        self._total = total
        self._progress = Progress(
            TextColumn("Processing:"),
            BarColumn(),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TextColumn("{task.fields[filename]} {task.fields[status]}"),
            console=console,
        )
        self._task = None

    def __enter__(self) -> "ProgressDisplay":
        self._progress.start()
        self._task = self._progress.add_task("identify", total=self._total, filename="", status="")
        return self

    def __exit__(self, *exc_info) -> None:
        self._progress.stop()

    def on_status(self, index: int, file_name: str, status: str) -> None:
        if self._task is None:
            return
        completed = index + 1 if status in _FINAL_STATUSES else index
        markup = _STATUS_MARKUP.get(status, f"[yellow]{escape(status)}[/yellow]")
        self._progress.update(
            self._task,
            completed=completed,
            filename=escape(file_name),
            status=markup,
        )


def render_report(results: Sequence[IdentificationResult], console: Optional[Console] = None) -> None:
    console = console or Console()
    identified = [(result.file_name, result.card) for result in results if result.card is not None]
    failed = [result.file_name for result in results if result.card is None]

    console.print("\n===== IDENTIFICATION RESULTS =====")
    console.print(f"Total cards processed: [bold]{len(results)}[/bold]")
    console.print(f"Successfully identified: [bold green]{len(identified)}[/bold green]")
    console.print(f"Failed to identify: [bold red]{len(failed)}[/bold red]")

    if not identified:
        console.print("\nNo cards were successfully identified.")
    else:
        console.print("\n===== IDENTIFIED CARDS =====")
        table = Table(header_style="bold cyan")
        table.add_column("Card Name", max_width=25)
        table.add_column("Set (Code)", max_width=15)
        table.add_column("Rarity", max_width=12)
        table.add_column("Border", max_width=12)
        table.add_column("Type", max_width=25)
        table.add_column("Filename", max_width=30)
        for file_name, card in identified:
            table.add_row(
                escape(card.card_name),
                escape(card.set_code),
                card.rarity.value,
                card.border_color.value,
                escape(card.type),
                escape(file_name),
            )
        console.print(table)

    if failed:
        console.print("\n===== FAILED IDENTIFICATIONS =====")
        failed_table = Table(header_style="bold red")
        failed_table.add_column("Filename", max_width=50)
        for file_name in failed:
            failed_table.add_row(escape(file_name))
        console.print(failed_table)
