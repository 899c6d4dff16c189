"""Rich-based formatters for CLI output in repogist.

This module provides formatted console output for the repogist CLI using the
Rich library: status messages, an ingestion summary panel, a sweep report
table and a spinner for long-running fetches.

Links to third-party package documentation:
- Rich: https://rich.readthedocs.io/en/latest/
- Rich Tables: https://rich.readthedocs.io/en/latest/tables.html
- Rich Console: https://rich.readthedocs.io/en/latest/console.html

Sample input:
    print_success("Repository ingested successfully")
    print_ingestion_summary(result)
    print_sweep_report(report)

Expected output:
    ✅ Repository ingested successfully
    ╭──────── Ingestion Summary ────────╮
    │ Repository: https://github.com/...│
    │ Branch: main                      │
    │ Files: 42                         │
    ╰───────────────────────────────────╯
"""

from typing import List

from loguru import logger
from rich.console import Console
from rich.filesize import decimal
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from repogist.core.pipeline import IngestionResult
from repogist.core.results import Diagnostic, SweepReport

# Create console instance
console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message to the console with a green checkmark."""
    console.print(f"✅ [bold green]{message}[/]")
    logger.success(message)


def print_error(message: str) -> None:
    """Print an error message to the console with a red X."""
    console.print(f"❌ [bold red]Error:[/] {message}")
    logger.error(message)


def print_warning(message: str) -> None:
    console.print(f"⚠️ [bold yellow]Warning:[/] {message}")
    logger.warning(message)


def print_info(message: str) -> None:
    console.print(f"ℹ️ [bold blue]Info:[/] {message}")
    logger.info(message)


def print_ingestion_summary(result: IngestionResult) -> None:
    """Print a summary panel for an ingested repository.

    Args:
        result: Pipeline result to summarize
    """
    url = result.reference.canonical_url if result.reference else "unknown"
    tree_lines = result.tree.count("\n")
    panel = Panel(
        Text.from_markup(
            f"[bold blue]Repository:[/] {url}\n"
            f"[bold blue]Branch:[/] {result.branch or 'default'}\n"
            f"[bold blue]Files:[/] {result.file_count}\n"
            f"[bold blue]Tree entries:[/] {tree_lines}\n"
            f"[bold blue]Content size:[/] {decimal(len(result.content.encode('utf-8')))}\n"
            f"[bold blue]Diagnostics:[/] {len(result.diagnostics)}"
        ),
        title="Ingestion Summary",
        border_style="green",
    )
    console.print(panel)


def print_diagnostics(diagnostics: List[Diagnostic]) -> None:
    if not diagnostics:
        return
    table = Table(title="Diagnostics")
    table.add_column("Kind", style="yellow")
    table.add_column("Path", style="cyan")
    table.add_column("Message", style="white")
    for diagnostic in diagnostics:
        table.add_row(diagnostic.kind, diagnostic.path or "-", diagnostic.message)
    console.print(table)
    print_warning(f"Completed with {len(diagnostics)} diagnostics")


def print_sweep_report(report: SweepReport) -> None:
    """Print removed entries and failures from a workspace sweep."""
    if not report.removed and not report.failures:
        print_info("Nothing to sweep")
        return

    table = Table(title="Swept Entries")
    table.add_column("Path", style="green")
    table.add_column("Status", justify="right")
    for path in report.removed:
        table.add_row(str(path), "[green]removed[/]")
    for failure in report.failures:
        table.add_row(failure.path or "-", f"[red]{failure.message}[/]")
    console.print(table)


def get_spinner(text: str) -> Progress:
    """Create and return a spinner progress indicator.

    Args:
        text: Text to display next to the spinner

    Returns:
        A Progress object that can be used in a context manager
    """
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{text}[/]"),
        transient=True,
        console=console,
    )
