"""
Rich progress displays for CLI operations.

All output goes to stderr to preserve stdout for machine-readable output
(the saved file path).
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from lensedit.core.presets import Preset

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


@contextmanager
def edit_progress(model: str | None = None, media_type: str | None = None) -> Iterator[None]:
    """
    Display a spinner while an edit is processing.

    Args:
        model: The image model being used
        media_type: Media type of the input image

    Yields:
        None while the edit is in progress
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    desc_parts = ["Editing image"]
    if model:
        desc_parts.append(f"[dim]({model})[/dim]")
    if media_type:
        desc_parts.append(f"• [dim cyan]{media_type}[/dim cyan]")

    with progress:
        task = progress.add_task(" ".join(desc_parts), total=None)
        yield
        progress.update(task, completed=True)


def print_success_result(
    output_path: Path,
    elapsed: float,
    model_used: str,
    instruction: str,
    source: Path,
) -> None:
    """Print a panel with the saved path and edit details."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    table.add_row("Saved to", f"[bold green]{output_path}[/bold green]")
    table.add_row("Source", str(source))
    table.add_row("Model", model_used)
    table.add_row("Time", f"{elapsed:.1f}s")
    table.add_row("Instruction", f"[dim]{instruction}[/dim]")

    panel = Panel(
        table,
        title="[bold green]✓ Image Edited[/bold green]",
        border_style="green",
        padding=(1, 2),
    )

    console.print()
    console.print(panel)


def print_presets(presets: list[Preset]) -> None:
    """Print preset keys, labels and instruction text as a table."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Instruction", style="dim")
    for preset in presets:
        table.add_row(preset.key, preset.label, preset.text)
    console.print(table)


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")
