"""
Rich progress displays for CLI operations.

All output goes to stderr so stdout carries only the JSON result.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from logosmith.core.models import TIER_REMOTE, OperationResult

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


@contextmanager
def operation_progress(label: str, remote_model: str | None = None) -> Iterator[None]:
    """
    Display a spinner while an operation runs.

    Args:
        label: What is happening, e.g. "Generating logo"
        remote_model: Remote model tried first, if the remote tier is enabled
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    desc_parts = [label]
    if remote_model:
        model_display = remote_model if len(remote_model) <= 40 else f"{remote_model[:37]}..."
        desc_parts.append(f"[dim]({model_display})[/dim]")
    else:
        desc_parts.append("[dim](local only)[/dim]")

    with progress:
        task = progress.add_task(" ".join(desc_parts), total=None)
        yield
        progress.update(task, completed=True)


def print_success_result(result: OperationResult, title: str = "Logo Ready") -> None:
    """Print a panel summarising which tier produced the artifact and where it lives."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    table.add_row("File", f"[bold green]{result.artifact.path}[/bold green]")
    table.add_row("URL", result.url)
    tier_style = "green" if result.tier == TIER_REMOTE else "yellow"
    table.add_row("Tier", f"[{tier_style}]{result.tier}[/{tier_style}]")
    if result.metadata.model:
        table.add_row("Model", result.metadata.model)
    table.add_row("Size", f"{result.artifact.size} bytes")
    if result.prompt:
        table.add_row("Prompt", f"[dim]{result.prompt}[/dim]")

    panel = Panel(
        table,
        title=f"[bold green]✓ {title}[/bold green]",
        border_style="green",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")
