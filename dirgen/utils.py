"""Shared console helpers for DirGen.

Rich-based status printing, progress-event rendering, a summary table and
duration formatting.  The engine itself never prints; everything
user-visible goes through these helpers.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dirgen.engine.events import ProgressEvent, Stage

console = Console()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(0.25)   -> "0.2s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STAGE_STYLES: dict[Stage, str] = {
    Stage.LOAD_START: "bold cyan",
    Stage.LOAD_END: "cyan",
    Stage.EXPAND_START: "bold magenta",
    Stage.EXPAND_END: "magenta",
    Stage.MATERIALIZE_START: "bold green",
    Stage.CREATE_DIRECTORY: "green",
    Stage.COPY_FILE: "blue",
    Stage.MATERIALIZE_END: "bold green",
}


def print_event(event: ProgressEvent) -> None:
    """Print one progress event, coloured by stage.

    Suitable as the ``on_progress`` sink of ``DirectoryGenerator``.
    """
    style = STAGE_STYLES.get(event.stage, "dim")
    console.print(f"[{style}]{escape(event.message)}[/{style}]", highlight=False)


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
