"""Rich formatters for vscreen CLI output."""

from typing import List

from rich.console import Console
from rich.table import Table

from ..models.mode import PurgeResult
from ..models.resolution import ResolutionSpec
from ..models.slot import VirtualOutputSlot


# Global console instance
console = Console()


def format_slot_table(slots: List[VirtualOutputSlot], title: str = "Virtual Outputs") -> Table:
    """Format pool slots as a Rich table.

    Args:
        slots: Slots to display, in index order
        title: Table title

    Returns:
        Rich Table object ready for display
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")

    table.add_column("#", justify="right", style="white", width=3)
    table.add_column("Output", style="bold")
    table.add_column("State")
    table.add_column("Mode", style="blue")
    table.add_column("Geometry", style="yellow")
    table.add_column("Rotation", style="magenta")

    for slot in slots:
        if slot.is_active:
            state = "[green]active[/green]"
            geometry = str(slot.geometry) if slot.geometry else "-"
            rotation = slot.orientation.value if slot.orientation else "-"
        else:
            state = "[dim]free[/dim]"
            geometry = rotation = "-"
        table.add_row(
            str(slot.index),
            slot.name,
            state,
            slot.mode or "-",
            geometry,
            rotation,
        )

    return table


def format_resolution_table(specs: List[ResolutionSpec]) -> Table:
    """Format the resolution catalog as a Rich table."""
    table = Table(title="Resolutions", show_header=True, header_style="bold cyan")

    table.add_column("ID", justify="right", style="white")
    table.add_column("Name", style="bold green")
    table.add_column("Size", style="blue")

    for spec in specs:
        table.add_row(str(spec.id), spec.name or "-", f"{spec.width}x{spec.height}")

    return table


def format_purge_table(result: PurgeResult) -> Table:
    """Format a purge outcome: one row per mode touched."""
    table = Table(title="Mode Purge", show_header=True, header_style="bold cyan")

    table.add_column("Mode", style="bold")
    table.add_column("Result")

    for name in result.removed:
        table.add_row(name, "[green]removed[/green]")
    for name in result.skipped:
        table.add_row(name, "[yellow]skipped (in use)[/yellow]")

    return table
