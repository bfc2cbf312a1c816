"""Display consumers for the resolved model list."""

from __future__ import annotations

from typing import Protocol

from rich.table import Table

from .models import ModelEntry


class DisplayConsumer(Protocol):
    """Receives the final sorted catalog for presentation."""

    def set_data(self, entries: list[ModelEntry]) -> None: ...


class ListDisplay:
    """Holds the data source of the model menu.

    The data is replaced as a whole; it keeps its previous value until
    set_data is called again.
    """

    def __init__(self) -> None:
        self.data: list[ModelEntry] | None = None
        self.updates = 0

    def set_data(self, entries: list[ModelEntry]) -> None:
        self.data = list(entries)
        self.updates += 1


def render_entries(entries: list[ModelEntry], title: str = "Models") -> Table:
    """Build a rich table for a list of entries."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Models", style="dim")
    table.add_column("Center", justify="center")

    for entry in entries:
        models = ", ".join(item.url or item.name for item in entry.items)
        table.add_row(entry.name, models, "yes" if entry.center_on_load else "")

    return table
