"""Showcase CLI - model menu catalog tools."""

import asyncio
import logging
from pathlib import Path

import click
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .catalog.display import ListDisplay
from .catalog.display import render_entries
from .catalog.resolver import create_storage_query
from .catalog.resolver import resolve_catalog
from .catalog.sources import SourceKind
from .catalog.sources import build_sources
from .console import console
from .logging_setup import configure_run_log
from .notifications import ConsoleNotifier
from .notifications import NotificationBus
from .settings import AppSettings
from .settings import CatalogSettings
from .ui.log_filter import StageFailureLogFilter


def _configure_console_logging(verbose: bool) -> None:
    """Attach a console handler that hides records already shown as notifications."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(console=console, show_path=False)
    handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handler.addFilter(StageFailureLogFilter())
    root.addHandler(handler)
    if verbose:
        root.setLevel(logging.DEBUG)


def _load_catalog_settings(
    no_remote_storage: bool = False,
    remote_url: str | None = None,
    data_dir: Path | None = None,
) -> CatalogSettings:
    settings = AppSettings().get_catalog_settings()
    overrides: dict = {}
    if no_remote_storage:
        overrides["query_remote_storage"] = False
    if remote_url is not None:
        overrides["remote_url"] = remote_url
    if data_dir is not None:
        overrides["data_dir"] = data_dir
    return settings.model_copy(update=overrides) if overrides else settings


@click.group()
@click.version_option(package_name="showcase-app-cli")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="JSONL log file path")
def cli(log_file):
    """Showcase - model menu catalog for remote rendering."""
    configure_run_log(path=log_file)


@cli.command()
@click.option("--no-remote-storage", is_flag=True, help="Skip the storage container query")
@click.option("--remote-url", default=None, help="Remote catalog index URL")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None, help="Data directory")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def resolve(no_remote_storage: bool, remote_url: str | None, data_dir: Path | None, verbose: bool):
    """Resolve the model menu and show its entries."""
    _configure_console_logging(verbose)
    settings = _load_catalog_settings(no_remote_storage, remote_url, data_dir)

    notifications = NotificationBus()
    notifications.subscribe(ConsoleNotifier(console))
    display = ListDisplay()

    resolution = asyncio.run(resolve_catalog(settings, notifications, display))

    if resolution.stage is None:
        console.print("[yellow]No models resolved[/yellow]")
        return

    console.print(f"[dim]Resolved from: {resolution.stage.value}[/dim]")
    console.print(render_entries(display.data or resolution.entries))

    if resolution.saved_to is not None:
        console.print(f"[dim]Fallback data saved to {escape(str(resolution.saved_to))}[/dim]")


@cli.command()
@click.option("--no-remote-storage", is_flag=True, help="Skip the storage container query")
@click.option("--remote-url", default=None, help="Remote catalog index URL")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None, help="Data directory")
def sources(no_remote_storage: bool, remote_url: str | None, data_dir: Path | None):
    """Show the catalog sources in resolution order."""
    settings = _load_catalog_settings(no_remote_storage, remote_url, data_dir)
    storage_query = create_storage_query(settings)

    table = Table(title="Catalog Sources")
    table.add_column("#", justify="right")
    table.add_column("Source", style="cyan")
    table.add_column("Location")
    table.add_column("Status")

    for index, source in enumerate(build_sources(settings), start=1):
        if not source.enabled:
            status = "[dim]disabled[/dim]"
        elif source.kind == SourceKind.REMOTE_STORAGE and storage_query is None:
            status = "[dim]not configured[/dim]"
        elif source.kind == SourceKind.REMOTE_URL and not source.url:
            status = "[dim]not configured[/dim]"
        else:
            status = "[green]enabled[/green]"
        table.add_row(str(index), source.kind.value, escape(source.describe()), status)

    console.print(table)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
