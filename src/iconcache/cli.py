"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .appctx import AppContext
from .config import DEFAULT_MANIFEST_NAME
from .errors import IconCacheError
from .io.manifest import distinct_identities, load_records
from .settings.manager import SettingsManager
from .utils.console_logger import ensure_console_logger
from .utils.keys import content_key

app = typer.Typer(help="Fetch and cache the icons listed in a manifest")
console = Console()


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IconCacheError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _configure_logging(verbose: bool) -> None:
    ensure_console_logger(
        logging.getLogger("iconcache"),
        "iconcache-cli",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


def _load_settings(settings_path: Optional[Path]) -> SettingsManager:
    settings = SettingsManager(path=settings_path)
    settings.load()
    return settings


@app.command("list")
@_handle_errors
def list_records(
    manifest: Path = typer.Argument(Path(DEFAULT_MANIFEST_NAME), help="Icon manifest JSON"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Settings file"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Override the cache directory"),
) -> None:
    """Show the manifest entries and whether each icon is cached."""

    settings = _load_settings(settings_path)
    strategy = str(settings.get("cache.key_strategy"))
    root = cache_dir or settings.cache_dir()

    table = Table(title=str(manifest))
    table.add_column("#", justify="right")
    table.add_column("Label")
    table.add_column("URL")
    table.add_column("Key")
    table.add_column("Cached")
    for index, record in enumerate(load_records(manifest)):
        key = content_key(record.identity, strategy)
        cached = (root / key).is_file()
        table.add_row(str(index), record.display_label, record.identity, key, "yes" if cached else "no")
    console.print(table)


@app.command()
@_handle_errors
def prefetch(
    manifest: Path = typer.Argument(Path(DEFAULT_MANIFEST_NAME), help="Icon manifest JSON"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Settings file"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Override the cache directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Load every icon of MANIFEST into the cache, one slot per entry."""

    from PySide6.QtCore import QCoreApplication

    _configure_logging(verbose)
    records = load_records(manifest)
    if not records:
        console.print("[yellow]No records to fetch.[/yellow]")
        return

    qt_app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    context = AppContext.create(_load_settings(settings_path), cache_dir=cache_dir)
    outcomes: dict[int, bool] = {}

    def _on_image(slot_id: int, image) -> None:
        outcomes[slot_id] = image is not None
        if len(outcomes) == len(records):
            qt_app.quit()

    try:
        for slot_id, record in enumerate(records):
            context.binding.bind(
                slot_id,
                record,
                functools.partial(_on_image, slot_id),
            )
        qt_app.exec()
    finally:
        context.close()

    failed = [records[slot].identity for slot, ok in sorted(outcomes.items()) if not ok]
    stats = context.fetcher.stats
    console.print(
        f"Loaded {len(records) - len(failed)} of {len(records)} icons "
        f"({len(distinct_identities(records))} distinct URLs): "
        f"{stats.disk_hits} from cache, {stats.network_transfers} downloaded."
    )
    for identity in failed:
        console.print(f"[red]failed[/red] {identity}")
    if failed:
        raise typer.Exit(1)


@app.command()
@_handle_errors
def path(
    url: str = typer.Argument(..., help="Icon URL"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Settings file"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Override the cache directory"),
) -> None:
    """Print the cache file used for URL."""

    settings = _load_settings(settings_path)
    key = content_key(url, str(settings.get("cache.key_strategy")))
    root = cache_dir or settings.cache_dir()
    typer.echo(str(root / key))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
