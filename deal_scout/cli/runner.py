# deal_scout/cli/runner.py

"""Headless CLI runners for scraping, the deal board and source listing."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, TaskID
from rich.table import Table

from deal_scout.errors import DealScoutError
from deal_scout.models.records import CanonicalRecord, Deal
from deal_scout.services.deal_aggregator import DealAggregator
from deal_scout.services.enrichment import ProgressCallback
from deal_scout.services.scraper import ScrapeOptions, scrape_products
from deal_scout.sources.registry import list_sources
from deal_scout.storage.file_manager import FileManager

logger = logging.getLogger("deal_scout.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _money(value: float | None) -> str:
    return f"{value:,.2f}" if value is not None else "—"


def _print_records_table(records: list[CanonicalRecord]) -> None:
    """Render scraped records as a Rich table on stdout."""
    table = Table(
        title="Scraped Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Before", justify="right")
    table.add_column("Savings", justify="right", style="yellow")
    table.add_column("Rating", justify="center")
    table.add_column("Reviews", justify="right")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, r in enumerate(records, 1):
        table.add_row(
            str(idx),
            r.title[:60],
            _money(r.price),
            _money(r.before_discount),
            _money(r.savings) if r.is_discounted else "—",
            f"{r.rating}" if r.rating is not None else "—",
            f"{r.reviews_count:,}" if r.reviews_count is not None else "—",
            r.url,
        )

    Console().print(table)


def _print_deals_table(deals: list[Deal]) -> None:
    """Render a deal board as a Rich table on stdout."""
    table = Table(
        title="Deal Board",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="magenta")
    table.add_column("ROI", justify="right", style="bold green")
    table.add_column("Title", max_width=60)
    table.add_column("Price", justify="right")
    table.add_column("Original", justify="right")
    table.add_column("Profit", justify="right", style="yellow")
    table.add_column("URL", overflow="fold", style="dim")

    for d in deals:
        table.add_row(
            d.source,
            f"{round(d.roi * 100)}%" if not d.error else "[red]—[/red]",
            d.title[:60] if not d.error else f"[red]{d.title}[/red]",
            _money(d.price),
            _money(d.original_price),
            _money(d.potential_profit),
            d.url,
        )

    Console().print(table)


def _dump_json(payload: object) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


async def cli_scrape(
    options: ScrapeOptions,
    save: bool = True,
    file_type: str = "csv",
    output_dir: str | None = None,
    output_format: str = "json",
    show_progress: bool = False,
) -> int:
    """Run one retrieval and return an exit code (0=ok, 1=fail)."""
    _err.print(
        f"[bold]Scraping:[/bold] {options.keyword or '(no keyword)'}  "
        f"[dim]source={options.source} host={options.host}[/dim]"
    )

    progress_bar: Progress | None = None
    callback: ProgressCallback | None = None
    task: TaskID | None = None
    if show_progress and not options.skip_details:
        progress_bar = Progress(console=_err)
        progress_bar.start()

        def _advance(done: int, total: int) -> None:
            nonlocal task
            if progress_bar is None:
                return
            if task is None:
                task = progress_bar.add_task("Detail pages", total=total)
            progress_bar.update(task, completed=done)

        callback = _advance

    try:
        records = await scrape_products(options, progress=callback)
    except DealScoutError as exc:
        logger.error("Scrape failed: %s", exc, exc_info=True)
        _err.print(f"[red]Scrape failed: {exc}[/red]")
        return 1
    finally:
        if progress_bar is not None:
            progress_bar.stop()

    _err.print(
        f"[green]✓ Total scraped products count: {len(records)}[/green]"
    )
    failed = [r for r in records if r.detail_error]
    if failed:
        _err.print(
            f"[yellow]{len(failed)} detail pages could not be loaded[/yellow]"
        )

    if output_format == "table":
        _print_records_table(records)
    else:
        _dump_json([r.to_dict() for r in records])

    if save and records:
        try:
            manager = FileManager(Path(output_dir) if output_dir else None)
            path = manager.save_results(records, options.keyword, file_type)
        except (OSError, ValueError) as exc:
            logger.error("Save failed: %s", exc, exc_info=True)
            _err.print(f"[red]Save failed: {exc}[/red]")
            return 1
        _err.print(f"[dim]Saved {len(records)} products to {path}[/dim]")

    return 0


async def cli_deals(
    min_roi: float | None = None,
    keyword: str = "",
    output_format: str = "json",
) -> int:
    """Aggregate the deal board and print it."""
    _err.print("[bold]Collecting deals from all feeds...[/bold]")
    board = await DealAggregator().collect(min_roi, keyword)

    for placeholder in board.errors:
        _err.print(f"[red]{placeholder.source}: {placeholder.note}[/red]")
    _err.print(
        f"[green]✓ {board.count} deals at ROI ≥ "
        f"{round(board.min_roi * 100)}%[/green]"
    )

    if output_format == "table":
        _print_deals_table(board.deals)
    else:
        _dump_json(board.to_dict())
    return 0


def print_sources() -> int:
    """List every registered source."""
    table = Table(title="Sources", title_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Label")
    table.add_column("Kind", style="magenta")
    table.add_column("Keyword", justify="center")
    for source in list_sources():
        table.add_row(
            source.id,
            source.label,
            source.kind.value,
            "required" if source.requires_keyword else "",
        )
    Console().print(table)
    return 0
