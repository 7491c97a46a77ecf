# main.py

"""Entry point for deal_scout (terminal deal board or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from deal_scout.config.logging_config import setup_logging
from deal_scout.config.settings import Settings
from deal_scout.sources.registry import DEFAULT_SOURCE, source_ids
from deal_scout.storage.file_manager import FILE_TYPES

logger = logging.getLogger("deal_scout.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="deal-scout",
        description=(
            "Scrapes search listings and deal feeds through a rotating "
            "proxy relay and exports them to CSV/XLSX."
        ),
        epilog=f"Available sources: {', '.join(source_ids())}",
    )
    parser.add_argument(
        "-k",
        "--keyword",
        default="",
        help="Search keyword (e.g. 'baking mat').",
    )
    parser.add_argument(
        "-a",
        "--api-key",
        default=Settings.RELAY_API_KEY,
        dest="api_key",
        help="Relay API key (default: $SCRAPINGANT_API_KEY).",
    )
    parser.add_argument(
        "-n",
        "--number",
        default=Settings.DEFAULT_COUNT,
        help=f"Number of products to scrape (max {Settings.MAX_PRODUCTS}).",
    )
    parser.add_argument(
        "-S",
        "--source",
        default=DEFAULT_SOURCE,
        choices=source_ids(),
        help=f"Source to scrape (default: {DEFAULT_SOURCE}).",
    )
    parser.add_argument(
        "-H",
        "--host",
        default=Settings.DEFAULT_HOST,
        help="Regional host (amazon.fr, amazon.co.uk, ...).",
    )
    parser.add_argument(
        "-c",
        "--country",
        default=Settings.DEFAULT_COUNTRY,
        help="Relay proxy location.",
    )
    parser.add_argument(
        "--skip-details",
        action="store_true",
        default=False,
        dest="skip_details",
        help="Skip detail pages (faster, no descriptions/hi-res images).",
    )
    parser.add_argument(
        "--concurrency",
        default=Settings.DEFAULT_CONCURRENCY,
        help="Concurrent detail fetches (1-10).",
    )
    parser.add_argument(
        "--show-progress",
        action="store_true",
        default=False,
        dest="show_progress",
        help="Show a progress bar while fetching detail pages.",
    )
    parser.add_argument(
        "--no-save",
        action="store_false",
        default=True,
        dest="save",
        help="Do not write the results to a file.",
    )
    parser.add_argument(
        "-t",
        "--file-type",
        choices=list(FILE_TYPES),
        default="csv",
        dest="file_type",
        help="File type for saved results (default: csv).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_dir",
        help="Custom output directory (default: results/).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Console output format (default: json).",
    )
    parser.add_argument(
        "--deals",
        action="store_true",
        default=False,
        help="Print the aggregated deal board instead of scraping.",
    )
    parser.add_argument(
        "--min-roi",
        type=float,
        default=None,
        dest="min_roi",
        help=f"Minimum ROI for --deals (default: {Settings.MIN_ROI}).",
    )
    parser.add_argument(
        "--list-sources",
        action="store_true",
        default=False,
        dest="list_sources",
        help="List the registered sources and exit.",
    )
    return parser


def _run_tui() -> None:
    """Launch the interactive Textual deal board."""
    from deal_scout.ui.app import DealBoardApp

    try:
        app = DealBoardApp()
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("deal_scout TUI shutting down")


def _run_scrape(args: argparse.Namespace) -> None:
    """Run a headless scrape and exit."""
    from deal_scout.cli.runner import cli_scrape
    from deal_scout.services.scraper import ScrapeOptions

    options = ScrapeOptions(
        keyword=args.keyword,
        api_key=args.api_key,
        number=args.number,
        host=args.host,
        country=args.country,
        skip_details=args.skip_details,
        concurrency=args.concurrency,
        source=args.source,
    )
    exit_code = asyncio.run(
        cli_scrape(
            options,
            save=args.save,
            file_type=args.file_type,
            output_dir=args.output_dir,
            output_format=args.output_format,
            show_progress=args.show_progress,
        )
    )
    sys.exit(exit_code)


def _run_deals(args: argparse.Namespace) -> None:
    """Print the aggregated deal board and exit."""
    from deal_scout.cli.runner import cli_deals

    exit_code = asyncio.run(
        cli_deals(args.min_roi, args.keyword, args.output_format)
    )
    sys.exit(exit_code)


def main(argv: list[str] | None = None) -> None:
    """Route to the TUI (no args) or one of the headless modes."""
    log_file = setup_logging()
    logger.info("deal_scout starting, log file: %s", log_file)

    args_list = sys.argv[1:] if argv is None else argv
    if not args_list:
        _run_tui()
        return

    args = _build_parser().parse_args(args_list)
    if args.list_sources:
        from deal_scout.cli.runner import print_sources

        sys.exit(print_sources())
    elif args.deals:
        _run_deals(args)
    else:
        _run_scrape(args)


if __name__ == "__main__":
    main()
