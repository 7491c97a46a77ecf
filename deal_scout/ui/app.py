# deal_scout/ui/app.py

"""Terminal deal board for the deal_scout aggregation pipeline."""

import logging
import webbrowser
from datetime import datetime
from typing import cast

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Static,
)

from deal_scout.config.settings import Settings
from deal_scout.models.records import Deal
from deal_scout.services.deal_aggregator import DealAggregator, DealBoard
from deal_scout.storage.file_manager import FileManager

logger = logging.getLogger("deal_scout.ui")


def filter_deals(deals: list[Deal], keyword: str) -> list[Deal]:
    """Case-insensitive title filter applied locally."""
    needle = keyword.strip().lower()
    if not needle:
        return list(deals)
    return [d for d in deals if needle in d.title.lower()]


def _money(value: float | None) -> str:
    return f"${value:,.2f}" if value is not None else "—"


class DealBoardApp(App[object]):
    """Terminal deal board for the deal_scout aggregation pipeline."""

    CSS_PATH = "styles.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh_board", "Refresh"),
        Binding("e", "export", "Export CSV"),
        Binding("c", "copy_url", "Copy URL"),
    ]

    def __init__(self, aggregator: DealAggregator | None = None) -> None:
        super().__init__()
        self.aggregator = aggregator
        self.board: DealBoard | None = None
        self.shown_deals: list[Deal] = []
        self.file_manager: FileManager | None = None

    def compose(self) -> ComposeResult:
        """Build the widget tree for the TUI."""
        yield Header()
        yield Container(
            Static("💸 Deal Scout", id="title"),
            Horizontal(
                Input(
                    value=str(round(Settings.MIN_ROI * 100)),
                    placeholder="Min ROI %",
                    id="roi_input",
                ),
                Input(placeholder="Filter by keyword...", id="keyword_input"),
                Button("Refresh", variant="primary", id="refresh_btn"),
                id="filters",
            ),
            Static("Ready", id="status"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="deals_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            id="main_container",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Configure the deals table columns on startup."""
        table = self._table()
        table.add_columns(
            "Source", "ROI", "Title", "Price", "Original", "Profit"
        )

    def _table(self) -> DataTable[str | Text]:
        return cast(
            DataTable[str | Text],
            self.query_one("#deals_table", DataTable),
        )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        if event.button.id == "refresh_btn":
            await self.load_deals()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter in the ROI box reloads; in the keyword box it refilters."""
        if event.input.id == "roi_input":
            await self.load_deals()
        elif event.input.id == "keyword_input":
            self.apply_filter()

    async def action_refresh_board(self) -> None:
        await self.load_deals()

    def _min_roi(self) -> float | None:
        """ROI threshold from the percent input, ``None`` if invalid."""
        raw = self.query_one("#roi_input", Input).value.strip()
        try:
            return float(raw) / 100
        except ValueError:
            return None

    async def load_deals(self) -> None:
        """Fetch a fresh board from every deal source."""
        status = self.query_one("#status", Static)
        min_roi = self._min_roi()
        if min_roi is None:
            self.notify("ROI must be a number", severity="warning")
            return

        status.update("🔍 Loading deals...")
        if self.aggregator is None:
            self.aggregator = DealAggregator()
        try:
            self.board = await self.aggregator.collect(min_roi)
        except Exception as exc:
            logger.error("Deal board refresh failed", exc_info=True)
            status.update(f"❌ Failed to load deals. {exc}")
            return

        for placeholder in self.board.errors:
            self.notify(
                f"{placeholder.source}: {placeholder.note}",
                severity="error",
            )
        self.apply_filter()

    def apply_filter(self) -> None:
        """Refilter the current board and redraw the table."""
        if self.board is None:
            return
        keyword = self.query_one("#keyword_input", Input).value
        self.shown_deals = filter_deals(self.board.deals, keyword)
        self.populate_table()

        updated = datetime.fromisoformat(self.board.updated_at)
        status = self.query_one("#status", Static)
        if not self.shown_deals:
            status.update(
                "No deals matched your filter yet. "
                "Try lowering the ROI threshold."
            )
        else:
            status.update(
                f"✅ {len(self.shown_deals)} deals · updated "
                f"{updated.astimezone():%Y-%m-%d %H:%M:%S}"
            )

    def populate_table(self) -> None:
        """Fill the DataTable with the visible deals."""
        table = self._table()
        table.clear()
        for d in self.shown_deals:
            roi = (
                Text("—", style="red")
                if d.error
                else Text(f"{round(d.roi * 100)}% ROI", style="bold green")
            )
            table.add_row(
                d.source,
                roi,
                d.title[:60],
                _money(d.price),
                _money(d.original_price),
                _money(d.potential_profit),
            )

    def _selected(self) -> Deal | None:
        row = self._table().cursor_row
        if 0 <= row < len(self.shown_deals):
            return self.shown_deals[row]
        return None

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected
    ) -> None:
        """Open the selected deal in the default browser."""
        if 0 <= event.cursor_row < len(self.shown_deals):
            webbrowser.open(self.shown_deals[event.cursor_row].url)

    def action_export(self) -> None:
        """Export the visible deals to a CSV file."""
        if not self.shown_deals:
            self.notify("No deals to export", severity="warning")
            return
        try:
            if self.file_manager is None:
                self.file_manager = FileManager()
            path = self.file_manager.export_deals_csv(self.shown_deals)
            logger.info("Exported deals to %s", path)
            self.notify(f"Exported to {path}")
        except Exception as e:
            logger.error("Failed to export deals", exc_info=True)
            self.notify(f"Export failed: {e}", severity="error")

    def action_copy_url(self) -> None:
        """Copy the selected deal's URL to the clipboard."""
        deal = self._selected()
        if deal is None:
            return
        try:
            import pyperclip  # type: ignore[import-untyped]

            pyperclip.copy(deal.url)
            self.notify("URL Copied")
        except Exception:
            logger.error("Failed to copy URL to clipboard", exc_info=True)
            self.notify("Clipboard unavailable", severity="warning")
