# deal_scout/storage/file_manager.py

"""Handles saving scraped records and deal boards to disk."""

import csv
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook

from deal_scout.config.settings import Settings
from deal_scout.models.records import PUBLIC_FIELDS, CanonicalRecord, Deal

logger = logging.getLogger("deal_scout.storage")

FILE_TYPES: tuple[str, ...] = ("csv", "xlsx")

_UNSAFE_RE = re.compile(r"[^a-z0-9]+")


def sanitize_keyword(keyword: str | None) -> str:
    """Filesystem-safe stem derived from the search keyword."""
    normalized = _UNSAFE_RE.sub("_", (keyword or "").lower())
    return normalized.strip("_") or "amazon"


def _cell(value: Any) -> Any:
    """Spreadsheet cell value; missing numbers become blank cells."""
    return "" if value is None else value


class FileManager:
    """Handles saving scraped records and deal boards to disk."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "FileManager initialised, results_dir=%s", self.results_dir
        )

    def save_results(
        self,
        records: list[CanonicalRecord],
        keyword: str,
        file_type: str = "csv",
    ) -> Path:
        """Write *records* to a timestamped CSV or XLSX file."""
        if not records:
            msg = "No products to save"
            raise ValueError(msg)
        extension = "xlsx" if file_type == "xlsx" else "csv"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        filename = (
            f"{sanitize_keyword(keyword)}_products_{timestamp}.{extension}"
        )
        filepath = self.results_dir / filename
        rows = [r.to_dict() for r in records]

        if extension == "xlsx":
            self._write_xlsx(filepath, rows)
        else:
            self._write_csv(filepath, rows)

        logger.info(
            "Saved %d products for keyword '%s' to %s",
            len(records),
            keyword,
            filepath,
        )
        return filepath

    @staticmethod
    def _write_csv(filepath: Path, rows: list[dict[str, Any]]) -> None:
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=list(PUBLIC_FIELDS))
            writer.writeheader()
            for row in rows:
                writer.writerow({k: _cell(v) for k, v in row.items()})

    @staticmethod
    def _write_xlsx(filepath: Path, rows: list[dict[str, Any]]) -> None:
        workbook = Workbook()
        sheet: Any = workbook.active
        sheet.title = "Products"
        sheet.append(list(PUBLIC_FIELDS))
        for row in rows:
            sheet.append([_cell(row[name]) for name in PUBLIC_FIELDS])
        workbook.save(filepath)

    def export_deals_csv(self, deals: list[Deal], label: str = "deals") -> Path:
        """Export a deal board, best ROI first, to a CSV file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        filepath = (
            self.results_dir
            / f"export_{sanitize_keyword(label)}_{timestamp}.csv"
        )
        ranked = sorted(deals, key=lambda d: d.roi, reverse=True)

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["Source", "Title", "Price", "Original", "ROI", "Profit", "URL"]
            )
            for d in ranked:
                writer.writerow(
                    [
                        d.source,
                        d.title,
                        _cell(d.price),
                        _cell(d.original_price),
                        d.roi,
                        _cell(d.potential_profit),
                        d.url,
                    ]
                )

        logger.info("Exported %d deals to %s", len(deals), filepath)
        return filepath
