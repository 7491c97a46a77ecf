# deal_scout/services/enrichment.py

"""Optional second pass fetching each item's detail page."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from deal_scout.config.settings import Settings, clamp_number
from deal_scout.extractors.detail_page import DetailPageExtractor
from deal_scout.models.records import RawRecord

logger = logging.getLogger("deal_scout.enrichment")

ProgressCallback = Callable[[int, int], None]


def without_details(records: list[RawRecord]) -> list[RawRecord]:
    """Give skipped records the same description/image shape."""
    return [
        RawRecord(
            **{
                **record,
                "short_description": record.get("short_description") or "",
                "full_description": "",
                "high_res_image": (
                    record.get("high_res_image")
                    or record.get("thumbnail")
                    or ""
                ),
            }
        )
        for record in records
    ]


class DetailEnricher:
    """Fetches and merges detail-page fields for every record.

    At most ``concurrency`` fetches are in flight at once. Results are
    written back by index, so output order always matches input order.
    A failing item keeps degraded fields plus a ``detail_error`` note
    instead of failing the batch.
    """

    def __init__(
        self,
        gateway: Any,
        concurrency: Any = Settings.DEFAULT_CONCURRENCY,
        extractor: DetailPageExtractor | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.gateway = gateway
        self.concurrency = clamp_number(
            concurrency, 1, Settings.MAX_CONCURRENCY
        )
        self.extractor = extractor or DetailPageExtractor()
        self.progress = progress

    def _enrich_one(self, record: RawRecord) -> RawRecord:
        """Blocking fetch+parse for a single record."""
        try:
            markup = self.gateway.fetch_markup(record.get("url", ""))
            detail = self.extractor.parse(markup)
        except Exception as exc:
            logger.warning(
                "Detail fetch failed for %s: %s",
                record.get("url", ""),
                exc,
                exc_info=True,
            )
            return RawRecord(
                **{
                    **record,
                    "short_description": (
                        record.get("short_description") or ""
                    ),
                    "full_description": "",
                    "high_res_image": (
                        record.get("high_res_image")
                        or record.get("thumbnail")
                        or ""
                    ),
                    "detail_error": str(exc),
                }
            )
        return RawRecord(**{**record, **detail})

    async def enrich(self, records: list[RawRecord]) -> list[RawRecord]:
        """Enrich *records* concurrently, preserving their order."""
        total = len(records)
        results: list[RawRecord | None] = [None] * total
        semaphore = asyncio.Semaphore(self.concurrency)
        done = 0

        async def run_one(index: int, record: RawRecord) -> None:
            nonlocal done
            async with semaphore:
                results[index] = await asyncio.to_thread(
                    self._enrich_one, record
                )
            done += 1
            if self.progress is not None:
                self.progress(done, total)

        logger.info(
            "Enriching %d records (concurrency=%d)",
            total,
            self.concurrency,
        )
        await asyncio.gather(
            *(run_one(i, rec) for i, rec in enumerate(records))
        )
        return [r for r in results if r is not None]
