# deal_scout/services/pagination.py

"""Sequential page-by-page accumulation for paginated search sources."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from deal_scout.config.settings import Settings, clamp_number
from deal_scout.errors import NoProductsError
from deal_scout.extractors.base import BaseExtractor, ExtractionContext
from deal_scout.extractors.search_cards import build_search_url
from deal_scout.models.records import RawRecord

logger = logging.getLogger("deal_scout.pagination")


class PaginationState(str, Enum):
    """Where the controller is in its page loop."""

    FETCHING = "fetching"
    ACCUMULATING = "accumulating"
    EXHAUSTED = "exhausted"
    TARGET_REACHED = "target-reached"
    PAGE_LIMIT_REACHED = "page-limit-reached"


@dataclass
class PaginationResult:
    """Records gathered across pages plus how the loop ended."""

    records: list[RawRecord] = field(default_factory=list)
    pages_fetched: int = 0
    state: PaginationState = PaginationState.FETCHING
    target: int = 1


class PaginationController:
    """Drives fetch+extract cycles until the target count is met.

    Pages are requested strictly one after another; each page's results
    are inspected before the next is requested. An empty page ends the
    run. Running out of pages under target is not an error, but ending
    with no records at all is.
    """

    def __init__(
        self,
        gateway: Any,
        extractor: BaseExtractor,
        host: str = Settings.DEFAULT_HOST,
        max_pages: int = Settings.MAX_PAGES,
    ) -> None:
        self.gateway = gateway
        self.extractor = extractor
        self.host = host
        self.max_pages = max_pages
        self.state = PaginationState.FETCHING

    def collect(self, keyword: str, target: Any) -> PaginationResult:
        """Accumulate up to *target* records (clamped to 1..MAX_PRODUCTS)."""
        result = PaginationResult(
            target=clamp_number(target, 1, Settings.MAX_PRODUCTS)
        )
        context = ExtractionContext(host=self.host)
        page = 1

        while True:
            self.state = PaginationState.FETCHING
            url = build_search_url(keyword, self.host, page)
            logger.info(
                "Fetching page %d (%d/%d so far)",
                page,
                len(result.records),
                result.target,
            )
            markup = self.gateway.fetch_markup(url)
            page_records = self.extractor.extract(markup, context)
            result.pages_fetched = page

            if not page_records:
                self.state = PaginationState.EXHAUSTED
                logger.info("Page %d returned no results", page)
                break

            self.state = PaginationState.ACCUMULATING
            remaining = result.target - len(result.records)
            result.records.extend(page_records[:remaining])

            if len(result.records) >= result.target:
                self.state = PaginationState.TARGET_REACHED
                break
            if page >= self.max_pages:
                self.state = PaginationState.PAGE_LIMIT_REACHED
                logger.warning(
                    "Stopped at page limit %d with %d/%d records",
                    self.max_pages,
                    len(result.records),
                    result.target,
                )
                break
            page += 1

        result.state = self.state
        if not result.records:
            msg = "No products were parsed from the Amazon response"
            raise NoProductsError(msg)
        return result
