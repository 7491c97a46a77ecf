# deal_scout/services/deal_aggregator.py

"""Aggregates deals from every single-shot source concurrently."""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from deal_scout.config.settings import Settings
from deal_scout.extractors.base import ExtractionContext
from deal_scout.gateway.proxy_gateway import ProxyGateway
from deal_scout.models.records import Deal
from deal_scout.services.normalizer import evaluate_deal
from deal_scout.sources.registry import (
    SourceDefinition,
    SourceKind,
    list_sources,
)

logger = logging.getLogger("deal_scout.deals")

UNAVAILABLE_TITLE = "Feed unavailable"
UNAVAILABLE_NOTE = "Could not load data. Check source manually."


@dataclass
class DealBoard:
    """Ranked deals from one aggregation run."""

    min_roi: float
    deals: list[Deal] = field(default_factory=list)
    updated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def count(self) -> int:
        return len(self.deals)

    @property
    def errors(self) -> list[Deal]:
        """Placeholder entries for sources that failed."""
        return [d for d in self.deals if d.error]

    def to_dict(self) -> dict[str, Any]:
        """Payload for the JSON deal feed."""
        return {
            "updatedAt": self.updated_at,
            "minRoi": self.min_roi,
            "count": self.count,
            "deals": [d.to_dict() for d in self.deals],
        }


def resolve_min_roi(value: Any) -> float:
    """Requested ROI threshold, or the default when unusable or zero."""
    try:
        roi = float(value)
    except (TypeError, ValueError):
        return Settings.MIN_ROI
    if not math.isfinite(roi) or roi <= 0:
        return Settings.MIN_ROI
    return roi


def unavailable_deal(source: SourceDefinition, url: str) -> Deal:
    """Placeholder shown in place of a source that failed to load."""
    return Deal(
        source=source.label,
        title=UNAVAILABLE_TITLE,
        url=url,
        price=None,
        original_price=None,
        roi=0.0,
        potential_profit=None,
        note=UNAVAILABLE_NOTE,
        error=True,
    )


class DealAggregator:
    """Runs fetch+extract+evaluate for each deal source independently.

    A source that fails is downgraded to a placeholder entry so the
    rest of the board still loads.
    """

    def __init__(
        self,
        gateway: ProxyGateway | None = None,
        sources: list[SourceDefinition] | None = None,
    ) -> None:
        self.gateway = gateway or ProxyGateway(
            Settings.RELAY_API_KEY, Settings.DEFAULT_COUNTRY
        )
        self.sources = sources if sources is not None else [
            s
            for s in list_sources()
            if s.kind is not SourceKind.PAGINATED_SEARCH
        ]

    def evaluate_source(
        self, source: SourceDefinition, keyword: str, min_roi: float,
    ) -> list[Deal]:
        """Blocking pipeline for one source."""
        url = source.resolve_url(keyword)
        if source.kind is SourceKind.SINGLE_JSON:
            payload = self.gateway.fetch_json(url)
        else:
            payload = self.gateway.fetch_markup(url)

        context = ExtractionContext(
            source_id=source.id, label=source.label, url=url
        )
        deals: list[Deal] = []
        for record in source.extractor.extract(payload, context):
            deal = evaluate_deal(record, source.label)
            if deal is not None and deal.roi >= min_roi:
                deals.append(deal)
        logger.info(
            "[%s] %d deals at ROI >= %.2f", source.id, len(deals), min_roi
        )
        return deals

    async def collect(
        self, min_roi: Any = None, keyword: str = "",
    ) -> DealBoard:
        """Aggregate every applicable source into a ranked board."""
        threshold = resolve_min_roi(min_roi)
        keyword = (keyword or "").strip()
        sources = [
            s for s in self.sources if keyword or not s.requires_keyword
        ]

        batches = await asyncio.gather(
            *(
                asyncio.to_thread(
                    self.evaluate_source, source, keyword, threshold
                )
                for source in sources
            ),
            return_exceptions=True,
        )

        board = DealBoard(min_roi=threshold)
        for source, batch in zip(sources, batches):
            if isinstance(batch, BaseException):
                logger.error(
                    "Failed to scrape %s: %s",
                    source.label,
                    batch,
                    exc_info=batch,
                )
                board.deals.append(
                    unavailable_deal(source, source.resolve_url(keyword))
                )
            else:
                board.deals.extend(batch)

        board.deals.sort(key=lambda d: d.roi, reverse=True)
        return board
