# deal_scout/extractors/feed_records.py

"""Extractor for the trusted JSON product feed."""

from typing import Any

from deal_scout.extractors.base import BaseExtractor, ExtractionContext
from deal_scout.models.records import RawRecord

FEED_PRODUCT_URL = "https://dummyjson.com/products/{id}"

# Assumed markup when the feed has no discount figure
SYNTHETIC_MARKUP = 1.25


def _as_float(value: Any) -> float:
    """Float value of *value*, 0.0 when it is not numeric."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class FeedRecordExtractor(BaseExtractor):
    """Maps ``{"products": [...]}`` feed items to raw records.

    The original price is implied from ``discountPercentage`` when the
    feed gives one, otherwise a flat markup is assumed. Items whose
    original price does not exceed the price are dropped.
    """

    def extract(
        self, payload: Any, context: ExtractionContext,
    ) -> list[RawRecord]:
        """Return one record per viable feed item."""
        if not isinstance(payload, dict):
            return []
        products = payload.get("products")
        if not isinstance(products, list):
            return []

        records: list[RawRecord] = []
        for item in products:
            if not isinstance(item, dict):
                continue
            record = self._parse_item(item, context)
            if record is not None:
                records.append(record)

        dropped = len(products) - len(records)
        if dropped:
            self.logger.debug(
                "[%s] Dropped %d feed items without a viable deal",
                context.source_id,
                dropped,
            )
        return records

    @staticmethod
    def _parse_item(
        item: dict[str, Any], context: ExtractionContext,
    ) -> RawRecord | None:
        """Map one feed item, or ``None`` when it is not a deal."""
        price = _as_float(item.get("price"))
        discount = _as_float(item.get("discountPercentage"))
        if discount >= 100:
            return None
        if discount > 0:
            original_price = price / (1 - discount / 100)
        else:
            original_price = price * SYNTHETIC_MARKUP

        if not price or not original_price or original_price <= price:
            return None

        return RawRecord(
            id=str(item.get("id", "")),
            title=str(item.get("title") or ""),
            url=FEED_PRODUCT_URL.format(id=item.get("id", "")),
            price=round(price, 2),
            original_price=round(original_price, 2),
            thumbnail=str(item.get("thumbnail") or ""),
            short_description=str(item.get("description") or ""),
            source=context.label,
        )
