# deal_scout/services/normalizer.py

"""Maps raw extractor records onto the canonical output shapes."""

import logging
from typing import Any

from deal_scout.models.records import CanonicalRecord, Deal, RawRecord

logger = logging.getLogger("deal_scout.normalizer")


def _money(value: Any) -> float | None:
    """Non-negative amount rounded to cents, ``None`` when unusable."""
    if value is None or value == "":
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if amount < 0:
        return None
    return round(amount, 2)


def _count(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        count = int(value)
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None


def _rating(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    if not 0 <= rating <= 5:
        return None
    return round(rating, 2)


def normalize_record(
    raw: RawRecord, source_label: str | None = None,
) -> CanonicalRecord:
    """Build the canonical record for *raw*.

    Missing prices stay ``None`` rather than becoming zero. Savings and
    the discount flag are derived from the two price fields only, and
    the score only exists when both rating and review count do.
    """
    price = _money(raw.get("price"))
    before = _money(raw.get("original_price"))
    rating = _rating(raw.get("rating"))
    reviews_count = _count(raw.get("reviews_count"))

    is_discounted = (
        price is not None and before is not None and before > price
    )
    savings = (
        round(before - price, 2)
        if is_discounted and before is not None and price is not None
        else 0.0
    )
    score = (
        round(rating * reviews_count, 2)
        if rating and reviews_count
        else None
    )
    thumbnail = raw.get("thumbnail") or ""

    return CanonicalRecord(
        identifier=str(raw.get("id") or ""),
        title=raw.get("title") or "",
        url=raw.get("url") or "",
        price=price,
        before_discount=before,
        rating=rating,
        reviews_count=reviews_count,
        thumbnail=thumbnail,
        high_res_image=raw.get("high_res_image") or thumbnail,
        is_sponsored=bool(raw.get("is_sponsored")),
        is_amazon_choice=bool(raw.get("is_amazon_choice")),
        is_discounted=is_discounted,
        savings=savings,
        score=score,
        short_description=raw.get("short_description") or "",
        full_description=raw.get("full_description") or "",
        source=source_label or raw.get("source") or "",
        detail_error=raw.get("detail_error") or "",
    )


def evaluate_deal(
    raw: RawRecord, source_label: str | None = None,
) -> Deal | None:
    """Score *raw* by return on investment.

    Returns ``None`` unless both prices are present and there is a
    positive margin.
    """
    price = _money(raw.get("price"))
    original = _money(raw.get("original_price"))
    if not price or not original or original <= price:
        logger.debug(
            "Discarding '%s': no positive margin", raw.get("title", "")
        )
        return None

    margin = original - price
    return Deal(
        source=source_label or raw.get("source") or "",
        title=raw.get("title") or "",
        url=raw.get("url") or "",
        price=price,
        original_price=original,
        roi=round(margin / price, 2),
        potential_profit=round(margin, 2),
        identifier=str(raw.get("id") or ""),
        thumbnail=raw.get("thumbnail") or "",
    )
