# deal_scout/models/records.py

"""Record types flowing between extractors, the normalizer and callers."""

from dataclasses import dataclass
from typing import Any, TypedDict


class RawRecord(TypedDict, total=False):
    """Loosely-typed record produced by one extractor invocation.

    Extractors only set the keys their source can actually supply.
    """

    id: str
    title: str
    url: str
    price: float | None
    original_price: float | None
    rating: float | None
    reviews_count: int | None
    thumbnail: str
    high_res_image: str | None
    short_description: str
    full_description: str
    is_sponsored: bool
    is_amazon_choice: bool
    is_discounted: bool
    source: str
    detail_error: str


# Public column order used for JSON output and CSV/XLSX exports
PUBLIC_FIELDS: tuple[str, ...] = (
    "amazon-id",
    "title",
    "thumbnail",
    "high-res-image",
    "url",
    "source",
    "is-discounted",
    "is-sponsored",
    "is-amazon-choice",
    "price",
    "before-discount",
    "reviews-count",
    "rating",
    "score",
    "savings",
    "short-description",
    "full-description",
)


@dataclass(frozen=True)
class CanonicalRecord:
    """The unified output record handed to persistence and display."""

    identifier: str
    title: str
    url: str
    price: float | None
    before_discount: float | None
    rating: float | None
    reviews_count: int | None
    thumbnail: str
    high_res_image: str
    is_sponsored: bool
    is_amazon_choice: bool
    is_discounted: bool
    savings: float
    score: float | None
    short_description: str
    full_description: str
    source: str
    detail_error: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the public hyphenated column names."""
        values = (
            self.identifier,
            self.title,
            self.thumbnail,
            self.high_res_image,
            self.url,
            self.source,
            self.is_discounted,
            self.is_sponsored,
            self.is_amazon_choice,
            self.price,
            self.before_discount,
            self.reviews_count,
            self.rating,
            self.score,
            self.savings,
            self.short_description,
            self.full_description,
        )
        return dict(zip(PUBLIC_FIELDS, values))


@dataclass(frozen=True)
class Deal:
    """A record ranked by return on investment for the deal board."""

    source: str
    title: str
    url: str
    price: float | None
    original_price: float | None
    roi: float
    potential_profit: float | None
    identifier: str = ""
    thumbnail: str = ""
    note: str = ""
    error: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise for the JSON deal feed."""
        return {
            "id": self.identifier,
            "source": self.source,
            "title": self.title,
            "url": self.url,
            "thumbnail": self.thumbnail,
            "price": self.price,
            "originalPrice": self.original_price,
            "roi": self.roi,
            "potentialProfit": self.potential_profit,
            "note": self.note,
            "error": self.error,
        }
