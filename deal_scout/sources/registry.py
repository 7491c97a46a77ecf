# deal_scout/sources/registry.py

"""Static registry of the sources the pipeline can retrieve from."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from deal_scout.errors import ConfigurationError
from deal_scout.extractors.base import BaseExtractor
from deal_scout.extractors.feed_records import FeedRecordExtractor
from deal_scout.extractors.marketplace_grid import MarketplaceGridExtractor
from deal_scout.extractors.search_cards import (
    SearchCardExtractor,
    build_search_url,
)

DEFAULT_SOURCE = "amazon-search"


class SourceKind(str, Enum):
    """Retrieval strategy of a source."""

    PAGINATED_SEARCH = "paginated-search"
    SINGLE_HTML = "single-html"
    SINGLE_JSON = "single-json"


@dataclass(frozen=True)
class SourceDefinition:
    """One registered source and how to retrieve from it."""

    id: str
    label: str
    kind: SourceKind
    extractor: BaseExtractor
    url: str = ""
    url_builder: Callable[[str], str] | None = None
    requires_keyword: bool = False
    description: str = ""

    def resolve_url(self, keyword: str = "") -> str:
        """Target URL for a single-shot fetch."""
        if self.url_builder is not None:
            return self.url_builder(keyword)
        return self.url


_AMAZON_DEALS = MarketplaceGridExtractor("amazon-deals")
_FEED = FeedRecordExtractor()

SOURCE_DEFINITIONS: tuple[SourceDefinition, ...] = (
    SourceDefinition(
        id=DEFAULT_SOURCE,
        label="Amazon keyword search",
        kind=SourceKind.PAGINATED_SEARCH,
        extractor=SearchCardExtractor(),
        requires_keyword=True,
        description=(
            "Paginated Amazon search via the relay "
            "(supports detail pages)."
        ),
    ),
    SourceDefinition(
        id="amazon-tech",
        label="Amazon · Tech Deals",
        kind=SourceKind.SINGLE_HTML,
        extractor=_AMAZON_DEALS,
        url="https://www.amazon.com/s?k=clearance+electronics+deals",
    ),
    SourceDefinition(
        id="amazon-fashion",
        label="Amazon · Fashion Deals",
        kind=SourceKind.SINGLE_HTML,
        extractor=_AMAZON_DEALS,
        url="https://www.amazon.com/s?k=designer+fashion+sale",
    ),
    SourceDefinition(
        id="amazon-keyword-deals",
        label="Amazon · Keyword Deals",
        kind=SourceKind.SINGLE_HTML,
        extractor=_AMAZON_DEALS,
        url_builder=lambda keyword: build_search_url(
            keyword, "www.amazon.com", 1
        ),
        requires_keyword=True,
        description="Discounted results on the first search page.",
    ),
    SourceDefinition(
        id="ebay-deals",
        label="eBay Daily Deals",
        kind=SourceKind.SINGLE_HTML,
        extractor=MarketplaceGridExtractor("ebay-deals"),
        url="https://www.ebay.com/globaldeals",
    ),
    SourceDefinition(
        id="fashion-api-mens",
        label="Mens Footwear Feed",
        kind=SourceKind.SINGLE_JSON,
        extractor=_FEED,
        url="https://dummyjson.com/products/category/mens-shoes",
    ),
    SourceDefinition(
        id="fashion-api-womens",
        label="Womens Dresses Feed",
        kind=SourceKind.SINGLE_JSON,
        extractor=_FEED,
        url="https://dummyjson.com/products/category/womens-dresses",
    ),
)

_BY_ID: dict[str, SourceDefinition] = {
    source.id: source for source in SOURCE_DEFINITIONS
}


def list_sources() -> list[SourceDefinition]:
    """Every registered source, in registration order."""
    return list(SOURCE_DEFINITIONS)


def source_ids() -> list[str]:
    """Identifiers usable as CLI/API choices."""
    return [source.id for source in SOURCE_DEFINITIONS]


def get_source(source_id: str) -> SourceDefinition:
    """Look up a source, raising ConfigurationError for unknown ids."""
    source = _BY_ID.get(source_id)
    if source is None:
        choices = ", ".join(source_ids())
        msg = f'Unknown source "{source_id}". Available sources: {choices}'
        raise ConfigurationError(msg)
    return source
