# deal_scout/services/scraper.py

"""Single-source retrieval: dispatches a source to its strategy."""

import asyncio
import logging
from dataclasses import dataclass

from deal_scout.config.settings import Settings, clamp_number
from deal_scout.errors import ConfigurationError, NoProductsError
from deal_scout.extractors.base import ExtractionContext
from deal_scout.gateway.proxy_gateway import ProxyGateway
from deal_scout.models.records import CanonicalRecord
from deal_scout.services.enrichment import (
    DetailEnricher,
    ProgressCallback,
    without_details,
)
from deal_scout.services.normalizer import normalize_record
from deal_scout.services.pagination import PaginationController
from deal_scout.sources.registry import (
    DEFAULT_SOURCE,
    SourceDefinition,
    SourceKind,
    get_source,
)

logger = logging.getLogger("deal_scout.scraper")


@dataclass
class ScrapeOptions:
    """Everything a caller can configure for one retrieval run."""

    keyword: str = ""
    api_key: str = ""
    number: int | str | None = Settings.DEFAULT_COUNT
    host: str = Settings.DEFAULT_HOST
    country: str | None = Settings.DEFAULT_COUNTRY
    skip_details: bool = False
    concurrency: int | str | None = Settings.DEFAULT_CONCURRENCY
    source: str = DEFAULT_SOURCE


async def scrape_products(
    options: ScrapeOptions,
    gateway: ProxyGateway | None = None,
    progress: ProgressCallback | None = None,
) -> list[CanonicalRecord]:
    """Retrieve, optionally enrich, and normalize records for one source.

    Raises:
        ConfigurationError: unknown source or missing keyword/relay key.
        UpstreamError: a required fetch failed.
        NoProductsError: nothing could be parsed.
    """
    source_id = (options.source or "").strip() or DEFAULT_SOURCE
    source = get_source(source_id)
    if gateway is None:
        gateway = ProxyGateway(options.api_key, options.country)

    logger.info("Scraping source %s (%s)", source.id, source.kind.value)
    if source.kind is SourceKind.PAGINATED_SEARCH:
        return await _scrape_paginated(source, options, gateway, progress)
    return await asyncio.to_thread(_scrape_single, source, options, gateway)


async def _scrape_paginated(
    source: SourceDefinition,
    options: ScrapeOptions,
    gateway: ProxyGateway,
    progress: ProgressCallback | None,
) -> list[CanonicalRecord]:
    """Keyword search across pages, then optional detail enrichment."""
    keyword = (options.keyword or "").strip()
    api_key = (options.api_key or "").strip()
    host = (options.host or "").strip() or Settings.DEFAULT_HOST
    if not keyword:
        msg = f"Keyword is required for the {source.id} source"
        raise ConfigurationError(msg)
    if not api_key:
        msg = "Relay API key is required"
        raise ConfigurationError(msg)

    controller = PaginationController(gateway, source.extractor, host)
    result = await asyncio.to_thread(
        controller.collect, keyword, options.number
    )
    logger.info(
        "Collected %d records over %d pages (%s)",
        len(result.records),
        result.pages_fetched,
        result.state.value,
    )

    if options.skip_details:
        records = without_details(result.records)
    else:
        enricher = DetailEnricher(
            gateway, options.concurrency, progress=progress
        )
        records = await enricher.enrich(result.records)

    return [normalize_record(r, source.label) for r in records]


def _scrape_single(
    source: SourceDefinition,
    options: ScrapeOptions,
    gateway: ProxyGateway,
) -> list[CanonicalRecord]:
    """One fetch plus one extraction for fixed or keyword-built URLs."""
    keyword = (options.keyword or "").strip()
    if source.requires_keyword and not keyword:
        msg = f"Keyword is required for the {source.id} source"
        raise ConfigurationError(msg)
    if source.kind is SourceKind.SINGLE_HTML and not gateway.api_key:
        msg = "Relay API key is required to scrape HTML sources"
        raise ConfigurationError(msg)

    target = clamp_number(options.number, 1, Settings.MAX_PRODUCTS)
    url = source.resolve_url(keyword)
    if not url:
        msg = f'Source "{source.id}" does not specify a URL to scrape'
        raise ConfigurationError(msg)

    if source.kind is SourceKind.SINGLE_JSON:
        payload = gateway.fetch_json(url)
    else:
        payload = gateway.fetch_markup(url)

    context = ExtractionContext(
        source_id=source.id, label=source.label, url=url
    )
    records = source.extractor.extract(payload, context)
    if not records:
        msg = f"No products were parsed from {source.label}"
        raise NoProductsError(msg)

    return [
        normalize_record(record, record.get("source") or source.label)
        for record in records[:target]
    ]
