# tests/test_registry.py

"""Tests for the source registry."""

import unittest

from deal_scout.errors import ConfigurationError
from deal_scout.extractors.feed_records import FeedRecordExtractor
from deal_scout.extractors.search_cards import SearchCardExtractor
from deal_scout.sources.registry import (
    DEFAULT_SOURCE,
    SourceKind,
    get_source,
    list_sources,
    source_ids,
)


class TestSourceRegistry(unittest.TestCase):
    """Lookup and listing of registered sources."""

    def test_unknown_source_lists_choices(self) -> None:
        """An unknown id names every registered id in the error."""
        with self.assertRaises(ConfigurationError) as ctx:
            get_source("bogus-source")
        message = str(ctx.exception)
        self.assertIn('Unknown source "bogus-source"', message)
        for source_id in source_ids():
            self.assertIn(source_id, message)

    def test_ids_unique(self) -> None:
        """No two sources share an id."""
        ids = source_ids()
        self.assertEqual(len(ids), len(set(ids)))

    def test_default_source_is_paginated(self) -> None:
        """The default source is the keyword search."""
        source = get_source(DEFAULT_SOURCE)
        self.assertEqual(source.kind, SourceKind.PAGINATED_SEARCH)
        self.assertTrue(source.requires_keyword)
        self.assertIsInstance(source.extractor, SearchCardExtractor)

    def test_json_sources_use_feed_extractor(self) -> None:
        """Every JSON feed is parsed by the feed extractor."""
        feeds = [
            s for s in list_sources() if s.kind == SourceKind.SINGLE_JSON
        ]
        self.assertGreaterEqual(len(feeds), 2)
        for source in feeds:
            self.assertIsInstance(source.extractor, FeedRecordExtractor)
            self.assertTrue(source.url.startswith("https://"))

    def test_static_url_resolution(self) -> None:
        """Sources without a builder return their fixed URL."""
        source = get_source("ebay-deals")
        self.assertEqual(
            source.resolve_url("ignored"), "https://www.ebay.com/globaldeals"
        )

    def test_keyword_url_resolution(self) -> None:
        """The keyword deals source builds its URL from the keyword."""
        source = get_source("amazon-keyword-deals")
        self.assertTrue(source.requires_keyword)
        url = source.resolve_url("air fryer")
        self.assertTrue(url.startswith("https://www.amazon.com/s?"))
        self.assertIn("k=air+fryer", url)

    def test_list_is_a_copy(self) -> None:
        """Mutating the listing does not affect the registry."""
        listing = list_sources()
        listing.clear()
        self.assertTrue(list_sources())


if __name__ == "__main__":
    unittest.main()
