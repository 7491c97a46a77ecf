# tests/test_deal_aggregator.py

"""Tests for the concurrent deal aggregator."""

import unittest
from pathlib import Path
from typing import Any

from deal_scout.config.settings import Settings
from deal_scout.errors import UpstreamError
from deal_scout.services.deal_aggregator import (
    UNAVAILABLE_NOTE,
    UNAVAILABLE_TITLE,
    DealAggregator,
    DealBoard,
    resolve_min_roi,
)
from deal_scout.sources.registry import get_source

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FEED = {
    "products": [
        {"id": 1, "title": "Runner", "price": 80, "discountPercentage": 20},
        {"id": 2, "title": "Loafer", "price": 50, "discountPercentage": 0},
        {"id": 3, "title": "Slipper", "price": 40, "discountPercentage": 5},
    ]
}


class FakeGateway:
    """Serves the eBay fixture and a JSON feed; can fail per URL."""

    api_key = "KEY"

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.urls: list[str] = []

    def fetch_markup(self, url: str) -> str:
        self.urls.append(url)
        if url in self.failing:
            raise UpstreamError("Relay request failed with status 500", 500)
        with open(FIXTURES_DIR / "ebay_deals.html", encoding="utf-8") as f:
            return f.read()

    def fetch_json(self, url: str) -> Any:
        self.urls.append(url)
        if url in self.failing:
            raise UpstreamError("JSON request failed with status 503", 503)
        return FEED


class TestDealAggregator(unittest.IsolatedAsyncioTestCase):
    """Aggregation, ranking and failure placeholders."""

    def _aggregator(self, gateway: FakeGateway, *ids: str) -> DealAggregator:
        return DealAggregator(
            gateway=gateway,  # type: ignore[arg-type]
            sources=[get_source(i) for i in ids],
        )

    async def test_ranked_by_roi(self) -> None:
        """Deals from every source are merged, best ROI first."""
        aggregator = self._aggregator(
            FakeGateway(), "ebay-deals", "fashion-api-mens"
        )
        board = await aggregator.collect(min_roi=0.2)

        rois = [d.roi for d in board.deals]
        self.assertEqual(rois, sorted(rois, reverse=True))
        titles = {d.title for d in board.deals}
        # Slipper (5% off) is below the threshold
        self.assertEqual(
            titles,
            {"Wireless Earbuds Pro", "Smart Watch Band", "Runner", "Loafer"},
        )
        self.assertEqual(board.deals[0].title, "Wireless Earbuds Pro")
        self.assertEqual(board.errors, [])

    async def test_failed_source_becomes_placeholder(self) -> None:
        """One failing source does not sink the others."""
        ebay_url = get_source("ebay-deals").url
        aggregator = self._aggregator(
            FakeGateway(failing={ebay_url}), "ebay-deals", "fashion-api-mens"
        )
        board = await aggregator.collect(min_roi=0.2)

        self.assertEqual(len(board.errors), 1)
        placeholder = board.errors[0]
        self.assertEqual(placeholder.title, UNAVAILABLE_TITLE)
        self.assertEqual(placeholder.note, UNAVAILABLE_NOTE)
        self.assertEqual(placeholder.source, "eBay Daily Deals")
        self.assertEqual(placeholder.url, ebay_url)
        self.assertEqual(placeholder.roi, 0.0)
        self.assertIsNone(placeholder.price)
        self.assertEqual(board.deals[-1], placeholder)
        self.assertEqual(board.count, 3)

    async def test_keyword_sources_skipped_without_keyword(self) -> None:
        """Sources that need a keyword are left out when none is given."""
        gateway = FakeGateway()
        aggregator = self._aggregator(
            gateway, "amazon-keyword-deals", "fashion-api-mens"
        )
        await aggregator.collect()
        self.assertEqual(gateway.urls, [get_source("fashion-api-mens").url])

        gateway.urls.clear()
        await aggregator.collect(keyword="lamp")
        self.assertEqual(len(gateway.urls), 2)
        self.assertTrue(any("k=lamp" in u for u in gateway.urls))

    async def test_default_sources_exclude_paginated(self) -> None:
        """The default source set has no paginated search."""
        aggregator = DealAggregator(gateway=FakeGateway())  # type: ignore[arg-type]
        ids = {s.id for s in aggregator.sources}
        self.assertNotIn("amazon-search", ids)
        self.assertIn("ebay-deals", ids)

    async def test_board_payload(self) -> None:
        """The board serialises with its threshold and count."""
        board = await self._aggregator(
            FakeGateway(), "fashion-api-mens"
        ).collect(min_roi=0.5)
        data = board.to_dict()
        self.assertEqual(data["minRoi"], 0.5)
        self.assertEqual(data["count"], len(data["deals"]))
        self.assertIn("updatedAt", data)


class TestResolveMinRoi(unittest.TestCase):
    """Threshold parsing."""

    def test_defaults(self) -> None:
        """Missing, invalid, zero or negative thresholds use the default."""
        for value in (None, "abc", 0, -1, float("nan")):
            with self.subTest(value=value):
                self.assertEqual(resolve_min_roi(value), Settings.MIN_ROI)

    def test_explicit(self) -> None:
        """A positive threshold is used as given."""
        self.assertEqual(resolve_min_roi("0.35"), 0.35)

    def test_empty_board(self) -> None:
        """An empty board reports zero deals."""
        board = DealBoard(min_roi=0.2)
        self.assertEqual(board.count, 0)
        self.assertEqual(board.errors, [])


if __name__ == "__main__":
    unittest.main()
