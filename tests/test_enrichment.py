# tests/test_enrichment.py

"""Tests for bounded detail-page enrichment."""

import asyncio
import threading
import unittest
from typing import Any

from deal_scout.models.records import RawRecord
from deal_scout.services.enrichment import DetailEnricher, without_details


class TrackingGateway:
    """Records the peak number of concurrent fetches."""

    def __init__(
        self,
        fail_urls: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.fail_urls = fail_urls or set()
        self.delays = delays or {}
        self.finished: list[str] = []
        self.in_flight = 0
        self.peak = 0
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_markup(self, url: str) -> str:
        with self._lock:
            self.in_flight += 1
            self.calls += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            # time.sleep is patched globally in conftest
            threading.Event().wait(self.delays.get(url, 0.02))
            if url in self.fail_urls:
                raise RuntimeError(f"boom {url}")
            return url
        finally:
            with self._lock:
                self.in_flight -= 1
                self.finished.append(url)


class EchoDetailExtractor:
    """Turns the fetched 'markup' (the URL) into detail fields."""

    def parse(self, markup: str) -> RawRecord:
        return RawRecord(
            short_description=f"short {markup}",
            full_description=f"full {markup}",
            high_res_image=f"{markup}/hires.jpg",
        )


def _records(count: int) -> list[RawRecord]:
    return [
        RawRecord(
            id=f"A{i:03d}",
            title=f"Item {i}",
            url=f"https://amazon.com/dp/A{i:03d}",
            thumbnail=f"https://img/{i}.jpg",
        )
        for i in range(count)
    ]


def _enricher(gateway: Any, concurrency: Any, **kwargs: Any) -> DetailEnricher:
    return DetailEnricher(
        gateway,
        concurrency,
        extractor=EchoDetailExtractor(),  # type: ignore[arg-type]
        **kwargs,
    )


class TestDetailEnricher(unittest.TestCase):
    """Concurrency cap, ordering and failure isolation."""

    def test_concurrency_cap(self) -> None:
        """Twelve items with a cap of three never exceed three in flight."""
        gateway = TrackingGateway()
        records = _records(12)

        result = asyncio.run(_enricher(gateway, 3).enrich(records))

        self.assertEqual(gateway.calls, 12)
        self.assertLessEqual(gateway.peak, 3)
        self.assertEqual(
            [r["id"] for r in result], [r["id"] for r in records]
        )

    def test_order_kept_when_later_items_finish_first(self) -> None:
        """Earlier items finish last, yet output follows input order."""
        records = _records(5)
        delays = {
            str(r["url"]): 0.05 * (len(records) - i)
            for i, r in enumerate(records)
        }
        gateway = TrackingGateway(delays=delays)

        result = asyncio.run(_enricher(gateway, 5).enrich(records))

        urls = [str(r["url"]) for r in records]
        self.assertEqual(gateway.finished, list(reversed(urls)))
        self.assertEqual([r["url"] for r in result], urls)
        self.assertEqual(
            [r["full_description"] for r in result],
            [f"full {u}" for u in urls],
        )

    def test_detail_fields_merged(self) -> None:
        """Detail fields are merged over the search fields."""
        records = _records(2)
        result = asyncio.run(
            _enricher(TrackingGateway(), 2).enrich(records)
        )
        first = result[0]
        self.assertEqual(first["title"], "Item 0")
        self.assertEqual(
            first["full_description"], f"full {records[0]['url']}"
        )
        self.assertEqual(
            first["high_res_image"], f"{records[0]['url']}/hires.jpg"
        )
        self.assertNotIn("detail_error", first)

    def test_failure_is_isolated(self) -> None:
        """One failing detail page degrades only its own record."""
        records = _records(4)
        bad_url = records[2]["url"]
        gateway = TrackingGateway(fail_urls={bad_url})

        result = asyncio.run(_enricher(gateway, 4).enrich(records))

        self.assertEqual(len(result), 4)
        failed = result[2]
        self.assertIn("boom", failed["detail_error"])
        self.assertEqual(failed["full_description"], "")
        self.assertEqual(failed["high_res_image"], "https://img/2.jpg")
        self.assertEqual(result[3]["full_description"], f"full {records[3]['url']}")

    def test_progress_reports_every_item(self) -> None:
        """The progress callback sees each completion."""
        seen: list[tuple[int, int]] = []
        asyncio.run(
            _enricher(
                TrackingGateway(),
                2,
                progress=lambda done, total: seen.append((done, total)),
            ).enrich(_records(5))
        )
        self.assertEqual(len(seen), 5)
        self.assertEqual(seen[-1], (5, 5))
        self.assertTrue(all(total == 5 for _, total in seen))

    def test_concurrency_clamped(self) -> None:
        """Concurrency is coerced into 1..10."""
        gateway = TrackingGateway()
        self.assertEqual(_enricher(gateway, 0).concurrency, 1)
        self.assertEqual(_enricher(gateway, 50).concurrency, 10)
        self.assertEqual(_enricher(gateway, "oops").concurrency, 1)
        self.assertEqual(_enricher(gateway, "4").concurrency, 4)

    def test_empty_input(self) -> None:
        """No records means no fetches."""
        gateway = TrackingGateway()
        self.assertEqual(asyncio.run(_enricher(gateway, 3).enrich([])), [])
        self.assertEqual(gateway.calls, 0)


class TestWithoutDetails(unittest.TestCase):
    """Shape of records when detail pages are skipped."""

    def test_fields_filled(self) -> None:
        """Descriptions default to empty and the thumbnail stands in."""
        records = [
            RawRecord(
                id="A1",
                thumbnail="https://img/1.jpg",
                short_description="search blurb",
            )
        ]
        result = without_details(records)[0]
        self.assertEqual(result["short_description"], "search blurb")
        self.assertEqual(result["full_description"], "")
        self.assertEqual(result["high_res_image"], "https://img/1.jpg")

    def test_missing_image(self) -> None:
        """No thumbnail leaves an empty image."""
        result = without_details([RawRecord(id="A1")])[0]
        self.assertEqual(result["high_res_image"], "")
        self.assertEqual(result["short_description"], "")


if __name__ == "__main__":
    unittest.main()
