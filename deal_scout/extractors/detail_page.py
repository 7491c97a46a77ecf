# deal_scout/extractors/detail_page.py

"""Extractor for product detail pages (descriptions and hi-res images)."""

from typing import Any

from bs4 import BeautifulSoup

from deal_scout.extractors.base import BaseExtractor, ExtractionContext
from deal_scout.extractors.text_utils import (
    attr_text,
    last_dynamic_image,
    load_markup,
    node_text,
)
from deal_scout.models.records import RawRecord


class DetailPageExtractor(BaseExtractor):
    """Reads feature bullets, description blocks and the landing image."""

    selector_group = "detail_page"

    def extract(
        self, payload: Any, context: ExtractionContext,
    ) -> list[RawRecord]:
        """Return a single-element list with the detail fields."""
        return [self.parse(str(payload or ""))]

    def parse(self, markup: str) -> RawRecord:
        """Parse one detail page into description/image fields."""
        soup = load_markup(markup)
        bullets = [
            text
            for text in (
                node_text(li)
                for li in soup.select(self.selectors["bullets"])
            )
            if text
        ]
        joined_bullets = " ".join(bullets)
        description = node_text(
            soup.select_one(self.selectors["description"])
        )
        aplus = node_text(
            soup.select_one(self.selectors["aplus_description"])
        )
        meta = attr_text(
            soup.select_one(self.selectors["meta_description"]),
            "content",
        ).strip()

        return RawRecord(
            short_description=joined_bullets or meta,
            full_description=(
                description or aplus or joined_bullets or meta
            ),
            high_res_image=self._high_res_image(soup),
        )

    def _high_res_image(self, soup: BeautifulSoup) -> str | None:
        """First non-empty candidate from the image fallbacks."""
        landing = soup.select_one(self.selectors["landing_image"])
        candidates = (
            lambda: attr_text(landing, "data-old-hires"),
            lambda: last_dynamic_image(
                attr_text(landing, "data-a-dynamic-image")
            ),
            lambda: attr_text(
                soup.select_one(self.selectors["any_hires_image"]),
                "data-old-hires",
            ),
            lambda: attr_text(
                soup.select_one(self.selectors["landing_image_src"]),
                "src",
            ),
        )
        for candidate in candidates:
            value = candidate()
            if value:
                return value
        return None
