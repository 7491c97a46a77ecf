# deal_scout/extractors/search_cards.py

"""Extractor for Amazon search result grids."""

from typing import Any
from urllib.parse import urlencode

from bs4 import Tag

from deal_scout.config.settings import Settings
from deal_scout.extractors.base import BaseExtractor, ExtractionContext
from deal_scout.extractors.text_utils import (
    attr_text,
    clean_text,
    highest_res_from_srcset,
    load_markup,
    node_text,
    parse_float_safe,
    parse_number,
    parse_price,
)
from deal_scout.models.records import RawRecord

_SPONSORED_COMPONENT = "sp-sponsored-result"


class SearchCardExtractor(BaseExtractor):
    """Parses search result cards into minimal product records.

    A card is accepted only when it carries an item identifier and a
    non-empty title; everything else is optional and left unset or
    ``None`` when the markup does not provide it.
    """

    selector_group = "search_cards"

    def extract(
        self, payload: Any, context: ExtractionContext,
    ) -> list[RawRecord]:
        """Parse every result card found in *payload*."""
        soup = load_markup(str(payload or ""))
        records: list[RawRecord] = []
        for card in soup.select(self.selectors["card"]):
            try:
                record = self._parse_card(card, context.host)
            except Exception as exc:
                self.logger.warning(
                    "Skipping unparseable search card: %s",
                    exc,
                    exc_info=True,
                )
                continue
            if record is not None:
                records.append(record)
        self.logger.debug(
            "Parsed %d search cards for host %s",
            len(records),
            context.host,
        )
        return records

    def _parse_card(self, card: Tag, host: str) -> RawRecord | None:
        """Parse a single result card, or ``None`` to skip it."""
        asin = attr_text(card, self.selectors["id_attribute"]).strip()
        if not asin:
            return None
        title = node_text(card.select_one(self.selectors["title"]))
        if not title:
            return None

        price = parse_price(
            node_text(card.select_one(self.selectors["price"]))
        )
        original_price = parse_price(
            node_text(card.select_one(self.selectors["original_price"]))
        )
        rating = parse_float_safe(
            node_text(card.select_one(self.selectors["rating"]))
        )
        reviews_count = parse_number(
            attr_text(
                card.select_one(self.selectors["reviews_label"]),
                "aria-label",
            )
        ) or parse_number(
            node_text(card.select_one(self.selectors["reviews_text"]))
        )
        image = card.select_one(self.selectors["image"])

        return RawRecord(
            id=asin,
            title=title,
            url=f"https://{host}/dp/{asin}",
            price=price,
            original_price=original_price,
            rating=round(rating, 2) if rating is not None else None,
            reviews_count=reviews_count,
            thumbnail=attr_text(image, "src"),
            high_res_image=highest_res_from_srcset(
                attr_text(image, "srcset")
            ),
            is_sponsored=self._is_sponsored(card),
            is_amazon_choice=self._is_choice(card),
            is_discounted=bool(
                price and original_price and original_price > price
            ),
            short_description=self._short_description(card),
        )

    def _is_sponsored(self, card: Tag) -> bool:
        """Sponsored marker attribute, label element or visible text."""
        if attr_text(card, "data-component-type") == _SPONSORED_COMPONENT:
            return True
        if card.select_one(self.selectors["sponsored_label"]) is not None:
            return True
        return any(
            clean_text(span.get_text()).lower() == "sponsored"
            for span in card.find_all("span")
        )

    def _is_choice(self, card: Tag) -> bool:
        """True when a badge mentions the merchant's choice phrase."""
        phrase: str = self.selectors["choice_phrase"]
        return any(
            phrase in node_text(badge).lower()
            for badge in card.select(self.selectors["badge"])
        )

    def _short_description(self, card: Tag) -> str:
        """Text of the last secondary row, trying each selector in turn."""
        for selector in self.selectors["short_description"]:
            rows = card.select(selector)
            text = node_text(rows[-1]) if rows else ""
            if text:
                return text
        return ""


def build_search_url(keyword: str, host: str, page: int) -> str:
    """Construct a search URL for *keyword* on *host* at *page*."""
    safe_host = host if "." in host else Settings.DEFAULT_HOST
    params = urlencode(
        {"k": keyword, "page": str(page), "language": "en_US"}
    )
    return f"https://{safe_host}/s?{params}"
