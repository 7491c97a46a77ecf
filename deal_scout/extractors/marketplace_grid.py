# deal_scout/extractors/marketplace_grid.py

"""Generic extractor for listing grids whose markup is not fixed."""

from typing import Any
from urllib.parse import urljoin

from bs4 import Tag

from deal_scout.extractors.base import BaseExtractor, ExtractionContext
from deal_scout.extractors.text_utils import (
    attr_text,
    load_markup,
    node_text,
    parse_price,
)
from deal_scout.models.records import RawRecord


def first_text(card: Tag, selectors: list[str]) -> str:
    """Text of the first selector that yields non-empty text."""
    for selector in selectors:
        text = node_text(card.select_one(selector))
        if text:
            return text
    return ""


def first_attr(card: Tag, selectors: list[str], name: str) -> str:
    """Attribute *name* of the first selector that carries it."""
    for selector in selectors:
        value = attr_text(card.select_one(selector), name).strip()
        if value:
            return value
    return ""


class MarketplaceGridExtractor(BaseExtractor):
    """Parses deal tiles using a named selector layout.

    Each layout in ``selectors.json`` lists card selectors plus an
    ordered cascade of candidates per field; the first candidate that
    yields a value wins. Tiles without a title, a price and an original
    price are skipped.
    """

    selector_group = "grids"

    def __init__(self, layout: str) -> None:
        super().__init__()
        if layout not in self.selectors:
            msg = f"Unknown grid layout '{layout}'"
            raise KeyError(msg)
        self.layout_name = layout
        self.layout: dict[str, Any] = self.selectors[layout]

    def extract(
        self, payload: Any, context: ExtractionContext,
    ) -> list[RawRecord]:
        """Parse every tile matching one of the layout's card selectors."""
        soup = load_markup(str(payload or ""))
        card_selector = ", ".join(self.layout["cards"])
        records: list[RawRecord] = []
        for card in soup.select(card_selector):
            try:
                record = self._parse_card(card, context, len(records) + 1)
            except Exception as exc:
                self.logger.warning(
                    "[%s] Skipping unparseable tile: %s",
                    context.source_id,
                    exc,
                    exc_info=True,
                )
                continue
            if record is not None:
                records.append(record)
        self.logger.debug(
            "[%s] Parsed %d tiles with layout %s",
            context.source_id,
            len(records),
            self.layout_name,
        )
        return records

    def _parse_card(
        self, card: Tag, context: ExtractionContext, position: int,
    ) -> RawRecord | None:
        """Parse one tile, or ``None`` when it is not a usable deal."""
        layout = self.layout
        title = first_text(card, layout["title"])
        price = parse_price(first_text(card, layout["price"]))
        original_price = parse_price(
            first_text(card, layout["original_price"])
        )
        if not title or not price or not original_price:
            return None

        id_attribute = layout.get("id_attribute", "")
        identifier = attr_text(card, id_attribute) if id_attribute else ""
        if not identifier:
            prefix = context.source_id or self.layout_name
            identifier = f"{prefix}-{position}"

        link = first_attr(card, layout["link"], "href")
        base = layout.get("link_base") or context.url
        url = urljoin(base, link) if base else link

        return RawRecord(
            id=identifier,
            title=title,
            url=url,
            price=price,
            original_price=original_price,
            thumbnail=first_attr(card, layout.get("image", []), "src"),
            source=context.label,
        )
