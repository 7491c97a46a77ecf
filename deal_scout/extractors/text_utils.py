# deal_scout/extractors/text_utils.py

"""Text and number helpers shared by every extractor."""

import json
import re
from typing import Any

from bs4 import BeautifulSoup, Tag

_WHITESPACE_RE = re.compile(r"\s+")
_NOT_PRICE_RE = re.compile(r"[^0-9.]")
_NOT_DIGIT_RE = re.compile(r"[^0-9]")
_FIRST_FLOAT_RE = re.compile(r"\d+(?:\.\d+)?")
_LEADING_NUMBER_RE = re.compile(r"\d*\.?\d+")


def load_markup(markup: str) -> BeautifulSoup:
    """Parse a markup string with the lxml backend."""
    return BeautifulSoup(markup, "lxml")


def clean_text(value: str | None) -> str:
    """Collapse whitespace runs to one space and trim both ends."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def node_text(node: Tag | None) -> str:
    """Cleaned text of *node*, or an empty string when it is missing."""
    if node is None:
        return ""
    return clean_text(node.get_text())


def parse_price(value: str | None) -> float | None:
    """Convert a currency string like ``'$1,299.99'`` to ``1299.99``.

    Every character that is not a digit or a dot is dropped first, then
    the leading number is read, so ``'1.299.99'`` gives ``1.3``.
    Returns ``None`` when nothing numeric is left.
    """
    if not value:
        return None
    match = _LEADING_NUMBER_RE.match(_NOT_PRICE_RE.sub("", value))
    if match is None:
        return None
    return round(float(match.group(0)), 2)


def parse_number(value: str | None) -> int | None:
    """Convert ``'14,566 ratings'`` to ``14566``."""
    if not value:
        return None
    digits = _NOT_DIGIT_RE.sub("", value)
    return int(digits) if digits else None


def parse_float_safe(value: str | None) -> float | None:
    """First float-looking substring of e.g. ``'4.5 out of 5 stars'``."""
    if not value:
        return None
    match = _FIRST_FLOAT_RE.search(value)
    return float(match.group(0)) if match else None


def highest_res_from_srcset(srcset: str | None) -> str:
    """Return the last (largest) URL of a responsive-image descriptor."""
    if not srcset:
        return ""
    urls = [
        entry.strip().split(" ")[0]
        for entry in srcset.split(",")
    ]
    urls = [u for u in urls if u]
    return urls[-1] if urls else ""


def last_dynamic_image(raw: str | None) -> str | None:
    """Last key of a ``data-a-dynamic-image`` JSON object."""
    if not raw:
        return None
    try:
        parsed: Any = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(parsed, dict) or not parsed:
        return None
    return str(list(parsed)[-1])


def attr_text(node: Tag | None, name: str) -> str:
    """String value of attribute *name* on *node* (empty if absent)."""
    if node is None:
        return ""
    value = node.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value or ""
