# deal_scout/extractors/base.py

"""Abstract base class for all payload extractors."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from deal_scout.config.settings import Settings
from deal_scout.models.records import RawRecord


@dataclass(frozen=True)
class ExtractionContext:
    """Source metadata an extractor may need besides the payload."""

    source_id: str = ""
    label: str = ""
    url: str = ""
    host: str = Settings.DEFAULT_HOST


class BaseExtractor(ABC):
    """Turns one fetched payload into a list of raw records."""

    #: Key of this extractor's block inside ``selectors.json``
    selector_group: str = ""

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"deal_scout.extractors.{type(self).__name__}"
        )
        self.selectors: dict[str, Any] = self._load_selectors()

    def _load_selectors(self) -> dict[str, Any]:
        """Load this extractor's selector block from selectors.json."""
        if not self.selector_group:
            return {}
        with open(Settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, Any] = all_selectors.get(
            self.selector_group, {}
        )
        return result

    @abstractmethod
    def extract(
        self, payload: Any, context: ExtractionContext,
    ) -> list[RawRecord]:
        """Return every record that could be read from *payload*."""
        ...
