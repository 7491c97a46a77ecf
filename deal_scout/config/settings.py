# deal_scout/config/settings.py

"""Central configuration for the deal_scout pipeline."""

import math
import os
from pathlib import Path
from typing import Any

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the deal_scout pipeline."""

    # --- Relay (rotating proxy) ---
    RELAY_ENDPOINT: str = "https://api.scrapingant.com/v2/general"
    RELAY_API_KEY: str = os.getenv("SCRAPINGANT_API_KEY", "")
    RELAY_DEVICE: str = "desktop"

    # --- Search defaults ---
    DEFAULT_HOST: str = "amazon.com"
    DEFAULT_COUNTRY: str = "us"
    DEFAULT_COUNT: int = 10
    MAX_PRODUCTS: int = 500             # Hard cap on requested records
    MAX_PAGES: int = 20                 # Max pagination depth per search
    DEFAULT_CONCURRENCY: int = 5        # Concurrent detail fetches
    MAX_CONCURRENCY: int = 10

    # --- Deal board ---
    MIN_ROI: float = 0.2

    # --- Transport ---
    REQUEST_TIMEOUT: int = 60           # Relay renders pages, so be generous
    REQUEST_DELAY: float = 1.0          # Base backoff between retries
    MAX_RETRIES: int = 3                # Retries on transport exceptions
    ERROR_SNIPPET_LENGTH: int = 200

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        "Accept": "text/html,application/xhtml+xml",
        "Accept-Language": "en-US,en;q=0.9",
    }
    JSON_HEADERS: dict[str, str] = {"Accept": "application/json"}

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = Path(__file__).resolve().parent / "selectors.json"
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"


def clamp_number(value: Any, low: int, high: int) -> int:
    """Coerce *value* to a number inside ``[low, high]``.

    Anything that cannot be read as a finite number falls back to *low*.
    """
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return low
    if not math.isfinite(numeric):
        return low
    return int(max(low, min(high, numeric)))
