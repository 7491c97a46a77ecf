# deal_scout/gateway/proxy_gateway.py

"""Outbound HTTP through the rotating-proxy relay or directly."""

import json
import logging
import threading
import time
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from deal_scout.config.settings import Settings
from deal_scout.errors import UpstreamError

logger = logging.getLogger("deal_scout.gateway")


def _snippet(body: str) -> str:
    """Short excerpt of an error body for diagnostics."""
    limit = Settings.ERROR_SNIPPET_LENGTH
    return f"{body[:limit]}…" if len(body) > limit else body


def _try_decode_json(text: str) -> tuple[bool, Any]:
    """Attempt a JSON decode, returning ``(ok, value)``."""
    try:
        return True, json.loads(text)
    except ValueError:
        return False, None


def decode_relay_body(body: str) -> str:
    """Unwrap a relay response that may be a JSON envelope or raw markup.

    Only bodies that start with ``{`` or ``[`` are tried as JSON. An
    envelope with a string ``content`` yields that string; anything else
    (including bodies that fail to decode) is returned unchanged.
    """
    trimmed = body.strip()
    if not trimmed.startswith(("{", "[")):
        return body
    ok, payload = _try_decode_json(trimmed)
    if not ok:
        return body
    if isinstance(payload, dict) and isinstance(payload.get("content"), str):
        return str(payload["content"])
    return body


class ProxyGateway:
    """Fetches markup and JSON for the extraction pipeline.

    With a relay key, markup requests are encoded as query parameters
    of the relay endpoint, which performs the fetch from rotating egress
    addresses. Without one, markup is fetched directly with browser
    impersonation and a cloudscraper fallback. JSON feeds are always
    fetched directly.

    Configuration is read-only after construction; each worker thread
    gets its own curl_cffi session.
    """

    def __init__(
        self,
        api_key: str = "",
        country: str | None = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.country = (country or "").strip() or None
        self.settings = Settings()
        self._local = threading.local()

    @property
    def session(self) -> curl_requests.Session:
        """The calling thread's curl_cffi session."""
        session: curl_requests.Session | None = getattr(
            self._local, "session", None
        )
        if session is None:
            session = curl_requests.Session(
                impersonate=self.settings.IMPERSONATE_BROWSER
            )
            self._local.session = session
        return session

    # ── Transport ────────────────────────────────────────

    def _send(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> curl_requests.Response:
        """GET with retries on transport exceptions (never on status)."""
        last_exc: Exception | None = None
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=self.settings.REQUEST_TIMEOUT,
                )
            except Exception as exc:
                last_exc = exc
                logger.warning(
                    "Request error on attempt %d for %s: %s",
                    attempt + 1,
                    url,
                    exc,
                    exc_info=True,
                )
                time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))
        msg = f"Request to {url} failed: {last_exc}"
        raise UpstreamError(msg) from last_exc

    @staticmethod
    def _is_ok(status_code: int) -> bool:
        return 200 <= status_code < 300

    # ── Markup ───────────────────────────────────────────

    def fetch_markup(self, url: str) -> str:
        """Return the markup for *url* (relay when a key is configured)."""
        if self.api_key:
            return self._fetch_via_relay(url)
        return self._fetch_direct(url)

    def _fetch_via_relay(self, url: str) -> str:
        """Fetch *url* through the relay and unwrap its envelope."""
        params: dict[str, str] = {
            "x-api-key": self.api_key,
            "url": url,
            "device": self.settings.RELAY_DEVICE,
        }
        if self.country:
            params["proxy_country"] = self.country

        logger.debug("Relay fetch %s (country=%s)", url, self.country)
        resp = self._send(self.settings.RELAY_ENDPOINT, params=params)
        body = resp.text or ""
        if not self._is_ok(resp.status_code):
            snippet = _snippet(body)
            msg = f"Relay request failed with status {resp.status_code}"
            if snippet:
                msg = f"{msg}: {snippet}"
            raise UpstreamError(msg, resp.status_code, snippet)
        if not body.strip():
            msg = "Relay returned an empty response body"
            raise UpstreamError(msg, resp.status_code)
        return decode_relay_body(body)

    def _fetch_direct(self, url: str) -> str:
        """Fetch *url* directly, falling back to cloudscraper."""
        headers = dict(self.settings.DEFAULT_HEADERS)
        resp = self._send(url, headers=headers)
        if self._is_ok(resp.status_code) and (resp.text or "").strip():
            return str(resp.text)

        status = resp.status_code
        logger.info(
            "Direct fetch of %s gave HTTP %d, falling back to cloudscraper",
            url,
            status,
        )
        try:
            scraper: Any = cloudscraper.create_scraper()
            fallback: Any = scraper.get(
                url,
                headers=headers,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            logger.error(
                "cloudscraper fallback failed for %s: %s",
                url,
                exc,
                exc_info=True,
            )
            msg = f"Request failed: {status}"
            raise UpstreamError(msg, status) from exc

        text = str(fallback.text or "")
        if self._is_ok(int(fallback.status_code)) and text.strip():
            return text
        status = int(fallback.status_code)
        if self._is_ok(status):
            msg = "Upstream returned an empty response body"
        else:
            msg = f"Request failed: {status}"
        raise UpstreamError(msg, status, _snippet(text))

    # ── JSON ─────────────────────────────────────────────

    def fetch_json(self, url: str) -> Any:
        """GET a trusted JSON feed directly and decode it as-is."""
        resp = self._send(url, headers=dict(self.settings.JSON_HEADERS))
        if not self._is_ok(resp.status_code):
            msg = f"JSON request failed with status {resp.status_code}"
            raise UpstreamError(
                msg, resp.status_code, _snippet(resp.text or "")
            )
        ok, payload = _try_decode_json(resp.text or "")
        if not ok:
            msg = f"JSON request to {url} returned an undecodable body"
            raise UpstreamError(msg, resp.status_code)
        return payload
