# recorder/http/catalog.py
from __future__ import annotations
import logging
import random
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable

import httpx

from recorder.core.errors import CatalogError
from recorder.host.types import CatalogEntry

logger = logging.getLogger(__name__)

__all__ = ["WordPressOrgCatalog"]



def _parseRetryAfter(value: str | None) -> float | None:
    """Return seconds suggested by Retry-After header, if parsable."""
    if not value:
        return None
    try:
        seconds = float(value)
        if seconds >= 0:
            return seconds
    except ValueError:
        pass
    try:
        dt = parsedate_to_datetime(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return max(0.0, dt.timestamp() - datetime.now(timezone.utc).timestamp())
    except (TypeError, ValueError):
        return None



def _shouldRetry(status: int) -> bool:
    return status in (408, 429, 500, 502, 503, 504)



class WordPressOrgCatalog:
    """
    CatalogLookup over the WordPress.org info API (the endpoints behind
    `plugins_api()` / `themes_api()`).

    A 404 or an `error` member in the body means "not found". Transport
    errors and non-retryable statuses raise CatalogError; the resolver
    turns those into UNAVAILABLE.
    """

    def __init__(
        self,
        *,
        baseUrl: str = "https://api.wordpress.org",
        timeoutMs: int = 10_000,
        retries: int = 2,
        backoffBaseMs: int = 250,
        backoffMaxMs: int = 1_000,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.baseUrl = baseUrl.rstrip("/")
        self.retries = max(0, retries)
        self.backoffBaseMs = backoffBaseMs
        self.backoffMaxMs = backoffMaxMs
        self._sleep = sleep
        self._client = httpx.Client(
            timeout=httpx.Timeout(max(1, timeoutMs) / 1_000),
            transport=transport,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def fromConfig(cls, **kwargs: Any) -> "WordPressOrgCatalog":
        from recorder.app.globals import config
        return cls(
            baseUrl=str(config("catalog.baseUrl", "https://api.wordpress.org")),
            timeoutMs=int(config("catalog.timeoutMs", 10_000)),
            retries=int(config("catalog.retries", 2)),
            **kwargs,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "WordPressOrgCatalog":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ----- CatalogLookup -----

    def lookupExtension(self, slug: str) -> CatalogEntry:
        data = self._info("plugins", "plugin_information", slug)
        if data is None:
            return CatalogEntry(found=False)
        link = data.get("download_link")
        return CatalogEntry(found=True, downloadUrl=link if isinstance(link, str) else None)

    def lookupTheme(self, slug: str) -> CatalogEntry:
        data = self._info("themes", "theme_information", slug)
        if data is None:
            return CatalogEntry(found=False)
        link = data.get("download_link")
        return CatalogEntry(found=True, downloadUrl=link if isinstance(link, str) else None)

    # ----- Internals -----

    def _info(self, section: str, action: str, slug: str) -> dict[str, Any] | None:
        url = f"{self.baseUrl}/{section}/info/1.2/"
        params = {"action": action, "request[slug]": slug}
        resp = self._request(url, params, slug=slug)

        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            raise CatalogError(
                f"{section} info for '{slug}' failed with HTTP {resp.status_code}",
                slug=slug,
                status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as err:
            raise CatalogError(f"{section} info for '{slug}' is not JSON", slug=slug) from err

        # The API answers some misses with 200 and {"error": "..."} or a bare null
        if not isinstance(data, dict) or data.get("error"):
            return None
        return data

    def _request(self, url: str, params: dict[str, str], *, slug: str) -> httpx.Response:
        attempt = 0
        while True:
            try:
                resp = self._client.get(url, params=params)
            except httpx.HTTPError as err:
                if attempt < self.retries:
                    self._backoff(attempt, None)
                    attempt += 1
                    continue
                raise CatalogError(f"catalog request for '{slug}' failed: {err}", slug=slug) from err

            if _shouldRetry(resp.status_code) and attempt < self.retries:
                logger.debug("Catalog answered %d for '%s', retrying", resp.status_code, slug)
                self._backoff(attempt, _parseRetryAfter(resp.headers.get("Retry-After")))
                attempt += 1
                continue
            return resp

    def _backoff(self, attempt: int, retryAfter: float | None) -> None:
        if retryAfter is not None:
            delay = retryAfter
        else:
            # Exponential backoff with jitter
            base = min(self.backoffMaxMs, self.backoffBaseMs * (2 ** attempt))
            jitter = base * 0.25
            delay = max(0.0, base + random.uniform(-jitter, jitter)) / 1000.0
        self._sleep(delay)
