from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from models.wave_hacks import WaveHackDetail, WaveHackPage

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {408, 413, 429, 500, 502, 503, 504}
RETRY_AFTER_STATUS = {413, 429, 503}


# ──────────────────────────────────────────────
#  Errors
# ──────────────────────────────────────────────

class AkindoError(Exception):
    """Base class for failures talking to the Akindo API."""


class AkindoHTTPError(AkindoError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class AkindoNotFoundError(AkindoHTTPError):
    def __init__(self, message: str) -> None:
        super().__init__(404, message)


class AkindoTimeoutError(AkindoError):
    pass


class AkindoNetworkError(AkindoError):
    pass


class AkindoPayloadError(AkindoError):
    """Upstream answered 2xx but the body is not what we expect."""


# ──────────────────────────────────────────────
#  Client
# ──────────────────────────────────────────────

class AkindoClient:
    """Async client for the public Akindo wave-hacks API.

    GET requests are retried up to `retry_limit` times on transient status
    codes with exponential backoff. Other 4xx responses fail immediately.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_limit: int = 3,
        retry_backoff: float = 0.3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_limit = retry_limit
        self.retry_backoff = retry_backoff
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )
        logger.info("Akindo client ready (%s, timeout=%.0fs)", self.base_url, self.timeout)

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.info("Akindo client closed")
        self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("AkindoClient not connected. Call connect() first.")
        return self._client

    async def get_page(self, page: int) -> WaveHackPage:
        payload = await self._get_json(self.base_url, params={"page": str(page)})
        try:
            return WaveHackPage.from_payload(payload)
        except ValueError as e:
            raise AkindoPayloadError(f"Invalid page {page} payload: {e}") from e

    async def get_detail(self, wave_hack_id: str) -> WaveHackDetail:
        # ids are one path segment; '/', '?' and '#' must not reshape the URL
        segment = quote(wave_hack_id, safe="")
        payload = await self._get_json(f"{self.base_url}/{segment}")
        try:
            return WaveHackDetail.model_validate(payload)
        except ValueError as e:
            raise AkindoPayloadError(f"Invalid detail payload for {wave_hack_id}: {e}") from e

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self.client.get(url, params=params)
            except httpx.TimeoutException as e:
                raise AkindoTimeoutError(f"Request timeout after {self.timeout:.0f}s: GET {url}") from e
            except httpx.TransportError as e:
                raise AkindoNetworkError(f"Network error on GET {url}: {e}") from e

            if response.status_code in RETRYABLE_STATUS and attempt <= self.retry_limit:
                delay = self._retry_delay(response, attempt)
                logger.warning(
                    "Retryable status %s from %s (attempt %d/%d), retrying in %.2fs",
                    response.status_code, url, attempt, self.retry_limit + 1, delay,
                )
                await asyncio.sleep(delay)
                continue

            if response.status_code == 404:
                raise AkindoNotFoundError(f"Request failed with status code 404 Not Found: GET {response.url}")
            if response.is_error:
                raise AkindoHTTPError(
                    response.status_code,
                    f"Request failed with status code {response.status_code} "
                    f"{response.reason_phrase}: GET {response.url}",
                )

            try:
                return response.json()
            except ValueError as e:
                raise AkindoPayloadError(f"Invalid JSON from GET {response.url}") from e

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """Backoff for the next attempt; an upstream Retry-After wins, capped at the request timeout."""
        delay = self.retry_backoff * (2 ** (attempt - 1))
        if response.status_code not in RETRY_AFTER_STATUS:
            return delay
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        if retry_after is None:
            return delay
        return min(retry_after, self.timeout)


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After is either delta-seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())
