from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple, Union

from models.requests import FetchMode, WaveHackListParams
from models.responses import (
    ErrorResponse,
    Summary,
    WaveHackDetailResponse,
    WaveHackListResponse,
)
from models.wave_hacks import WaveHack, WaveHackDetail, WaveHackPage
from stores.akindo import (
    AkindoClient,
    AkindoHTTPError,
    AkindoNetworkError,
    AkindoNotFoundError,
    AkindoTimeoutError,
)

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timeout - the API is taking too long to respond"
NETWORK_MESSAGE = "Network error - unable to reach the API"
UNKNOWN_MESSAGE = "Unknown error occurred"


class PagedAggregateFetcher:
    """Reads the full (or partial) wave-hack collection from the upstream API."""

    def __init__(self, client: AkindoClient) -> None:
        self._client = client

    async def fetch_page(self, page: int) -> WaveHackPage:
        if page < 1:
            raise ValueError("Page number must be >= 1")
        return await self._client.get_page(page)

    async def fetch_all_pages(self) -> List[WaveHack]:
        """
        Fetch page 1, then pages 2..totalPages concurrently.

        Items are concatenated in page order regardless of which request
        finishes first. The first failing page fails the whole call.
        """
        first = await self.fetch_page(1)
        total_pages = first.meta.total_pages
        logger.info("Total items: %d, pages: %d", first.meta.total_items, total_pages)

        items = list(first.items)
        if total_pages > 1:
            # gather() returns results in argument order, not completion order
            remaining = await asyncio.gather(
                *(self.fetch_page(page) for page in range(2, total_pages + 1))
            )
            for page in remaining:
                items.extend(page.items)

        logger.info("Fetched %d total items", len(items))
        return items

    async def fetch_detail(self, wave_hack_id: str) -> WaveHackDetail:
        if not wave_hack_id:
            raise ValueError("Wave hack ID is required")
        logger.info("Fetching wave hack details for ID: %s", wave_hack_id)
        detail = await self._client.get_detail(wave_hack_id)
        logger.debug(
            "Detail received: id=%s title=%r description=%s community=%s criteria=%d",
            detail.id,
            detail.title,
            bool(detail.description),
            bool(detail.community),
            len(detail.criteria),
        )
        return detail


def _average(values: List[Optional[int]]) -> Optional[float]:
    # Missing values count as 0 and still count toward the divisor
    if not values:
        return None
    return sum(v or 0 for v in values) / len(values)


def summarize(items: List[WaveHack]) -> Summary:
    tokens: List[str] = []
    for item in items:
        denomination = item.grant_denomination
        if denomination and denomination.name and denomination.name not in tokens:
            tokens.append(denomination.name)

    return Summary(
        total_items=len(items),
        active_count=sum(1 for item in items if item.is_active),
        public_count=sum(1 for item in items if item.is_public is True),
        unique_token_count=len(tokens),
        tokens=tokens,
        average_building_days=_average([item.building_days for item in items]),
        average_judging_days=_average([item.judging_days for item in items]),
    )


def filter_active(items: Iterable[WaveHack]) -> List[WaveHack]:
    return [item for item in items if item.is_active]


async def list_wave_hacks(
    fetcher: PagedAggregateFetcher,
    params: WaveHackListParams,
) -> WaveHackListResponse:
    """
    Fetch listings according to `params.mode`:
    - page   → the requested page (falls back to all pages without a page number)
    - single → page 1 only
    - all    → every page
    The activeOnly filter runs before the summary is computed.
    """
    mode = params.mode
    if mode == FetchMode.PAGE and params.page is None:
        logger.warning("mode=page without a page number, fetching all pages")
        mode = FetchMode.ALL

    if mode == FetchMode.ALL:
        data = await fetcher.fetch_all_pages()
        if params.active_only:
            data = filter_active(data)
        summary = summarize(data)
    else:
        page_number = params.page if mode == FetchMode.PAGE else 1
        page = await fetcher.fetch_page(page_number)
        data = filter_active(page.items) if params.active_only else list(page.items)
        summary = summarize(data)
        summary.page = page_number
        summary.total_pages = page.meta.total_pages
        summary.upstream_total_items = page.meta.total_items
        summary.items_on_page = len(page.items)

    summary.active_only = params.active_only
    return WaveHackListResponse(data=data, summary=summary)


async def get_wave_hack(fetcher: PagedAggregateFetcher, wave_hack_id: str) -> WaveHackDetailResponse:
    detail = await fetcher.fetch_detail(wave_hack_id)
    return WaveHackDetailResponse(data=detail)


# ──────────────────────────────────────────────
#  Error classification
# ──────────────────────────────────────────────

def describe_error(exc: BaseException, subject: str = "Wave hack") -> Tuple[int, str]:
    """Map a failure to (HTTP status, user-facing message)."""
    if isinstance(exc, AkindoNotFoundError):
        return 404, f"{subject} not found"
    if isinstance(exc, AkindoTimeoutError):
        return 504, TIMEOUT_MESSAGE
    if isinstance(exc, AkindoNetworkError):
        return 503, NETWORK_MESSAGE
    if isinstance(exc, ValueError):
        return 400, str(exc) or UNKNOWN_MESSAGE
    if isinstance(exc, AkindoHTTPError):
        return 502, str(exc) or UNKNOWN_MESSAGE
    return 500, str(exc) or UNKNOWN_MESSAGE


async def list_wave_hacks_result(
    fetcher: PagedAggregateFetcher,
    params: WaveHackListParams,
) -> Union[WaveHackListResponse, ErrorResponse]:
    """list_wave_hacks, but failures come back as an ErrorResponse."""
    try:
        return await list_wave_hacks(fetcher, params)
    except Exception as e:
        logger.exception("Failed to fetch wave hacks (mode=%s, page=%s)", params.mode.value, params.page)
        _, message = describe_error(e)
        return ErrorResponse(error=message)


async def get_wave_hack_result(
    fetcher: PagedAggregateFetcher,
    wave_hack_id: str,
) -> Union[WaveHackDetailResponse, ErrorResponse]:
    try:
        return await get_wave_hack(fetcher, wave_hack_id)
    except Exception as e:
        logger.exception("Failed to fetch wave hack %s", wave_hack_id)
        _, message = describe_error(e)
        return ErrorResponse(error=message, debug={"originalError": str(e), "waveHackId": wave_hack_id})
