"""Shared fixtures: fake Akindo payloads and a client backed by httpx.MockTransport."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import httpx
import pytest

from controllers.wave_hacks import PagedAggregateFetcher
from stores.akindo import AkindoClient

BASE_URL = "https://api.akindo.io/public/wave-hacks"


def make_item(
    item_id: str,
    active: bool = True,
    public: bool = True,
    building_days: Optional[int] = 14,
    judging_days: Optional[int] = 7,
    token: Optional[str] = "USDC",
    deadline: str = "2030-01-15T10:00:00Z",
    grant_amount: Optional[str] = "5000",
) -> Dict[str, Any]:
    item: Dict[str, Any] = {"id": item_id, "title": f"Wave hack {item_id}", "isPublic": public}
    if building_days is not None:
        item["buildingDays"] = building_days
    if judging_days is not None:
        item["judgingDays"] = judging_days
    if active:
        item["activeWave"] = {
            "openedAt": "2029-12-01T00:00:00Z",
            "startedAt": "2030-01-01T00:00:00Z",
            "submissionDeadline": deadline,
            "judgementDeadline": "2030-01-22T10:00:00Z",
            "grantAmount": grant_amount,
        }
    if token:
        item["grantDenomination"] = {"name": token, "address": "0xabc", "decimals": 6}
    return item


def items_page(items: List[Dict[str, Any]], total_pages: int = 1, total_items: Optional[int] = None) -> Dict[str, Any]:
    return {
        "items": items,
        "meta": {"totalPages": total_pages, "totalItems": total_items if total_items is not None else len(items)},
    }


def data_page(items: List[Dict[str, Any]], page: int = 1, page_count: int = 1, total: int = 0) -> Dict[str, Any]:
    return {
        "data": items,
        "meta": {"pagination": {"page": page, "pageSize": 20, "pageCount": page_count, "total": total}},
    }


def make_detail(item_id: str = "wh-1") -> Dict[str, Any]:
    detail = make_item(item_id)
    detail.update(
        description="## About\n\nBuild something **great**.",
        community={"websiteUrl": "https://example.org", "discordUrl": "https://discord.gg/x"},
        criteria=[
            {"id": "c2", "title": "Impact", "sort": 2, "isActive": True},
            {"id": "c1", "title": "Originality", "sort": 1, "isActive": True},
            {"id": "c3", "title": "Retired", "sort": 0, "isActive": False},
        ],
    )
    return detail


Handler = Callable[[httpx.Request], Any]


@asynccontextmanager
async def connected_client(handler: Handler, **overrides: Any) -> AsyncIterator[AkindoClient]:
    options: Dict[str, Any] = {"timeout": 5.0, "retry_limit": 3, "retry_backoff": 0.0}
    options.update(overrides)
    client = AkindoClient(base_url=BASE_URL, transport=httpx.MockTransport(handler), **options)
    await client.connect()
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def fetcher_factory():
    """`async with fetcher_factory(handler) as fetcher`: HTTP calls go to `handler`."""

    @asynccontextmanager
    async def build(handler: Handler) -> AsyncIterator[PagedAggregateFetcher]:
        async with connected_client(handler) as client:
            yield PagedAggregateFetcher(client)

    return build
