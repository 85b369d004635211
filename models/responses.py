from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .wave_hacks import WaveHack, WaveHackDetail


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC, e.g. 2025-01-31T08:15:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Summary(BaseModel):
    """Aggregate stats over the returned items (after any activeOnly filter)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_items: int
    active_count: int
    public_count: int
    unique_token_count: int
    tokens: List[str] = []
    # None when there are no items to average over
    average_building_days: Optional[float] = None
    average_judging_days: Optional[float] = None

    active_only: Optional[bool] = None

    # Only set for single-page fetches
    page: Optional[int] = None
    total_pages: Optional[int] = None
    upstream_total_items: Optional[int] = None
    items_on_page: Optional[int] = None


class WaveHackListResponse(BaseModel):
    """Response for GET /api/akindo-data and the fetch_akindo_data tool"""

    success: bool = True
    data: List[WaveHack]
    summary: Summary
    timestamp: str = Field(default_factory=utc_timestamp)


class WaveHackDetailResponse(BaseModel):
    """Response for GET /api/wave-hack/{id} and the fetch_wave_cute tool"""

    success: bool = True
    data: WaveHackDetail
    timestamp: str = Field(default_factory=utc_timestamp)


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    timestamp: str = Field(default_factory=utc_timestamp)
    debug: Optional[Dict[str, Any]] = None
