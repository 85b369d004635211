from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FetchMode(str, Enum):
    ALL = "all"
    SINGLE = "single"
    PAGE = "page"


class WaveHackListParams(BaseModel):
    """Arguments for listing wave hacks (tool `fetch_akindo_data` / GET /api/akindo-data)"""

    model_config = ConfigDict(populate_by_name=True)

    mode: FetchMode = Field(
        default=FetchMode.ALL,
        description="Fetch mode: 'all' for all pages, 'single' for first page only, 'page' for specific page",
    )
    page: Optional[int] = Field(
        default=None,
        ge=1,
        description="Specific page number to fetch (only used when mode is 'page')",
    )
    active_only: bool = Field(
        default=True,
        alias="activeOnly",
        description="Filter to only show items with an active wave",
    )


class WaveHackIdParams(BaseModel):
    """Arguments for a single wave hack lookup"""

    id: str = Field(..., min_length=1, description="The wave hack ID to fetch details for")
