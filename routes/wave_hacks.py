from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from controllers.wave_hacks import (
    PagedAggregateFetcher,
    describe_error,
    get_wave_hack,
    list_wave_hacks,
)
from models.requests import FetchMode, WaveHackListParams
from models.responses import ErrorResponse, WaveHackDetailResponse, WaveHackListResponse
from .dependencies import get_fetcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Wave Hacks"])

DETAIL_CACHE_CONTROL = "public, s-maxage=86400, max-age=3600, stale-while-revalidate=86400"


@router.get(
    "/akindo-data",
    response_model=WaveHackListResponse,
    summary="List wave hacks",
    description=(
        "Fetch wave hacks from the Akindo API. `mode=all` walks every upstream page, "
        "`single` returns page 1 and `page` a specific page. `single=true` is accepted "
        "as a shorthand for `mode=single`."
    ),
)
async def get_wave_hacks(
    mode: FetchMode = Query(default=FetchMode.ALL, description="all, single or page"),
    page: Optional[int] = Query(default=None, ge=1, description="Page number (mode=page)"),
    active_only: bool = Query(default=False, alias="activeOnly", description="Only items with an active wave"),
    single: bool = Query(default=False, description="Shorthand for mode=single"),
    fetcher: PagedAggregateFetcher = Depends(get_fetcher),
):
    if single:
        mode = FetchMode.SINGLE
    elif page is not None and mode == FetchMode.ALL:
        mode = FetchMode.PAGE

    params = WaveHackListParams(mode=mode, page=page, active_only=active_only)
    try:
        return await list_wave_hacks(fetcher, params)
    except Exception as e:
        logger.exception("Failed to list wave hacks (mode=%s, page=%s)", mode.value, page)
        status_code, message = describe_error(e)
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=message).model_dump(exclude_none=True),
        )


@router.get(
    "/wave-hack/{wave_hack_id}",
    response_model=WaveHackDetailResponse,
    summary="Get a single wave hack by ID",
    description="Detail record with description, community links and judging criteria.",
)
async def get_wave_hack_by_id(
    wave_hack_id: str,
    response: Response,
    fetcher: PagedAggregateFetcher = Depends(get_fetcher),
):
    try:
        result = await get_wave_hack(fetcher, wave_hack_id)
    except Exception as e:
        logger.exception("Error fetching wave hack details for %s", wave_hack_id)
        status_code, message = describe_error(e)
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                debug={"originalError": str(e) or "Unknown error", "waveHackId": wave_hack_id},
            ).model_dump(),
        )

    response.headers["Cache-Control"] = DETAIL_CACHE_CONTROL
    response.headers["Cache-Tag"] = f"wave-hack-{wave_hack_id}"
    response.headers["Vary"] = "Accept-Encoding"
    return result
