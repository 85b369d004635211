from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from controllers.wave_hacks import (
    PagedAggregateFetcher,
    describe_error,
    get_wave_hack,
    list_wave_hacks_result,
)
from helpers.rendering import detail_context, list_context, templates
from models.requests import FetchMode, WaveHackListParams
from models.responses import ErrorResponse
from .dependencies import get_fetcher

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)


async def _render_detail(
    request: Request,
    fetcher: PagedAggregateFetcher,
    wave_hack_id: str,
    embedded: bool,
) -> HTMLResponse:
    status_code = 200
    try:
        result = await get_wave_hack(fetcher, wave_hack_id)
    except Exception as e:
        logger.exception("Failed to render wave hack %s", wave_hack_id)
        status_code, message = describe_error(e)
        result = ErrorResponse(error=message)

    return templates.TemplateResponse(
        request,
        "wave_hack_detail.html",
        detail_context(result, embedded=embedded),
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, fetcher: PagedAggregateFetcher = Depends(get_fetcher)):
    """Landing page: active wave hacks from the first upstream page, soonest deadline first."""
    result = await list_wave_hacks_result(
        fetcher, WaveHackListParams(mode=FetchMode.SINGLE, active_only=True)
    )
    return templates.TemplateResponse(request, "wave_hacks.html", list_context(result))


@router.get("/wave-hacks/{wave_hack_id}", response_class=HTMLResponse)
async def wave_hack_page(
    request: Request,
    wave_hack_id: str,
    fetcher: PagedAggregateFetcher = Depends(get_fetcher),
):
    return await _render_detail(request, fetcher, wave_hack_id, embedded=False)


# ── Widget pages (same templates, embedded layout) ──

@router.get("/view-wave-cute", response_class=HTMLResponse)
async def wave_hacks_widget(
    request: Request,
    mode: FetchMode = Query(default=FetchMode.ALL),
    page: Optional[int] = Query(default=None, ge=1),
    active_only: bool = Query(default=True, alias="activeOnly"),
    fetcher: PagedAggregateFetcher = Depends(get_fetcher),
):
    params = WaveHackListParams(mode=mode, page=page, active_only=active_only)
    result = await list_wave_hacks_result(fetcher, params)
    return templates.TemplateResponse(request, "wave_hacks.html", list_context(result, embedded=True))


@router.get("/view-wave-cute-detail", response_class=HTMLResponse)
async def wave_hack_widget(
    request: Request,
    id: str = Query(default="", description="Wave hack ID"),
    fetcher: PagedAggregateFetcher = Depends(get_fetcher),
):
    if not id:
        return templates.TemplateResponse(
            request,
            "wave_hack_detail.html",
            detail_context(ErrorResponse(error="Wave hack ID is required to view details."), embedded=True),
            status_code=400,
        )
    return await _render_detail(request, fetcher, id, embedded=True)
