from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from fastapi.templating import Jinja2Templates

from config import settings
from models.responses import ErrorResponse, WaveHackDetailResponse, WaveHackListResponse
from models.wave_hacks import WaveHack

from .display import (
    format_average,
    format_date,
    format_grant,
    progress_percent,
    render_markdown,
    sort_by_deadline,
    time_remaining,
)

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

templates.env.filters["date"] = lambda value: format_date(value, settings.display_timezone)
templates.env.filters["grant"] = format_grant
templates.env.filters["average"] = format_average
templates.env.filters["markdown"] = render_markdown

COMMUNITY_LINKS = [
    ("website_url", "🌐", "Website"),
    ("discord_url", "💬", "Discord"),
    ("twitter_url", "🐦", "Twitter / X"),
    ("telegram_url", "📱", "Telegram"),
]

TIMELINE_FIELDS = [
    ("opened_at", "Opened"),
    ("started_at", "Started"),
    ("submission_deadline", "Submission Deadline"),
    ("judgement_deadline", "Judging Deadline"),
]


def _card(item: WaveHack, now: datetime) -> Dict[str, Any]:
    wave = item.active_wave
    submission = time_remaining(wave.submission_deadline if wave else None, now)
    judging = time_remaining(wave.judgement_deadline if wave else None, now)
    return {
        "item": item,
        "submission": submission,
        "submission_progress": progress_percent(submission),
        "judging": judging,
        "judging_progress": progress_percent(judging),
    }


def list_context(
    result: Union[WaveHackListResponse, ErrorResponse],
    embedded: bool = False,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Template context for the listing page / widget."""
    now = now or datetime.now(timezone.utc)
    context: Dict[str, Any] = {
        "embedded": embedded,
        "timezone": settings.display_timezone,
        "generated_at": now,
        "error": None,
        "cards": [],
        "summary": None,
    }
    if isinstance(result, ErrorResponse):
        context["error"] = result.error
        return context

    context["cards"] = [_card(item, now) for item in sort_by_deadline(result.data, now)]
    context["summary"] = result.summary
    return context


def detail_context(
    result: Union[WaveHackDetailResponse, ErrorResponse],
    embedded: bool = False,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    context: Dict[str, Any] = {
        "embedded": embedded,
        "timezone": settings.display_timezone,
        "error": None,
        "detail": None,
    }
    if isinstance(result, ErrorResponse):
        context["error"] = result.error
        return context

    detail = result.data
    wave = detail.active_wave
    community = detail.community
    links: List[Dict[str, str]] = []
    if community is not None:
        for attr, icon, label in COMMUNITY_LINKS:
            url = getattr(community, attr)
            if url:
                links.append({"url": url, "icon": icon, "label": label})

    context.update(
        detail=detail,
        card=_card(detail, now),
        timeline=[(label, getattr(wave, attr) if wave else None) for attr, label in TIMELINE_FIELDS],
        links=links,
        criteria=detail.active_criteria,
    )
    return context


def render_template(name: str, context: Dict[str, Any]) -> str:
    """Render a template outside a request (tool widgets)."""
    return templates.get_template(name).render(context)
