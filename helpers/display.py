from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from markdown_it import MarkdownIt
from markupsafe import Markup

from models.wave_hacks import WaveHack

PLACEHOLDER = "—"

# CommonMark plus tables and strikethrough. Raw HTML in the source is escaped,
# and markdown-it refuses javascript:/vbscript:/data: link targets.
_markdown = MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])


def _link_open(self, tokens, idx, options, env):
    tokens[idx].attrSet("target", "_blank")
    tokens[idx].attrSet("rel", "noopener noreferrer")
    return self.renderToken(tokens, idx, options, env)


_markdown.add_render_rule("link_open", _link_open)


@dataclass(frozen=True)
class TimeRemaining:
    days: int
    hours: int
    minutes: int
    seconds: int
    is_expired: bool
    urgency: str  # expired | urgent | soon | warning | good | neutral
    label: str
    deadline: Optional[str] = None  # ISO 8601 UTC while still open, for client-side ticking


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _now(now: Optional[datetime]) -> datetime:
    return _as_utc(now) if now is not None else datetime.now(timezone.utc)


def urgency_for(days: int, is_expired: bool) -> str:
    if is_expired:
        return "expired"
    if days <= 1:
        return "urgent"
    if days <= 3:
        return "soon"
    if days <= 7:
        return "warning"
    return "good"


def time_remaining(deadline: Optional[datetime], now: Optional[datetime] = None) -> TimeRemaining:
    """Break the time left until `deadline` into d/h/m/s plus an urgency bucket."""
    if deadline is None:
        return TimeRemaining(0, 0, 0, 0, False, "neutral", "No deadline provided")

    diff = int((_as_utc(deadline) - _now(now)).total_seconds())
    if diff <= 0:
        return TimeRemaining(0, 0, 0, 0, True, "expired", "Deadline passed")

    days, rest = divmod(diff, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return TimeRemaining(
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        is_expired=False,
        urgency=urgency_for(days, False),
        label=f"{days}d {hours}h {minutes}m remaining",
        deadline=_as_utc(deadline).isoformat(),
    )


def progress_percent(remaining: TimeRemaining) -> float:
    """Bar fill: full once expired, otherwise grows as days run out (5% floor, no ceiling)."""
    if remaining.is_expired:
        return 100.0
    return max(5.0, 100 - remaining.days * 3.33)


def format_date(value: Optional[datetime], tz_name: str = "Asia/Jakarta") -> str:
    if value is None:
        return PLACEHOLDER
    local = _as_utc(value).astimezone(ZoneInfo(tz_name))
    return local.strftime("%b %d, %Y, %I:%M %p")


def format_grant(amount: Optional[str]) -> Optional[str]:
    """'12500.5' → '12,500.5'. Unparseable amounts are returned as-is."""
    if not amount:
        return None
    try:
        value = Decimal(amount)
    except InvalidOperation:
        return amount
    if value == value.to_integral_value():
        return f"{int(value):,}"
    return f"{value.quantize(Decimal('0.001')).normalize():,}"


def format_average(value: Optional[float]) -> str:
    if value is None or math.isnan(value):
        return PLACEHOLDER
    return f"{value:.1f}"


def render_markdown(text: Optional[str]) -> Markup:
    """Render a markdown description to HTML that is safe to embed unescaped."""
    if not text:
        return Markup("")
    return Markup(_markdown.render(text))


def sort_by_deadline(items: Sequence[WaveHack], now: Optional[datetime] = None) -> List[WaveHack]:
    """
    Open submission deadlines first (soonest first), then expired ones
    (oldest first), then anything without an active wave.
    """
    current = _now(now)

    def key(item: WaveHack):
        deadline = item.active_wave.submission_deadline if item.active_wave else None
        if deadline is None:
            return (2, 0.0)
        deadline = _as_utc(deadline)
        return (1 if deadline <= current else 0, deadline.timestamp())

    return sorted(items, key=key)
