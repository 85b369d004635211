from .display import (
    TimeRemaining,
    format_average,
    format_date,
    format_grant,
    progress_percent,
    render_markdown,
    sort_by_deadline,
    time_remaining,
)
from .rendering import detail_context, list_context, render_template, templates

__all__ = [
    "TimeRemaining",
    "format_average",
    "format_date",
    "format_grant",
    "progress_percent",
    "render_markdown",
    "sort_by_deadline",
    "time_remaining",
    "detail_context",
    "list_context",
    "render_template",
    "templates",
]
