from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Type, Union

from pydantic import BaseModel

from helpers.rendering import detail_context, list_context, render_template
from models.requests import WaveHackIdParams, WaveHackListParams
from models.responses import (
    ErrorResponse,
    WaveHackDetailResponse,
    WaveHackListResponse,
)
from .wave_hacks import PagedAggregateFetcher, get_wave_hack_result, list_wave_hacks_result

logger = logging.getLogger(__name__)

ToolHandler = Callable[[PagedAggregateFetcher, Any], Awaitable[Dict[str, Any]]]


@dataclass(frozen=True)
class Tool:
    name: str
    title: str
    description: str
    params_model: Type[BaseModel]
    handler: ToolHandler
    meta: Optional[Dict[str, Any]] = None

    def descriptor(self) -> Dict[str, Any]:
        """Entry for a tools/list response."""
        descriptor: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.params_model.model_json_schema(by_alias=True),
            "annotations": {
                "title": self.title,
                "readOnlyHint": True,
                "destructiveHint": False,
                "idempotentHint": True,
            },
        }
        if self.meta:
            descriptor["_meta"] = self.meta
        return descriptor


def _widget_meta(invoking: str, invoked: str) -> Dict[str, Any]:
    return {
        "openai": {
            "toolInvocation": {"invoking": invoking, "invoked": invoked},
            "widgetAccessible": True,
            "resultCanProduceWidget": True,
        }
    }


def _text(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def _json_result(
    result: Union[WaveHackListResponse, WaveHackDetailResponse, ErrorResponse],
) -> Dict[str, Any]:
    payload = result.model_dump(mode="json", by_alias=True, exclude_none=isinstance(result, ErrorResponse))
    envelope = _text(json.dumps(payload, indent=2, ensure_ascii=False))
    if isinstance(result, ErrorResponse):
        envelope["isError"] = True
    return envelope


def _error_result(message: str, **debug: Any) -> Dict[str, Any]:
    return _json_result(ErrorResponse(error=message, debug=debug or None))


# ──────────────────────────────────────────────
#  Handlers
# ──────────────────────────────────────────────

async def fetch_akindo_data(fetcher: PagedAggregateFetcher, params: WaveHackListParams) -> Dict[str, Any]:
    return _json_result(await list_wave_hacks_result(fetcher, params))


async def fetch_wave_cute(fetcher: PagedAggregateFetcher, params: WaveHackIdParams) -> Dict[str, Any]:
    return _json_result(await get_wave_hack_result(fetcher, params.id))


async def view_wave_cute(fetcher: PagedAggregateFetcher, params: WaveHackListParams) -> Dict[str, Any]:
    result = await list_wave_hacks_result(fetcher, params)
    try:
        html = render_template("wave_hacks.html", list_context(result, embedded=True))
    except Exception as e:
        logger.exception("Failed to render wave hacks widget")
        return _error_result(str(e) or "Unknown error occurred")

    envelope = _text(html)
    envelope["structuredContent"] = {
        "mode": params.mode.value,
        "page": params.page,
        "activeOnly": params.active_only,
        "success": result.success,
    }
    return envelope


async def view_wave_cute_detail(fetcher: PagedAggregateFetcher, params: WaveHackIdParams) -> Dict[str, Any]:
    result = await get_wave_hack_result(fetcher, params.id)
    try:
        html = render_template("wave_hack_detail.html", detail_context(result, embedded=True))
    except Exception as e:
        logger.exception("Failed to render detail widget for %s", params.id)
        return _error_result(str(e) or "Unknown error occurred", waveHackId=params.id)

    envelope = _text(html)
    envelope["structuredContent"] = {"id": params.id, "success": result.success}
    return envelope


TOOLS: Dict[str, Tool] = {
    tool.name: tool
    for tool in (
        Tool(
            name="fetch_akindo_data",
            title="Fetch Akindo Wave Hack Data",
            description="Fetch wave hack data from the Akindo API with pagination support",
            params_model=WaveHackListParams,
            handler=fetch_akindo_data,
        ),
        Tool(
            name="fetch_wave_cute",
            title="Fetch Wave Hack Details",
            description="Fetch detailed information about a specific wave hack by ID from the Akindo API",
            params_model=WaveHackIdParams,
            handler=fetch_wave_cute,
        ),
        Tool(
            name="view_wave_cute",
            title="View Akindo Wave Hack Data",
            description="Display wave hack data from the Akindo API in an interactive widget",
            params_model=WaveHackListParams,
            handler=view_wave_cute,
            meta=_widget_meta("Loading wave hack data", "Wave hack viewer ready"),
        ),
        Tool(
            name="view_wave_cute_detail",
            title="View Wave Hack Detail",
            description="Display detailed information about a specific wave hack by ID",
            params_model=WaveHackIdParams,
            handler=view_wave_cute_detail,
            meta=_widget_meta("Loading wave hack details", "Wave hack detail ready"),
        ),
    )
}


async def call_tool(fetcher: PagedAggregateFetcher, tool: Tool, params: BaseModel) -> Dict[str, Any]:
    """Run a tool handler. Unexpected failures become an isError result."""
    try:
        return await tool.handler(fetcher, params)
    except Exception as e:
        logger.exception("Tool %s failed", tool.name)
        return _error_result(str(e) or "Unknown error occurred")
