from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config import settings
from controllers.tools import TOOLS, call_tool
from controllers.wave_hacks import PagedAggregateFetcher
from .dependencies import get_fetcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tools"])

PROTOCOL_VERSION = "2025-06-18"

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


def _rpc_result(rpc_id: Any, result: Dict[str, Any]) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": rpc_id, "result": result})


def _rpc_error(rpc_id: Any, code: int, message: str, data: Optional[Any] = None) -> JSONResponse:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return JSONResponse({"jsonrpc": "2.0", "id": rpc_id, "error": error})


@router.post(
    "/mcp",
    summary="Tool invocation endpoint",
    description="JSON-RPC 2.0 endpoint exposing the wave hack tools to chat-assistant hosts.",
)
async def mcp_endpoint(request: Request, fetcher: PagedAggregateFetcher = Depends(get_fetcher)):
    try:
        body = await request.json()
    except ValueError:
        return _rpc_error(None, PARSE_ERROR, "Parse error")

    if not isinstance(body, dict) or not isinstance(body.get("method"), str):
        return _rpc_error(None, INVALID_REQUEST, "Invalid request")

    method = body["method"]
    params = body.get("params") or {}

    # Notifications expect no response body
    if "id" not in body:
        logger.debug("Notification received: %s", method)
        return Response(status_code=202)

    rpc_id = body["id"]
    if not isinstance(params, dict):
        return _rpc_error(rpc_id, INVALID_PARAMS, "params must be an object")

    if method == "initialize":
        return _rpc_result(
            rpc_id,
            {
                "protocolVersion": params.get("protocolVersion", PROTOCOL_VERSION),
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {"name": settings.server_name, "version": settings.server_version},
            },
        )

    if method == "ping":
        return _rpc_result(rpc_id, {})

    if method == "tools/list":
        return _rpc_result(rpc_id, {"tools": [tool.descriptor() for tool in TOOLS.values()]})

    if method == "tools/call":
        name = params.get("name")
        tool = TOOLS.get(name) if isinstance(name, str) else None
        if tool is None:
            return _rpc_error(rpc_id, INVALID_PARAMS, f"Unknown tool: {name}")

        try:
            arguments = tool.params_model.model_validate(params.get("arguments") or {})
        except ValidationError as e:
            return _rpc_error(
                rpc_id,
                INVALID_PARAMS,
                f"Invalid arguments for {tool.name}",
                data=e.errors(include_url=False, include_context=False),
            )

        logger.info("Tool call: %s %s", tool.name, arguments.model_dump(by_alias=True))
        return _rpc_result(rpc_id, await call_tool(fetcher, tool, arguments))

    return _rpc_error(rpc_id, METHOD_NOT_FOUND, f"Method not found: {method}")
