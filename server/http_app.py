# server/http_app.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict

import pydantic
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from app.config import Settings
from app.di import Container
from server.registry import build_tool_registry, dispatch_tool_call, list_tools_payload

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-03-26"  # aligns with current spec draft dates


# ---------- Security: Origin validation & Bearer token ----------

def _origin_allowed(settings: Settings, req: Request) -> bool:
    origin = req.headers.get("origin")
    if not origin:
        return settings.MCP_HTTP_ALLOW_NO_ORIGIN
    allowed = {o.strip().lower() for o in settings.MCP_HTTP_ALLOWED_ORIGINS.split(",") if o.strip()}
    return origin.lower() in allowed


def _require_auth(settings: Settings, req: Request):
    auth = req.headers.get("authorization", "")
    if not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Bearer token")
    token = auth.split(" ", 1)[1]
    if token != settings.MCP_HTTP_BEARER_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid Bearer token")


def _jsonrpc_error(id_: Any, code: int, message: str, data: Any | None = None) -> JSONResponse:
    body: Dict[str, Any] = {"jsonrpc": "2.0", "id": id_, "error": {"code": code, "message": message}}
    if data is not None:
        body["error"]["data"] = data
    return JSONResponse(body)


def _jsonrpc_result(id_: Any, result: Any) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": id_, "result": result})


def create_http_app(container: Container) -> FastAPI:
    """
    MCP JSON-RPC endpoint (Streamable HTTP, request/response only) over the
    same tool registry the stdio host exposes.
    """
    settings = container.settings
    registry = build_tool_registry(container)
    app = FastAPI(title=settings.SERVER_NAME, version=settings.SERVER_VERSION)

    @app.middleware("http")
    async def origin_validation_mw(request: Request, call_next):
        # MCP spec requires Origin validation to prevent DNS rebinding
        if not _origin_allowed(settings, request):
            return JSONResponse({"error": {"code": 403, "message": "Forbidden origin"}}, status_code=403)
        return await call_next(request)

    @app.post(settings.MCP_HTTP_PATH)
    async def mcp_endpoint(request: Request):
        _require_auth(settings, request)

        try:
            payload = await request.json()
        except ValueError:
            return _jsonrpc_error(None, -32700, "Parse error")
        if not isinstance(payload, dict):
            return _jsonrpc_error(None, -32600, "Invalid Request")

        id_ = payload.get("id")
        method = payload.get("method")
        params = payload.get("params") or {}
        if not isinstance(params, dict):
            return _jsonrpc_error(id_, -32602, "Invalid params: params must be an object")

        if method == "initialize":
            return _jsonrpc_result(id_, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {"name": settings.SERVER_NAME, "version": settings.SERVER_VERSION},
            })

        if method == "tools/list":
            return _jsonrpc_result(id_, list_tools_payload(registry))

        if method == "tools/call":
            name = params.get("name")
            args = params.get("arguments") or {}
            if not isinstance(args, dict):
                return _jsonrpc_error(id_, -32602, "Invalid params: arguments must be an object")
            try:
                result = await dispatch_tool_call(registry, name, args)
            except KeyError as ke:
                return _jsonrpc_error(id_, -32601, str(ke.args[0]))
            except pydantic.ValidationError as ve:
                return _jsonrpc_error(
                    id_, -32602, "Invalid params", json.loads(ve.json(include_url=False))
                )
            return _jsonrpc_result(id_, result.to_payload())

        return _jsonrpc_error(id_, -32601, f"Method not found: {method}")

    return app
