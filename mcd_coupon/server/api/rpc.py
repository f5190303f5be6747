"""
JSON-RPC Endpoint.

A single route, ``/``:

- ``POST /`` takes one JSON-RPC 2.0 request and answers with one JSON-RPC 2.0
  response, or with an empty body for notifications. JSON-RPC errors travel in
  the body with HTTP 200; only bodies that cannot be read as a request at all
  are answered with HTTP 400.
- ``GET /`` is a health probe, or an SSE handshake when the client asks for
  ``text/event-stream``.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from ..dispatcher import McpRelay
from ..schemas import INVALID_REQUEST, PARSE_ERROR, McpRequest, McpResponse

logger = logging.getLogger(__name__)

router = APIRouter()

EVENT_STREAM = "text/event-stream"
SSE_HANDSHAKE = ": connected\n\n"


def get_relay(request: Request) -> McpRelay:
    return request.app.state.relay


def _rejected(code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=McpResponse.failure(None, code, message).to_wire())


@router.post(
    "/",
    summary="JSON-RPC 2.0 endpoint",
    description="Accepts one JSON-RPC 2.0 request and proxies MCP tool calls to the remote coupon server.",
)
async def handle_rpc(request: Request, relay: McpRelay = Depends(get_relay)) -> Response:
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as e:
        logger.info("Rejected request body that is not JSON: %s", e)
        return _rejected(PARSE_ERROR, f"Parse error: {e}")

    try:
        rpc_request = McpRequest.model_validate(payload)
    except ValidationError as e:
        logger.info("Rejected malformed JSON-RPC request: %s", e)
        return _rejected(INVALID_REQUEST, "Invalid Request: " + "; ".join(err["msg"] for err in e.errors()))

    response = await relay.handle(rpc_request)
    if response is None:
        return Response(status_code=200, content=b"", media_type="application/json")
    return JSONResponse(status_code=200, content=response.to_wire())


@router.get(
    "/",
    summary="Health check / SSE handshake",
    description="Plain status object, or a one-line SSE handshake when Accept asks for text/event-stream.",
)
async def handle_probe(request: Request) -> Response:
    if EVENT_STREAM in request.headers.get("accept", ""):
        return Response(
            content=SSE_HANDSHAKE,
            media_type=EVENT_STREAM,
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
            },
        )
    return JSONResponse({"status": "ok"})
