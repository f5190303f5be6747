"""
JSON-RPC Relay Dispatcher.

Turns validated ``McpRequest`` objects into ``McpResponse`` objects. Every branch
resolves to a well-formed response: malformed params and unknown names become
protocol-level errors, and anything that goes wrong while calling a remote tool
becomes a tool-level error (``result.isError``) inside a successful envelope.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from mcd_coupon.mcp_client.client import CouponMcpClient
from mcd_coupon.mcp_client.errors import McpClientError
from mcd_coupon.mcp_client.models import CouponTool

from . import descriptors
from .schemas import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    DescribeMethodParams,
    McpRequest,
    McpResponse,
    ToolCallParams,
)

logger = logging.getLogger(__name__)

# Client operation invoked for each tool.
TOOL_OPERATIONS: Dict[CouponTool, str] = {
    CouponTool.AVAILABLE_COUPONS: "get_available_coupons",
    CouponTool.AUTO_BIND_COUPONS: "auto_bind_coupons",
    CouponTool.MY_COUPONS: "get_my_coupons",
    CouponTool.NOW_TIME_INFO: "get_current_time",
}


class SharedClient:
    """A single Remote Tool Client shared by all in-flight relay requests.

    Remote calls are serialized: a caller holds the lock for the duration of
    one remote round trip.
    """

    def __init__(self, client: CouponMcpClient) -> None:
        self._client = client
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[CouponMcpClient]:
        async with self._lock:
            yield self._client

    async def aclose(self) -> None:
        async with self._lock:
            await self._client.aclose()


Handler = Callable[[int, Any], Awaitable[McpResponse]]
ModelT = TypeVar("ModelT", bound=BaseModel)


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "params"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def _parse_params(model: type[ModelT], params: Any) -> ModelT:
    if params is None:
        raise ValueError("missing params")
    try:
        return model.model_validate(params)
    except ValidationError as e:
        raise ValueError(_describe_validation_error(e)) from e


class McpRelay:
    """Dispatch table for the relay's JSON-RPC methods."""

    def __init__(self, shared_client: SharedClient) -> None:
        self._shared = shared_client
        self._handlers: Dict[str, Handler] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "system.listMethods": self._list_methods,
            "system.describeMethod": self._describe_method,
        }

    @property
    def shared_client(self) -> SharedClient:
        return self._shared

    async def handle(self, request: McpRequest) -> Optional[McpResponse]:
        """Answer one request; returns ``None`` for notifications."""
        if request.id is None:
            logger.debug("McpRelay.handle: notification method=%s, no response", request.method)
            return None

        handler = self._handlers.get(request.method)
        if handler is None:
            logger.info("McpRelay.handle: unknown method=%s", request.method)
            return McpResponse.failure(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

        logger.debug("McpRelay.handle: method=%s id=%s", request.method, request.id)
        return await handler(request.id, request.params)

    async def _initialize(self, id: int, _params: Any) -> McpResponse:
        return McpResponse.success(id, descriptors.initialize_result())

    async def _tools_list(self, id: int, _params: Any) -> McpResponse:
        return McpResponse.success(id, {"tools": descriptors.tool_list()})

    async def _list_methods(self, id: int, _params: Any) -> McpResponse:
        return McpResponse.success(id, descriptors.method_list())

    async def _describe_method(self, id: int, params: Any) -> McpResponse:
        try:
            parsed = _parse_params(DescribeMethodParams, params)
        except ValueError as e:
            return McpResponse.failure(id, INVALID_PARAMS, f"Invalid params: {e}")
        description = descriptors.describe(parsed.name)
        if description is None:
            return McpResponse.failure(id, METHOD_NOT_FOUND, f"Method not found: {parsed.name}")
        return McpResponse.success(id, description)

    async def _tools_call(self, id: int, params: Any) -> McpResponse:
        try:
            parsed = _parse_params(ToolCallParams, params)
        except ValueError as e:
            return McpResponse.failure(id, INVALID_PARAMS, f"Invalid params: {e}")
        try:
            tool = CouponTool(parsed.name)
        except ValueError:
            return McpResponse.failure(id, METHOD_NOT_FOUND, f"Tool not found: {parsed.name}")

        return await self._call_tool(id, tool)

    async def _call_tool(self, id: int, tool: CouponTool) -> McpResponse:
        operation = TOOL_OPERATIONS[tool]
        try:
            async with self._shared.acquire() as client:
                text = await getattr(client, operation)()
        except McpClientError as e:
            logger.info("McpRelay: tool %s failed: %s", tool.value, e)
            return McpResponse.tool_error(id, str(e))
        except Exception as e:
            logger.error("McpRelay: unexpected error in tool %s: %s", tool.value, e, exc_info=True)
            return McpResponse.tool_error(id, str(e) or type(e).__name__)
        return McpResponse.tool_result(id, text)
