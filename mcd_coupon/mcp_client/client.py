from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from mcd_coupon.core.config import MCP_SERVER_URL, CouponConfig, settings

from .errors import (
    McpHttpStatusError,
    McpProtocolError,
    McpResponseShapeError,
    McpToolError,
    McpTransportError,
)
from .models import CouponTool, JSONRPCRequest, JSONRPCResponse, ToolCallParams, ToolCallResult

DEFAULT_TIMEOUT_SECONDS = 30.0


class CouponMcpClient:
    """
    Async HTTP client for the remote McDonald's coupon MCP server.

    Responsibilities:
    - validate_token: probe whether the bearer token is accepted
    - call_tool: issue a ``tools/call`` JSON-RPC request and unwrap its text
    - one convenience method per coupon tool

    The token is sent verbatim as the ``Authorization`` header, so it must
    already carry its scheme prefix (``Bearer ...``).
    """

    def __init__(
        self,
        token: str,
        *,
        url: str = MCP_SERVER_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.token = token
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    async def __aenter__(self) -> "CouponMcpClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def set_url(self, url: str) -> None:
        self.url = url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self.token,
            "Content-Type": "application/json",
        }

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        try:
            return await self._client.post(self.url, headers=self._headers(), json=payload)
        except httpx.RequestError as e:
            raise McpTransportError(str(e) or type(e).__name__) from e

    async def validate_token(self) -> bool:
        """Check whether the remote accepts the token.

        Sends a cheap ``system.listMethods`` request purely for its HTTP status:
        401 means the token is rejected, any other status means it was accepted
        (the method itself may well not exist remotely).

        Returns:
            ``False`` on HTTP 401, ``True`` otherwise.

        Raises:
            McpTransportError: If the server could not be reached at all.
        """
        request = JSONRPCRequest(method="system.listMethods", params={}, id=1)
        self._logger.debug("CouponMcpClient.validate_token: POST %s", self.url)
        r = await self._post(request.model_dump())
        if r.status_code == httpx.codes.UNAUTHORIZED:
            self._logger.debug("CouponMcpClient.validate_token: token rejected (401)")
            return False
        self._logger.debug("CouponMcpClient.validate_token: accepted with status %s", r.status_code)
        return True

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """Call a remote tool and return its text output.

        Args:
            name: Tool name, e.g. ``"my-coupons"``.
            arguments: Optional tool arguments; omitted from the request when empty.

        Returns:
            The newline-joined text of the result's ``text`` content items.

        Raises:
            McpTransportError: The server could not be reached.
            McpHttpStatusError: Non-2xx HTTP response.
            McpResponseShapeError: The body is not a JSON-RPC tool result.
            McpProtocolError: The response carries a JSON-RPC ``error``.
            McpToolError: The tool result has ``isError`` set.
        """
        params = ToolCallParams(name=name, arguments=arguments or None)
        request = JSONRPCRequest(
            method="tools/call",
            params=params.model_dump(exclude_none=True),
            id=1,
        )
        self._logger.debug("CouponMcpClient.call_tool: POST %s tool=%s", self.url, name)
        r = await self._post(request.model_dump())

        body = r.text
        if not r.is_success:
            raise McpHttpStatusError(r.status_code, body)

        try:
            response = JSONRPCResponse.model_validate(json.loads(body))
        except (ValueError, RecursionError, ValidationError) as e:
            raise McpResponseShapeError(
                f"Failed to parse MCP response: {e} - body: {body}",
                details=body,
            ) from e

        if response.error is not None:
            raise McpProtocolError(response.error.code, response.error.message, response.error.data)

        if response.result is None:
            raise McpResponseShapeError("MCP response missing result", details=body)

        try:
            result = ToolCallResult.model_validate(response.result)
        except ValidationError as e:
            raise McpResponseShapeError(
                f"Unexpected tool result shape: {e}",
                details=response.result,
            ) from e

        if result.is_error:
            raise McpToolError(name, result.joined_text(text_items_only=False))

        text = result.joined_text()
        self._logger.debug("CouponMcpClient.call_tool: tool=%s returned %d chars", name, len(text))
        return text

    async def get_available_coupons(self) -> str:
        """All coupons currently claimable by the user (markdown)."""
        return await self.call_tool(CouponTool.AVAILABLE_COUPONS.value)

    async def auto_bind_coupons(self) -> str:
        """Claim every available coupon (markdown summary)."""
        return await self.call_tool(CouponTool.AUTO_BIND_COUPONS.value)

    async def get_my_coupons(self) -> str:
        """Coupons the user already holds (markdown)."""
        return await self.call_tool(CouponTool.MY_COUPONS.value)

    async def get_current_time(self) -> str:
        """Server-side time information."""
        return await self.call_tool(CouponTool.NOW_TIME_INFO.value)


def client_from_config(config: CouponConfig, token: Optional[str] = None) -> CouponMcpClient:
    """Build a client for ``token`` (default: the persisted one), honoring the URL override."""
    return CouponMcpClient(
        config.token if token is None else token,
        url=config.mcp_server_url or settings.remote_url,
        timeout=settings.remote_timeout_seconds,
    )
