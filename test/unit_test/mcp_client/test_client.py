from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from mcd_coupon.core.config import MCP_SERVER_URL, CouponConfig
from mcd_coupon.mcp_client.client import CouponMcpClient, client_from_config
from mcd_coupon.mcp_client.errors import (
    McpClientError,
    McpHttpStatusError,
    McpProtocolError,
    McpResponseShapeError,
    McpToolError,
    McpTransportError,
)

URL = "http://mock/mcp"


def _client(handler: Callable[[httpx.Request], httpx.Response], token: str = "Bearer abc") -> CouponMcpClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CouponMcpClient(token, url=URL, client=http)


def _recording_handler(response: httpx.Response, seen: List[Dict[str, Any]]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(
            {
                "url": str(request.url),
                "auth": request.headers.get("Authorization"),
                "content_type": request.headers.get("Content-Type"),
                "body": json.loads(request.content.decode("utf-8")),
            }
        )
        return response

    return handler


def _tool_result(content: List[Dict[str, Any]], is_error: bool = False) -> httpx.Response:
    return httpx.Response(
        200,
        json={"jsonrpc": "2.0", "id": 1, "result": {"content": content, "isError": is_error}},
    )


@pytest.mark.asyncio
async def test_validate_token_rejected_on_401() -> None:
    seen: List[Dict[str, Any]] = []
    client = _client(_recording_handler(httpx.Response(401, text="unauthorized"), seen))

    assert await client.validate_token() is False

    assert seen[0]["url"] == URL
    assert seen[0]["auth"] == "Bearer abc"
    assert seen[0]["content_type"] == "application/json"
    assert seen[0]["body"]["method"] == "system.listMethods"
    assert seen[0]["body"]["jsonrpc"] == "2.0"
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [200, 404, 500])
async def test_validate_token_accepts_any_other_status(status: int) -> None:
    client = _client(lambda request: httpx.Response(status, json={}))
    assert await client.validate_token() is True
    await client.aclose()


@pytest.mark.asyncio
async def test_validate_token_unreachable_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(McpTransportError) as exc_info:
        await client.validate_token()
    assert str(exc_info.value) == "Network request failed: connection refused"
    assert isinstance(exc_info.value, McpClientError)
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_joins_text_items_and_drops_other_content() -> None:
    response = _tool_result(
        [
            {"type": "text", "text": "## Coupon A"},
            {"type": "image", "data": "aGVsbG8="},
            {"type": "text", "text": "## Coupon B"},
        ]
    )
    client = _client(lambda request: response)

    assert await client.call_tool("my-coupons") == "## Coupon A\n## Coupon B"
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_omits_empty_arguments() -> None:
    seen: List[Dict[str, Any]] = []
    client = _client(_recording_handler(_tool_result([{"type": "text", "text": "ok"}]), seen))

    await client.call_tool("my-coupons")
    await client.call_tool("my-coupons", {})
    await client.call_tool("my-coupons", {"page": 2})

    assert seen[0]["body"]["method"] == "tools/call"
    assert seen[0]["body"]["params"] == {"name": "my-coupons"}
    assert seen[1]["body"]["params"] == {"name": "my-coupons"}
    assert seen[2]["body"]["params"] == {"name": "my-coupons", "arguments": {"page": 2}}
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_non_2xx_raises_status_error() -> None:
    client = _client(lambda request: httpx.Response(502, text="bad gateway"))

    with pytest.raises(McpHttpStatusError) as exc_info:
        await client.call_tool("my-coupons")
    assert exc_info.value.status_code == 502
    assert exc_info.value.body == "bad gateway"
    assert str(exc_info.value) == "MCP server error: 502 - bad gateway"
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_jsonrpc_error_raises_protocol_error() -> None:
    response = httpx.Response(
        200,
        json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Method not found"}},
    )
    client = _client(lambda request: response)

    with pytest.raises(McpProtocolError) as exc_info:
        await client.call_tool("my-coupons")
    assert exc_info.value.code == -32601
    assert exc_info.value.rpc_message == "Method not found"
    assert str(exc_info.value) == "MCP error -32601: Method not found"
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_missing_result_raises_shape_error() -> None:
    client = _client(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1}))

    with pytest.raises(McpResponseShapeError, match="MCP response missing result"):
        await client.call_tool("my-coupons")
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_unparsable_body_raises_shape_error() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(McpResponseShapeError) as exc_info:
        await client.call_tool("my-coupons")
    assert exc_info.value.details == "<html>oops</html>"
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_result_without_content_raises_shape_error() -> None:
    response = httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"items": []}})
    client = _client(lambda request: response)

    with pytest.raises(McpResponseShapeError):
        await client.call_tool("my-coupons")
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_is_error_raises_tool_error() -> None:
    response = _tool_result([{"type": "text", "text": "token expired"}], is_error=True)
    client = _client(lambda request: response)

    with pytest.raises(McpToolError) as exc_info:
        await client.call_tool("auto-bind-coupons")
    assert exc_info.value.tool_name == "auto-bind-coupons"
    assert str(exc_info.value) == "MCP tool error: token expired"
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, tool",
    [
        ("get_available_coupons", "available-coupons"),
        ("auto_bind_coupons", "auto-bind-coupons"),
        ("get_my_coupons", "my-coupons"),
        ("get_current_time", "now-time-info"),
    ],
)
async def test_convenience_methods_call_their_tool(method: str, tool: str) -> None:
    seen: List[Dict[str, Any]] = []
    client = _client(_recording_handler(_tool_result([{"type": "text", "text": tool}]), seen))

    assert await getattr(client, method)() == tool
    assert seen[0]["body"]["params"] == {"name": tool}
    await client.aclose()


@pytest.mark.asyncio
async def test_async_context_manager_closes_http_client() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    async with CouponMcpClient("Bearer abc", url=URL, client=http):
        pass
    assert http.is_closed


@pytest.mark.asyncio
async def test_client_from_config_honors_url_override() -> None:
    default = client_from_config(CouponConfig(token="Bearer a"))
    override = client_from_config(CouponConfig(token="Bearer a", mcp_server_url="http://mock/alt"), "Bearer b")

    assert default.url == MCP_SERVER_URL
    assert default.token == "Bearer a"
    assert override.url == "http://mock/alt"
    assert override.token == "Bearer b"
    await default.aclose()
    await override.aclose()


@pytest.mark.asyncio
async def test_validate_token_undecodable_body_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"definitely not gzip")

    client = _client(handler)
    with pytest.raises(McpTransportError) as exc_info:
        await client.validate_token()
    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_too_many_redirects_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(307, headers={"Location": URL})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True, max_redirects=2)
    client = CouponMcpClient("Bearer abc", url=URL, client=http)
    with pytest.raises(McpTransportError) as exc_info:
        await client.call_tool("my-coupons")
    assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)
    await client.aclose()


@pytest.mark.asyncio
async def test_read_timeout_raises_transport_error_with_type_name() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("", request=request)

    client = _client(handler)
    with pytest.raises(McpTransportError) as exc_info:
        await client.call_tool("my-coupons")
    assert str(exc_info.value) == "Network request failed: ReadTimeout"
    await client.aclose()


@pytest.mark.asyncio
async def test_remote_timeout_defaults_to_thirty_seconds() -> None:
    direct = CouponMcpClient("Bearer a", url=URL)
    configured = client_from_config(CouponConfig(token="Bearer a"))

    assert direct._client.timeout.read == 30.0
    assert configured._client.timeout.read == 30.0
    assert configured._client.timeout.connect == 30.0
    await direct.aclose()
    await configured.aclose()


@pytest.mark.asyncio
async def test_set_url_redirects_later_calls() -> None:
    seen: List[Dict[str, Any]] = []
    client = _client(_recording_handler(_tool_result([{"type": "text", "text": "ok"}]), seen))

    client.set_url("http://mock/other")
    assert await client.get_current_time() == "ok"

    assert client.url == "http://mock/other"
    assert seen[0]["url"] == "http://mock/other"
    await client.aclose()


@pytest.mark.asyncio
async def test_call_tool_content_item_without_type_raises_shape_error() -> None:
    client = _client(lambda request: _tool_result([{"text": "untyped"}]))

    with pytest.raises(McpResponseShapeError, match="Unexpected tool result shape"):
        await client.call_tool("my-coupons")
    await client.aclose()
