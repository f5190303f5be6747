"""Error types raised by the Remote Tool Client.

Purpose:
- Give every failure mode of a remote call its own type so callers can tell
  "could not reach the server" apart from "the server said no".
- Expose HTTP and JSON-RPC context (status code, body, error code) for diagnosis.

Usage:
- Catch `McpClientError` for any remote failure and render `str(e)`.
- Catch `McpTransportError` to distinguish an unreachable server from an
  invalid token during `validate_token()`.
"""

from __future__ import annotations

from typing import Any, Optional


class McpClientError(Exception):
    """Base error for Remote Tool Client failures."""


class McpTransportError(McpClientError):
    """DNS, TLS, connection or timeout failure before any HTTP response arrived."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Network request failed: {message}")


class McpHttpStatusError(McpClientError):
    """The remote answered with a non-2xx HTTP status.

    Args:
        status_code: HTTP status code of the response.
        body: Raw response body.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"MCP server error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class McpProtocolError(McpClientError):
    """The remote answered with a JSON-RPC ``error`` object.

    Args:
        code: JSON-RPC error code.
        message: JSON-RPC error message.
        data: Optional error data supplied by the remote.
    """

    def __init__(self, code: int, message: str, data: Optional[Any] = None) -> None:
        super().__init__(f"MCP error {code}: {message}")
        self.code = code
        self.rpc_message = message
        self.data = data


class McpToolError(McpClientError):
    """The tool ran and reported failure through ``isError``."""

    def __init__(self, tool_name: str, text: str) -> None:
        super().__init__(f"MCP tool error: {text}")
        self.tool_name = tool_name
        self.text = text


class McpResponseShapeError(McpClientError):
    """A 2xx response whose body is not the expected JSON-RPC tool result."""

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.details = details
