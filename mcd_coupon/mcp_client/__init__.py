from .client import CouponMcpClient, client_from_config
from .errors import (
    McpClientError,
    McpHttpStatusError,
    McpProtocolError,
    McpResponseShapeError,
    McpToolError,
    McpTransportError,
)
from .models import CouponTool, ToolCallResult, ToolContent

__all__ = [
    "CouponMcpClient",
    "CouponTool",
    "McpClientError",
    "McpHttpStatusError",
    "McpProtocolError",
    "McpResponseShapeError",
    "McpToolError",
    "McpTransportError",
    "ToolCallResult",
    "ToolContent",
    "client_from_config",
]
