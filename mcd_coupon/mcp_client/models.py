from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"

TEXT_CONTENT = "text"


class CouponTool(str, Enum):
    """The closed set of tools served by the remote coupon MCP server."""

    AVAILABLE_COUPONS = "available-coupons"
    AUTO_BIND_COUPONS = "auto-bind-coupons"
    MY_COUPONS = "my-coupons"
    NOW_TIME_INFO = "now-time-info"

    @classmethod
    def names(cls) -> List[str]:
        return [t.value for t in cls]


class JSONRPCRequest(BaseModel):
    """JSON-RPC 2.0 request model (outbound)."""

    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: Optional[Dict[str, Any]] = None
    id: Optional[int | str] = None


class JSONRPCError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None
    id: Optional[int | str] = None


class ToolCallParams(BaseModel):
    """Parameters of a ``tools/call`` request."""

    name: str
    arguments: Optional[Dict[str, Any]] = None


class ToolContent(BaseModel):
    """One item of a tool result's ``content`` list."""

    type: str
    text: Optional[str] = None
    data: Optional[Any] = None

    @classmethod
    def from_text(cls, text: str) -> "ToolContent":
        return cls(type=TEXT_CONTENT, text=text)


class ToolCallResult(BaseModel):
    """The ``result`` of a ``tools/call`` response per the MCP tools convention."""

    model_config = ConfigDict(populate_by_name=True)

    content: List[ToolContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def success(cls, text: str) -> "ToolCallResult":
        return cls(content=[ToolContent.from_text(text)], is_error=False)

    @classmethod
    def failure(cls, message: str) -> "ToolCallResult":
        return cls(content=[ToolContent.from_text(message)], is_error=True)

    def joined_text(self, *, text_items_only: bool = True) -> str:
        """Newline-join the text of the content items.

        With ``text_items_only`` only ``type == "text"`` items count; otherwise
        any item carrying text does (used for error aggregation).
        """
        parts = [
            item.text
            for item in self.content
            if item.text is not None and (not text_items_only or item.type == TEXT_CONTENT)
        ]
        return "\n".join(parts)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
