"""
JSON-RPC Envelope Schemas.

Pydantic models for the relay's inbound requests, outbound responses and the
static method descriptions returned by ``system.describeMethod``.

Request ``id`` handling follows JSON-RPC 2.0 notification semantics: a missing
or ``null`` id marks a notification. Any other id must be a non-negative 32-bit
integer, given either as a JSON number or as a numeric string.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mcd_coupon.mcp_client.models import JSONRPC_VERSION, ToolCallParams, ToolCallResult

__all__ = [
    "DescribeMethodParams",
    "McpError",
    "McpRequest",
    "McpResponse",
    "MethodDescription",
    "MethodExample",
    "ToolCallParams",
    "ToolCallResult",
]

# =====================================================================
# Error codes
# =====================================================================

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

MAX_REQUEST_ID = 2**32 - 1

_NUMERIC_ID = re.compile(r"\+?[0-9]+")


# =====================================================================
# Requests
# =====================================================================


class McpRequest(BaseModel):
    """An inbound JSON-RPC 2.0 request."""

    jsonrpc: Literal["2.0"]
    method: str
    params: Optional[Any] = None
    id: Optional[int] = Field(default=None, description="Absent or null for notifications")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        # bool is an int subclass; JSON true/false is not a valid id
        if isinstance(value, bool):
            raise ValueError("Invalid ID: must be number, string, or null")
        if isinstance(value, int):
            number = value
        elif isinstance(value, str):
            if not _NUMERIC_ID.fullmatch(value):
                raise ValueError("Invalid ID: string is not a valid number")
            number = int(value)
        else:
            raise ValueError("Invalid ID: must be number, string, or null")
        if number < 0 or number > MAX_REQUEST_ID:
            raise ValueError("Invalid ID: number out of range")
        return number

    @property
    def is_notification(self) -> bool:
        return self.id is None


class DescribeMethodParams(BaseModel):
    """Parameters of ``system.describeMethod``."""

    name: str


# =====================================================================
# Responses
# =====================================================================


class McpError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class McpResponse(BaseModel):
    """An outbound JSON-RPC 2.0 response carrying exactly one of result/error."""

    jsonrpc: str = JSONRPC_VERSION
    result: Optional[Any] = None
    error: Optional[McpError] = None
    id: Optional[int] = None

    @model_validator(mode="after")
    def _exactly_one_of_result_or_error(self) -> "McpResponse":
        if (self.result is None) == (self.error is None):
            raise ValueError("A JSON-RPC response must carry exactly one of 'result' or 'error'")
        return self

    @classmethod
    def success(cls, id: Optional[int], result: Any) -> "McpResponse":
        if isinstance(result, BaseModel):
            result = result.model_dump(by_alias=True, exclude_none=True)
        return cls(result=result, id=id)

    @classmethod
    def failure(cls, id: Optional[int], code: int, message: str, data: Optional[Any] = None) -> "McpResponse":
        return cls(error=McpError(code=code, message=message, data=data), id=id)

    @classmethod
    def tool_result(cls, id: Optional[int], text: str) -> "McpResponse":
        return cls.success(id, ToolCallResult.success(text))

    @classmethod
    def tool_error(cls, id: Optional[int], message: str) -> "McpResponse":
        """A tool-level failure: a successful envelope whose result has ``isError``."""
        return cls.success(id, ToolCallResult.failure(message))

    def to_wire(self) -> Dict[str, Any]:
        """Serialize for the wire, always emitting ``id`` (``null`` when unknown)."""
        payload: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        payload["id"] = self.id
        return payload


# =====================================================================
# Method descriptions
# =====================================================================


class MethodExample(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    returns: Dict[str, Any] = Field(default_factory=dict)


class MethodDescription(BaseModel):
    """Static metadata returned by ``system.describeMethod``."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    returns: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    examples: Optional[List[MethodExample]] = None
