"""Static metadata served by the relay's introspection methods.

Holds the ``initialize`` payload, the ``tools/list`` tool descriptors, the
``system.listMethods`` listing and the ``system.describeMethod`` catalogue.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcd_coupon import __version__
from mcd_coupon.mcp_client.models import CouponTool

from .schemas import MethodDescription

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "mcd-coupon"

TOOL_CALL_PREFIX = "tools/call:"

PROTOCOL_METHODS: List[str] = [
    "initialize",
    "tools/list",
    "tools/call",
    "system.listMethods",
    "system.describeMethod",
]

TOOL_DESCRIPTIONS: Dict[CouponTool, str] = {
    CouponTool.AVAILABLE_COUPONS: "Get all available McDonald's coupons",
    CouponTool.AUTO_BIND_COUPONS: "Claim all available McDonald's coupons in one go",
    CouponTool.MY_COUPONS: "List the McDonald's coupons already claimed",
    CouponTool.NOW_TIME_INFO: "Get current time information",
}

_TOOL_TAGS: Dict[CouponTool, List[str]] = {
    CouponTool.AVAILABLE_COUPONS: ["coupons", "available"],
    CouponTool.AUTO_BIND_COUPONS: ["coupons", "claim"],
    CouponTool.MY_COUPONS: ["coupons", "my"],
    CouponTool.NOW_TIME_INFO: ["time"],
}


def _empty_object_schema() -> Dict[str, Any]:
    return {"type": "object", "properties": {}, "required": []}


def initialize_result() -> Dict[str, Any]:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {}},
        "serverInfo": {"name": SERVER_NAME, "version": __version__},
    }


def tool_list() -> List[Dict[str, Any]]:
    """Descriptors for ``tools/list``; every tool takes no arguments."""
    return [
        {
            "name": tool.value,
            "description": TOOL_DESCRIPTIONS[tool],
            "inputSchema": _empty_object_schema(),
        }
        for tool in CouponTool
    ]


def method_list() -> List[str]:
    return PROTOCOL_METHODS + [f"{TOOL_CALL_PREFIX}{name}" for name in CouponTool.names()]


_PROTOCOL_DESCRIPTIONS: Dict[str, MethodDescription] = {
    "initialize": MethodDescription(
        name="initialize",
        description="Initialize the MCP connection",
        parameters={
            "type": "object",
            "properties": {
                "protocolVersion": {"type": "string", "description": "Protocol version"},
                "capabilities": {"type": "object", "description": "Client capabilities"},
                "clientInfo": {"type": "object", "description": "Client information"},
            },
        },
        returns={
            "type": "object",
            "properties": {
                "protocolVersion": {"type": "string"},
                "capabilities": {"type": "object"},
                "serverInfo": {"type": "object"},
            },
        },
        tags=["system", "initialization"],
    ),
    "tools/list": MethodDescription(
        name="tools/list",
        description="List all available MCP tools",
        parameters=_empty_object_schema(),
        returns={
            "type": "object",
            "properties": {
                "tools": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "description": {"type": "string"},
                            "inputSchema": {"type": "object"},
                        },
                    },
                }
            },
        },
        tags=["tools", "introspection"],
    ),
    "tools/call": MethodDescription(
        name="tools/call",
        description="Call the named MCP tool",
        tags=["system", "tools"],
    ),
    "system.listMethods": MethodDescription(
        name="system.listMethods",
        description="List all available MCP methods",
        tags=["system", "introspection"],
    ),
    "system.describeMethod": MethodDescription(
        name="system.describeMethod",
        description="Describe the named MCP method",
        tags=["system", "introspection"],
    ),
}

_TOOL_METHOD_DESCRIPTIONS: Dict[str, MethodDescription] = {
    tool.value: MethodDescription(
        name=tool.value,
        description=TOOL_DESCRIPTIONS[tool],
        tags=_TOOL_TAGS[tool],
    )
    for tool in CouponTool
}


def describe(name: str) -> Optional[MethodDescription]:
    """Look up a method description.

    Tools match either bare (``my-coupons``) or prefixed
    (``tools/call:my-coupons``). Returns ``None`` for unknown names.
    """
    if name in _PROTOCOL_DESCRIPTIONS:
        return _PROTOCOL_DESCRIPTIONS[name]
    if name.startswith(TOOL_CALL_PREFIX):
        name = name[len(TOOL_CALL_PREFIX) :]
    return _TOOL_METHOD_DESCRIPTIONS.get(name)
