"""mcd-coupon.

A personal-use client for claiming McDonald's promotional coupons through the
vendor's remote MCP service.

High-level architecture
-----------------------

- ``mcd_coupon.mcp_client``: the Remote Tool Client. Wraps outbound JSON-RPC
  ``tools/call`` requests to the single remote MCP endpoint and exposes the four
  coupon tools plus a token validation probe.
- ``mcd_coupon.server``: the JSON-RPC relay. A local HTTP endpoint that speaks
  JSON-RPC 2.0 and the MCP "tools" convention, proxying tool calls to one shared
  Remote Tool Client.
- ``mcd_coupon.web`` and ``mcd_coupon.tui``: the HTML and terminal front-ends.
- ``mcd_coupon.core``: logging, settings, the persisted config file and small
  text helpers shared by every front-end.

Typical workflow
----------------

1. Load the persisted token (``CouponConfig.load()``) or ask the user for one.
2. Build a ``CouponMcpClient`` with it and validate it.
3. Either call the client directly (TUI/HTML) or serve it through the relay
   (``mcd-coupon mcpserver``).
"""

__version__ = "0.1.0"
