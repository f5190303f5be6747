from mcd_coupon.mcp_client.models import CouponTool, ToolCallParams, ToolCallResult, ToolContent


def test_coupon_tool_names_closed_set() -> None:
    assert CouponTool.names() == ["available-coupons", "auto-bind-coupons", "my-coupons", "now-time-info"]


def test_tool_call_params_without_arguments_dump() -> None:
    p = ToolCallParams(name="my-coupons")
    assert p.model_dump(exclude_none=True) == {"name": "my-coupons"}


def test_tool_call_result_success_wire_shape() -> None:
    r = ToolCallResult.success("hello")
    assert r.to_wire() == {"content": [{"type": "text", "text": "hello"}], "isError": False}


def test_tool_call_result_failure_wire_shape() -> None:
    r = ToolCallResult.failure("boom")
    assert r.to_wire() == {"content": [{"type": "text", "text": "boom"}], "isError": True}


def test_tool_call_result_round_trip() -> None:
    original = ToolCallResult(
        content=[ToolContent.from_text("a"), ToolContent(type="image", data={"mime": "image/png"})],
        is_error=True,
    )
    restored = ToolCallResult.model_validate(original.to_wire())
    assert restored == original


def test_tool_call_result_accepts_wire_alias_and_defaults_is_error() -> None:
    r = ToolCallResult.model_validate({"content": [{"type": "text", "text": "x"}]})
    assert r.is_error is False
    r = ToolCallResult.model_validate({"content": [], "isError": True})
    assert r.is_error is True


def test_joined_text_for_errors_counts_any_item_with_text() -> None:
    r = ToolCallResult(content=[ToolContent(type="text", text="a"), ToolContent(type="note", text="b")])
    assert r.joined_text() == "a"
    assert r.joined_text(text_items_only=False) == "a\nb"
