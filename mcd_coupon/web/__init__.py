"""HTML front-end: a local single-page UI over the Remote Tool Client."""

from .app import create_app, find_free_port, run_web
from .parser import Coupon, parse_coupons_from_markdown
from .state import ApiResponse, WebAppState

__all__ = [
    "ApiResponse",
    "Coupon",
    "WebAppState",
    "create_app",
    "find_free_port",
    "parse_coupons_from_markdown",
    "run_web",
]
