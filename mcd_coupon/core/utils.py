"""Small text helpers shared by the front-ends."""

from __future__ import annotations

from datetime import datetime

BEARER_PREFIX = "Bearer "


def format_current_time() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def format_log_message(message: str) -> str:
    """Prefix a log line with the local wall-clock time."""
    return f"[{format_current_time()}] {message}"


def truncate_string(s: str, width: int) -> str:
    """Cut ``s`` to at most ``width`` characters, ending in ``...`` when cut."""
    if len(s) <= width:
        return s
    if width <= 3:
        return s[:width]
    return s[: width - 3] + "..."


def normalize_token(raw: str) -> str:
    """Return the token as an ``Authorization`` header value.

    The remote expects the scheme prefix, and users usually paste the bare token.
    """
    token = raw.strip()
    if token.startswith(BEARER_PREFIX):
        return token
    return f"{BEARER_PREFIX}{token}"
