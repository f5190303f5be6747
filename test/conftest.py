from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import httpx
import pytest

from mcd_coupon.core.config import CouponConfig


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "http://test",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest.fixture(autouse=True)
def _isolated_config_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep config lookups away from the real working and user config directories."""
    user_dir = tmp_path / "user-config"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("mcd_coupon.core.config.user_config_path", lambda: user_dir / "config.json")
    return user_dir


class RecordingSaver:
    """Stands in for ``CouponConfig.save`` and remembers what was saved."""

    def __init__(self, error: Exception | None = None) -> None:
        self.saved: List[str] = []
        self.error = error

    def __call__(self, config: CouponConfig) -> None:
        if self.error is not None:
            raise self.error
        self.saved.append(config.token)


@pytest.fixture
def recording_saver() -> RecordingSaver:
    return RecordingSaver()
