from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mcd_coupon.core.config import CouponConfig
from mcd_coupon.web.app import create_app
from mcd_coupon.web.state import WebAppState


@pytest.fixture
def web_state(client_factory, recording_saver) -> WebAppState:
    return WebAppState(CouponConfig(), client_factory=client_factory, save_config=recording_saver)


@pytest_asyncio.fixture
async def client(web_state: WebAppState) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the web app through ASGITransport."""
    app = create_app(web_state)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://127.0.0.1") as ac:
        yield ac
