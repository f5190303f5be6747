from __future__ import annotations

import asyncio
from typing import AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mcd_coupon.server.dispatcher import McpRelay, SharedClient
from mcd_coupon.server.main import create_app


class StubCouponClient:
    """Duck-typed stand-in for ``CouponMcpClient`` with canned answers per tool."""

    def __init__(self, answers: Optional[Dict[str, str]] = None, error: Optional[Exception] = None) -> None:
        self.answers = answers or {}
        self.error = error
        self.calls: List[str] = []
        self.closed = False
        self.in_flight = 0
        self.max_in_flight = 0
        self.delay = 0.0

    async def _answer(self, tool: str) -> str:
        self.calls.append(tool)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.answers.get(tool, f"{tool} ok")
        finally:
            self.in_flight -= 1

    async def get_available_coupons(self) -> str:
        return await self._answer("available-coupons")

    async def auto_bind_coupons(self) -> str:
        return await self._answer("auto-bind-coupons")

    async def get_my_coupons(self) -> str:
        return await self._answer("my-coupons")

    async def get_current_time(self) -> str:
        return await self._answer("now-time-info")

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def stub_client() -> StubCouponClient:
    return StubCouponClient()


@pytest.fixture
def relay(stub_client: StubCouponClient) -> McpRelay:
    return McpRelay(SharedClient(stub_client))  # type: ignore[arg-type]


@pytest_asyncio.fixture
async def client(relay: McpRelay) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the relay app through ASGITransport."""
    app = create_app(relay)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://localhost") as ac:
        yield ac
