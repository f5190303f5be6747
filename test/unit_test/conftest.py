from __future__ import annotations

from typing import List, Optional

import pytest


class StubFrontendClient:
    """Duck-typed ``CouponMcpClient`` for the web and terminal front-ends."""

    def __init__(self, token: str) -> None:
        self.token = token
        self.valid = True
        self.validate_error: Optional[Exception] = None
        self.my_coupons = ""
        self.claim_summary = ""
        self.error: Optional[Exception] = None
        self.calls: List[str] = []
        self.closed = False

    async def validate_token(self) -> bool:
        self.calls.append("validate_token")
        if self.validate_error is not None:
            raise self.validate_error
        return self.valid

    async def get_my_coupons(self) -> str:
        self.calls.append("my-coupons")
        if self.error is not None:
            raise self.error
        return self.my_coupons

    async def auto_bind_coupons(self) -> str:
        self.calls.append("auto-bind-coupons")
        if self.error is not None:
            raise self.error
        return self.claim_summary

    async def aclose(self) -> None:
        self.closed = True


class StubClientFactory:
    """Hands out ``StubFrontendClient`` objects configured from ``defaults``."""

    def __init__(self) -> None:
        self.created: List[StubFrontendClient] = []
        self.defaults: dict = {}

    def __call__(self, token: str) -> StubFrontendClient:
        client = StubFrontendClient(token)
        for key, value in self.defaults.items():
            setattr(client, key, value)
        self.created.append(client)
        return client

    @property
    def last(self) -> StubFrontendClient:
        return self.created[-1]


@pytest.fixture
def client_factory() -> StubClientFactory:
    return StubClientFactory()
