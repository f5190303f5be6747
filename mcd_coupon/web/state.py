"""Process-wide state of the HTML front-end."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Deque, List, Optional

from pydantic import BaseModel

from mcd_coupon.core.config import ConfigSaveError, CouponConfig
from mcd_coupon.core.utils import format_log_message
from mcd_coupon.mcp_client.client import CouponMcpClient, client_from_config

from .parser import Coupon

logger = logging.getLogger(__name__)

MAX_LOG_LINES = 100

ClientFactory = Callable[[str], CouponMcpClient]


def default_client_factory(config: CouponConfig) -> ClientFactory:
    def factory(token: str) -> CouponMcpClient:
        return client_from_config(config, token)

    return factory


class ApiResponse(BaseModel):
    """Body of every ``/api/*`` response."""

    success: bool
    message: str
    coupons: Optional[List[Coupon]] = None


class WebAppState:
    """Token, client, cached coupons and the log ring buffer.

    All mutation happens while holding ``lock``; handlers keep it for the whole
    request, remote call included.
    """

    def __init__(
        self,
        config: CouponConfig,
        *,
        client_factory: Optional[ClientFactory] = None,
        save_config: Optional[Callable[[CouponConfig], object]] = None,
    ) -> None:
        self.config = config
        self.client: Optional[CouponMcpClient] = None
        self.coupons: List[Coupon] = []
        self.logs: Deque[str] = deque(maxlen=MAX_LOG_LINES)
        self.lock = asyncio.Lock()
        self._client_factory = client_factory or default_client_factory(config)
        self._save_config = save_config or (lambda cfg: cfg.save())
        self.add_log("Application started...")

    @property
    def has_token(self) -> bool:
        return self.client is not None

    def add_log(self, message: str) -> None:
        logger.info("[LOG] %s", message)
        self.logs.append(format_log_message(message))

    def new_client(self, token: str) -> CouponMcpClient:
        return self._client_factory(token)

    async def install_client(self, client: Optional[CouponMcpClient]) -> None:
        """Swap the active client, closing the previous one."""
        previous, self.client = self.client, client
        if previous is not None and previous is not client:
            await previous.aclose()

    def persist(self) -> bool:
        """Save the config; a failure is logged, never raised."""
        try:
            self._save_config(self.config)
        except ConfigSaveError as e:
            logger.warning("Could not save config: %s", e)
            self.add_log(f"Failed to save config: {e}")
            return False
        return True

    async def init_from_config(self) -> None:
        if not self.config.has_valid_token():
            return
        await self.install_client(self.new_client(self.config.token))
        self.add_log("Loaded saved token")
