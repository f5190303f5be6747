"""
Relay Application Entry Point.

This module builds the FastAPI application that serves the JSON-RPC relay,
configures middleware (CORS) and exception handlers, and runs it under uvicorn
for the ``mcpserver`` mode.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mcd_coupon import __version__
from mcd_coupon.core.config import CouponConfig, settings
from mcd_coupon.core.logging_config import get_logger
from mcd_coupon.mcp_client.client import client_from_config

from .api import rpc
from .dispatcher import McpRelay, SharedClient
from .exception_handlers import setup_exception_handlers

logger = get_logger(__name__)


def create_app(relay: McpRelay) -> FastAPI:
    """Build the relay application around an already constructed relay."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up mcd-coupon MCP relay...")
        yield
        logger.info("Shutting down mcd-coupon MCP relay...")
        await relay.shared_client.aclose()

    app = FastAPI(
        title="mcd-coupon MCP relay",
        description="JSON-RPC 2.0 relay exposing the McDonald's coupon MCP tools.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.relay = relay

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)
    app.include_router(rpc.router, tags=["rpc"])
    return app


def resolve_port(config: CouponConfig) -> int:
    return config.mcp_server_port or settings.relay_port


def run_relay(config: CouponConfig, *, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the relay until interrupted. The config must hold a token."""
    relay = McpRelay(SharedClient(client_from_config(config)))
    app = create_app(relay)
    bind_host = host or settings.relay_host
    bind_port = port or resolve_port(config)
    logger.info(f"MCP server starting on {bind_host}:{bind_port}")
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)
