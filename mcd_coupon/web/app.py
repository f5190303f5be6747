"""
HTML Front-end Application.

A single-page UI served by FastAPI on the loopback interface. The page talks to
a handful of JSON endpoints:

- ``POST /api/token``: validate and store a token
- ``GET /api/coupons``: fetch and scrape the user's coupons
- ``POST /api/claim``: claim every available coupon
- ``POST /api/reset``: forget the token
- ``GET /api/logs``: the operation log shown in the side panel
"""

import socket
from contextlib import asynccontextmanager
from importlib import resources
from typing import Optional

import click
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from mcd_coupon import __version__
from mcd_coupon.core.config import CouponConfig, settings
from mcd_coupon.core.logging_config import get_logger
from mcd_coupon.core.utils import normalize_token
from mcd_coupon.mcp_client.errors import McpClientError, McpTransportError
from mcd_coupon.server.exception_handlers import setup_exception_handlers

from .browser import open_browser_incognito
from .parser import parse_coupons_from_markdown
from .state import ApiResponse, WebAppState

logger = get_logger(__name__)

router = APIRouter()

CLAIM_SUMMARY_LINES = 5
HAS_TOKEN_PLACEHOLDER = "{{has_token}}"


class TokenPayload(BaseModel):
    token: str


class PortUnavailableError(RuntimeError):
    def __init__(self, start: int, end: int) -> None:
        super().__init__(f"No free port available ({start}-{end})")
        self.start = start
        self.end = end


def get_state(request: Request) -> WebAppState:
    return request.app.state.web


def render_index(has_token: bool) -> str:
    template = resources.files("mcd_coupon.web").joinpath("templates/index.html").read_text(encoding="utf-8")
    return template.replace(HAS_TOKEN_PLACEHOLDER, "true" if has_token else "false")


@router.get("/", response_class=HTMLResponse)
async def index(state: WebAppState = Depends(get_state)) -> HTMLResponse:
    async with state.lock:
        has_token = state.has_token
    return HTMLResponse(render_index(has_token))


@router.post("/api/token", response_model=ApiResponse, response_model_exclude_none=True)
async def submit_token(payload: TokenPayload, state: WebAppState = Depends(get_state)) -> ApiResponse:
    if not payload.token.strip():
        return ApiResponse(success=False, message="Token cannot be empty")

    token = normalize_token(payload.token)
    async with state.lock:
        client = state.new_client(token)
        try:
            valid = await client.validate_token()
        except McpTransportError as e:
            await client.aclose()
            state.add_log(f"Validation failed: {e}")
            return ApiResponse(success=False, message=f"Validation failed: {e}")

        if not valid:
            await client.aclose()
            state.add_log("Token is invalid, please enter it again")
            return ApiResponse(success=False, message="Token is invalid, please enter it again")

        state.config.token = token
        if state.persist():
            state.add_log("Config saved")
        await state.install_client(client)
        state.add_log("Token validated successfully!")
        return ApiResponse(success=True, message="Token validated successfully!")


@router.get("/api/coupons", response_model=ApiResponse, response_model_exclude_none=True)
async def list_coupons(state: WebAppState = Depends(get_state)) -> ApiResponse:
    async with state.lock:
        if state.client is None:
            return ApiResponse(success=False, message="Please set a token first")

        state.add_log("Loading claimed coupons...")
        try:
            text = await state.client.get_my_coupons()
        except McpClientError as e:
            state.add_log(f"Failed to load coupons: {e}")
            return ApiResponse(success=False, message=f"Failed to load coupons: {e}")

        logger.debug("my-coupons raw payload: %s", text)
        coupons = parse_coupons_from_markdown(text)
        if not coupons:
            state.add_log("No coupon data found in the response")
            return ApiResponse(success=True, message="No coupons yet", coupons=[])

        state.coupons = coupons
        state.add_log(f"Coupons loaded! Found {len(coupons)} coupons")
        return ApiResponse(success=True, message=f"Found {len(coupons)} coupons", coupons=coupons)


@router.post("/api/claim", response_model=ApiResponse, response_model_exclude_none=True)
async def claim_all(state: WebAppState = Depends(get_state)) -> ApiResponse:
    async with state.lock:
        if state.client is None:
            return ApiResponse(success=False, message="Please set a token first")

        state.add_log("Claiming all coupons...")
        try:
            summary = await state.client.auto_bind_coupons()
        except McpClientError as e:
            state.add_log(f"Claim failed: {e}")
            return ApiResponse(success=False, message=f"Claim failed: {e}")

        state.add_log("Claimed successfully!")
        for line in summary.splitlines()[:CLAIM_SUMMARY_LINES]:
            if line.strip():
                state.add_log(line)
        # Cached coupons are stale now; the page reloads them.
        state.coupons = []
        return ApiResponse(success=True, message="Claimed successfully!")


@router.post("/api/reset", response_model=ApiResponse, response_model_exclude_none=True)
async def reset_token(state: WebAppState = Depends(get_state)) -> ApiResponse:
    async with state.lock:
        await state.install_client(None)
        state.config.clear_token()
        state.persist()
        state.coupons = []
        state.add_log("Token reset")
        state.add_log("Please enter a new MCP token")
        return ApiResponse(success=True, message="Token reset")


@router.get("/api/logs")
async def get_logs(state: WebAppState = Depends(get_state)) -> dict:
    async with state.lock:
        return {"logs": list(state.logs)}


def create_app(state: WebAppState) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await state.init_from_config()
        yield
        await state.install_client(None)

    app = FastAPI(
        title="mcd-coupon",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.web = state
    setup_exception_handlers(app)
    app.include_router(router)
    return app


def find_free_port(host: str, start: int, end: int) -> int:
    """First port in ``[start, end]`` that ``host`` can bind."""
    for port in range(start, end + 1):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, port))
            except OSError:
                continue
            return port
    raise PortUnavailableError(start, end)


def run_web(config: Optional[CouponConfig] = None, *, open_browser: bool = True) -> None:
    """Serve the HTML front-end on the first free loopback port."""
    state = WebAppState(config if config is not None else CouponConfig.load())
    app = create_app(state)

    host = settings.web_host
    port = find_free_port(host, settings.web_port_start, settings.web_port_end)
    url = f"http://{host}:{port}"
    click.echo(f"HTML mode started, open: {url}")
    if open_browser:
        open_browser_incognito(url)

    uvicorn.run(app, host=host, port=port, log_config=None)
