"""
Terminal Front-end Application.

A line-driven terminal UI rendered with rich. Each submitted line is treated as
one key press on the current screen; remote calls run on a single long-lived
event loop so the HTTP client can be reused across key presses.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable, Deque, Optional

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mcd_coupon.core.config import ConfigSaveError, CouponConfig
from mcd_coupon.core.logging_config import get_logger
from mcd_coupon.core.utils import normalize_token, truncate_string
from mcd_coupon.mcp_client.client import CouponMcpClient, client_from_config
from mcd_coupon.mcp_client.errors import McpClientError, McpTransportError

from .screens import (
    CLAIM_ALL,
    MENU_OPTIONS,
    QUIT,
    RESET_TOKEN,
    VIEW_COUPONS,
    Key,
    MainScreen,
    Screen,
    TokenInputScreen,
    is_quit_command,
    parse_main_key,
)

logger = get_logger(__name__)

MAX_LOG_LINES = 100
VISIBLE_LOG_LINES = 10
CLAIM_SUMMARY_LINES = 5
COUPON_LINE_WIDTH = 100

SELECTED_STYLE = "bold black on green"


class App:
    """State and transitions of the terminal front-end.

    Attributes:
        screen: The current screen, or ``QUIT`` once the user has left.
        client: Remote Tool Client for the validated token, if any.
        logs: Operation log ring buffer, newest last.
        is_loading: True while a remote call is in flight.
    """

    def __init__(
        self,
        config: CouponConfig,
        *,
        client_factory: Optional[Callable[[str], CouponMcpClient]] = None,
        save_config: Optional[Callable[[CouponConfig], object]] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.config = config
        self.screen: Screen = TokenInputScreen()
        self.client: Optional[CouponMcpClient] = None
        self.logs: Deque[str] = deque(maxlen=MAX_LOG_LINES)
        self.is_loading = False
        self.console = console or Console()
        self._client_factory = client_factory or (lambda token: client_from_config(config, token))
        self._save_config = save_config or (lambda cfg: cfg.save())
        self.add_log("Application started...")

    def add_log(self, message: str) -> None:
        logger.info("[LOG] %s", message)
        self.logs.append(message)

    async def start(self) -> None:
        """Resume with the persisted token, skipping the token screen."""
        if self.config.has_valid_token():
            await self._install_client(self._client_factory(self.config.token))
            self.add_log("Loaded saved token")
            self.screen = MainScreen()

    async def aclose(self) -> None:
        await self._install_client(None)

    async def _install_client(self, client: Optional[CouponMcpClient]) -> None:
        previous, self.client = self.client, client
        if previous is not None and previous is not client:
            await previous.aclose()

    def _persist(self) -> bool:
        try:
            self._save_config(self.config)
        except ConfigSaveError as e:
            logger.warning("Could not save config: %s", e)
            self.add_log(f"Failed to save config: {e}")
            return False
        return True

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def handle_line(self, line: str) -> Screen:
        """Apply one line of input to the current screen and switch to the next one."""
        self.screen = await self._transition(self.screen, line)
        return self.screen

    async def _transition(self, screen: Screen, line: str) -> Screen:
        if isinstance(screen, TokenInputScreen):
            return await self._handle_token_line(screen, line)
        if isinstance(screen, MainScreen):
            return await self._handle_main_key(screen, line)
        return QUIT

    async def _handle_token_line(self, screen: TokenInputScreen, line: str) -> Screen:
        if is_quit_command(line):
            return QUIT

        screen.input = line.strip()
        if not screen.input:
            screen.error_message = "Token cannot be empty"
            return screen

        token = normalize_token(screen.input)
        client = self._client_factory(token)
        self.is_loading = True
        try:
            valid = await client.validate_token()
        except McpTransportError as e:
            await client.aclose()
            screen.error_message = f"Validation failed: {e}"
            return screen
        finally:
            self.is_loading = False

        if not valid:
            await client.aclose()
            screen.error_message = "Token is invalid, please enter it again"
            return screen

        self.config.token = token
        await self._install_client(client)
        self.add_log("Token validated successfully!")
        if self._persist():
            self.add_log("Config saved")
        return MainScreen()

    async def _handle_main_key(self, screen: MainScreen, line: str) -> Screen:
        key = parse_main_key(line)
        if key is Key.QUIT:
            return QUIT
        if key is Key.UP:
            screen.move_up()
        elif key is Key.DOWN:
            screen.move_down()
        elif key is Key.ENTER:
            return await self._execute(screen)
        elif key is Key.TOGGLE_COUPONS:
            screen.show_coupons = not screen.show_coupons
            if screen.show_coupons:
                await self._load_coupons(screen)
        elif isinstance(key, int):
            screen.selected_option = key
            return await self._execute(screen)
        return screen

    async def _execute(self, screen: MainScreen) -> Screen:
        if screen.selected_option == CLAIM_ALL:
            await self._claim_all()
        elif screen.selected_option == VIEW_COUPONS:
            screen.show_coupons = True
            await self._load_coupons(screen)
        elif screen.selected_option == RESET_TOKEN:
            return await self._reset_token()
        return screen

    async def _claim_all(self) -> None:
        if self.client is None:
            return
        self.add_log("Claiming all coupons...")
        self.is_loading = True
        try:
            summary = await self.client.auto_bind_coupons()
        except McpClientError as e:
            self.add_log(f"Claim failed: {e}")
            return
        finally:
            self.is_loading = False

        self.add_log("Claimed successfully!")
        for line in summary.splitlines()[:CLAIM_SUMMARY_LINES]:
            if line.strip():
                self.add_log(line)

    async def _load_coupons(self, screen: MainScreen) -> None:
        if self.client is None:
            return
        self.add_log("Loading claimed coupons...")
        self.is_loading = True
        try:
            text = await self.client.get_my_coupons()
        except McpClientError as e:
            self.add_log(f"Failed to load coupons: {e}")
            screen.coupons.append(f"Failed to load coupons: {e}")
            return
        finally:
            self.is_loading = False

        lines = text.splitlines()
        screen.coupons = [line for line in lines if line.strip()]
        item_count = sum(1 for line in lines if line.startswith(("- ", "* ")))
        self.add_log(f"Coupon list loaded (about {item_count} items)")

    async def _reset_token(self) -> TokenInputScreen:
        await self._install_client(None)
        self.config.clear_token()
        self._persist()
        self.add_log("Token reset")
        self.add_log("Please enter a new MCP token")
        return TokenInputScreen()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> RenderableType:
        if isinstance(self.screen, MainScreen):
            return self._render_main(self.screen)
        if isinstance(self.screen, TokenInputScreen):
            return self._render_token_input(self.screen)
        return Text("Bye")

    def _render_logs(self) -> Panel:
        recent = list(self.logs)[-VISIBLE_LOG_LINES:]
        return Panel(Text("\n".join(reversed(recent))), title="Operation log")

    def _render_token_input(self, screen: TokenInputScreen) -> RenderableType:
        parts: list[RenderableType] = [
            Panel(Text("Welcome to the McDonald's coupon tool", justify="center")),
            Text("Enter your MCP token:", justify="center"),
            Panel(Text(screen.input), title="MCP Token", border_style="cyan"),
        ]
        if screen.error_message:
            parts.append(Text(screen.error_message, style="red", justify="center"))
        parts.append(Text("Press Enter to confirm, :q to quit", style="yellow", justify="center"))
        parts.append(self._render_logs())
        return Group(*parts)

    def _render_main(self, screen: MainScreen) -> RenderableType:
        menu = Text()
        for i, option in enumerate(MENU_OPTIONS):
            menu.append(option, style=SELECTED_STYLE if i == screen.selected_option else "")
            menu.append("\n")

        if screen.show_coupons:
            coupons = Text("\n".join(truncate_string(line, COUPON_LINE_WIDTH) for line in screen.coupons))
        else:
            coupons = Text("Press 'c' to view claimed coupons", justify="center")

        content = Table.grid(expand=True)
        content.add_column(ratio=1)
        content.add_column(ratio=1)
        content.add_row(self._render_logs(), Panel(coupons, title="My coupons"))

        status = "Loading..." if self.is_loading else "q quit | k/j or up/down select | Enter execute | c coupons"
        return Group(
            Panel(Text("McDonald's coupon tool", justify="center")),
            Panel(menu, title="Menu"),
            content,
            Panel(Text(status)),
        )

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def _read_line(self) -> str:
        prompt = "token> " if isinstance(self.screen, TokenInputScreen) else "> "
        return self.console.input(prompt)

    def run(self) -> None:
        """Render, read a line, transition; until the user quits or closes stdin."""
        with asyncio.Runner() as runner:
            runner.run(self.start())
            try:
                while self.screen is not QUIT:
                    self.console.clear()
                    self.console.print(self.render())
                    try:
                        line = self._read_line()
                    except (EOFError, KeyboardInterrupt):
                        break
                    with self.console.status("Working..."):
                        runner.run(self.handle_line(line))
            finally:
                runner.run(self.aclose())


def run_tui(config: Optional[CouponConfig] = None) -> None:
    App(config if config is not None else CouponConfig.load()).run()
