"""mcd-coupon CLI entrypoint."""

from __future__ import annotations

from enum import Enum
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from mcd_coupon import __version__
from mcd_coupon.core.config import CouponConfig
from mcd_coupon.core.logging_config import setup_logging
from mcd_coupon.server.main import run_relay
from mcd_coupon.tui.app import run_tui
from mcd_coupon.web.app import run_web

console = Console()


class Mode(str, Enum):
    TUI = "tui"
    HTML = "html"
    MCP_SERVER = "mcpserver"


_MODE_ALIASES = {
    "tui": Mode.TUI,
    "1": Mode.TUI,
    "html": Mode.HTML,
    "web": Mode.HTML,
    "2": Mode.HTML,
    "mcpserver": Mode.MCP_SERVER,
    "mcp-server": Mode.MCP_SERVER,
    "3": Mode.MCP_SERVER,
}

# The interactive menu lists the web UI first, so its numbering differs from
# the positional aliases above.
_MENU_CHOICES = {
    "": Mode.HTML,
    "1": Mode.HTML,
    "html": Mode.HTML,
    "web": Mode.HTML,
    "2": Mode.TUI,
    "tui": Mode.TUI,
    "3": Mode.MCP_SERVER,
    "mcpserver": Mode.MCP_SERVER,
    "mcp-server": Mode.MCP_SERVER,
}

_MENU_TEXT = """\
Choose a mode:

[1] Web UI (recommended)
    Opens in your browser

[2] Terminal UI (TUI)
    Runs inside this terminal

[3] MCP server
    Serves the coupon tools over JSON-RPC"""

_STARTING = {
    Mode.HTML: "Starting web UI...",
    Mode.TUI: "Starting terminal UI...",
    Mode.MCP_SERVER: "Starting MCP server...",
}


def resolve_mode(value: str) -> Optional[Mode]:
    """Mode named by a positional argument, or ``None`` when it is unknown."""
    return _MODE_ALIASES.get(value.strip().lower())


def choose_mode_interactively() -> Mode:
    console.print(Panel(_MENU_TEXT, title="McDonald's coupon tool", expand=False))
    choice = click.prompt("Enter an option [1/2/3]", default="1", show_default=True)
    mode = _MENU_CHOICES.get(choice.strip().lower())
    if mode is None:
        click.echo("Invalid option, starting web UI...")
        return Mode.HTML
    click.echo(_STARTING[mode])
    return mode


def run_mcp_server_mode() -> None:
    config = CouponConfig.load()
    if not config.has_valid_token():
        click.echo("Error: no valid MCP token found")
        click.echo("Set a token in the config file first, or obtain one through another mode")
        click.echo(f"Config file location: {CouponConfig.config_path()}")
        return
    setup_logging()
    run_relay(config)


def run_mode(mode: Mode) -> None:
    if mode is Mode.TUI:
        setup_logging(enable_console=False)
        run_tui()
    elif mode is Mode.HTML:
        setup_logging()
        run_web()
    else:
        run_mcp_server_mode()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="mcd-coupon")
@click.argument("mode", required=False)
@click.option("--tui", "flag_tui", is_flag=True, help="Run the terminal UI.")
@click.option("--html", "--web", "flag_html", is_flag=True, help="Run the web UI.")
@click.option("--mcpserver", "flag_mcpserver", is_flag=True, help="Run the MCP server.")
@click.pass_context
def main(
    ctx: click.Context,
    mode: Optional[str],
    flag_tui: bool,
    flag_html: bool,
    flag_mcpserver: bool,
) -> None:
    """McDonald's coupon tool.

    \b
    Usage:
      mcd-coupon             choose a mode interactively
      mcd-coupon tui         terminal UI
      mcd-coupon html        web UI in the browser
      mcd-coupon mcpserver   MCP server
      mcd-coupon --help      show this help
    """
    selected = {
        m
        for m, flag in ((Mode.TUI, flag_tui), (Mode.HTML, flag_html), (Mode.MCP_SERVER, flag_mcpserver))
        if flag
    }

    if mode is not None:
        if mode.strip().lower() == "help":
            click.echo(ctx.get_help())
            return
        resolved = resolve_mode(mode)
        if resolved is None:
            click.echo(f"Unknown argument: {mode}")
            click.echo(ctx.get_help())
            return
        selected.add(resolved)

    if len(selected) > 1:
        raise click.UsageError("Choose only one mode")

    run_mode(selected.pop() if selected else choose_mode_interactively())


if __name__ == "__main__":
    main()
