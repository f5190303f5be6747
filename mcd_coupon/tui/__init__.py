"""Terminal front-end rendered with rich."""

from .app import App, run_tui
from .screens import QUIT, MainScreen, TokenInputScreen

__all__ = ["App", "MainScreen", "QUIT", "TokenInputScreen", "run_tui"]
