"""Screen states of the terminal front-end.

Screens are plain data; the :class:`~mcd_coupon.tui.app.App` owns every
transition. Input arrives one line at a time, so a "key" is a whole line:
``k`` or ``up`` moves the cursor, an empty line is Enter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

MENU_OPTIONS = (
    "[1] Claim all coupons",
    "[2] View my coupons",
    "[3] Reset token",
)

CLAIM_ALL = 0
VIEW_COUPONS = 1
RESET_TOKEN = 2

QUIT_COMMANDS = frozenset({":q", "esc"})


class Key(str, Enum):
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    TOGGLE_COUPONS = "toggle_coupons"
    QUIT = "quit"


_KEY_ALIASES = {
    "up": Key.UP,
    "k": Key.UP,
    "down": Key.DOWN,
    "j": Key.DOWN,
    "": Key.ENTER,
    "c": Key.TOGGLE_COUPONS,
    "q": Key.QUIT,
}


@dataclass
class TokenInputScreen:
    input: str = ""
    error_message: Optional[str] = None


@dataclass
class MainScreen:
    selected_option: int = 0
    show_coupons: bool = False
    coupons: List[str] = field(default_factory=list)

    def move_up(self) -> None:
        if self.selected_option > 0:
            self.selected_option -= 1

    def move_down(self) -> None:
        if self.selected_option < len(MENU_OPTIONS) - 1:
            self.selected_option += 1


class _Quit:
    def __repr__(self) -> str:
        return "QUIT"


QUIT = _Quit()

Screen = Union[TokenInputScreen, MainScreen, _Quit]


def parse_main_key(line: str) -> Union[Key, int, None]:
    """Map an input line on the main screen to a :class:`Key` or a menu index.

    ``1``-``3`` select an option directly; unknown input maps to ``None``.
    """
    text = line.strip().lower()
    if text in _KEY_ALIASES:
        return _KEY_ALIASES[text]
    if text.isdigit() and 1 <= int(text) <= len(MENU_OPTIONS):
        return int(text) - 1
    return None


def is_quit_command(line: str) -> bool:
    return line.strip().lower() in QUIT_COMMANDS
