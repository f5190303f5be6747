"""Open the HTML front-end in a private browser window."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import webbrowser
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

_MAC_BROWSERS: Sequence[Tuple[str, str]] = (
    ("Google Chrome", "--incognito"),
    ("Google Chrome Canary", "--incognito"),
    ("Chromium", "--incognito"),
    ("Firefox", "--private-window"),
)

_WINDOWS_BROWSERS: Sequence[Tuple[str, str, str]] = (
    (r"C:\Program Files\Google\Chrome\Application\chrome.exe", "--incognito", "Chrome"),
    (r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe", "--incognito", "Chrome"),
    (r"C:\Program Files (x86)\Microsoft\Edge\Application\msedge.exe", "--inprivate", "Edge"),
    (r"C:\Program Files\Microsoft\Edge\Application\msedge.exe", "--inprivate", "Edge"),
    (r"C:\Program Files\Mozilla Firefox\firefox.exe", "--private-window", "Firefox"),
    (r"C:\Program Files (x86)\Mozilla Firefox\firefox.exe", "--private-window", "Firefox"),
)

_LINUX_BROWSERS: Sequence[Tuple[str, str]] = (
    ("google-chrome", "--incognito"),
    ("chromium-browser", "--incognito"),
    ("firefox", "--private-window"),
)


def _spawn(argv: List[str]) -> bool:
    try:
        subprocess.Popen(argv, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        logger.debug("browser launch failed for %s: %s", argv[0], e)
        return False
    return True


def private_window_commands(url: str, platform: Optional[str] = None) -> List[Tuple[str, List[str]]]:
    """Candidate ``(label, argv)`` launches for ``platform`` (default: this one), most preferred first."""
    platform = platform or sys.platform
    if platform == "darwin":
        return [(name, ["open", url, "-a", name, "--args", flag]) for name, flag in _MAC_BROWSERS]
    if platform.startswith("win"):
        return [(label, [path, flag, url]) for path, flag, label in _WINDOWS_BROWSERS if os.path.exists(path)]
    return [(name, [name, flag, url]) for name, flag in _LINUX_BROWSERS]


def open_browser_incognito(url: str) -> str:
    """Open ``url`` privately if a known browser is available.

    Returns:
        The name of the browser that was launched, or ``"default"`` when the
        system default browser was used instead.
    """
    for label, argv in private_window_commands(url):
        if _spawn(argv):
            logger.info("Opened %s in %s (private mode)", url, label)
            return label
    webbrowser.open(url)
    logger.info("Opened %s in the default browser", url)
    return "default"
