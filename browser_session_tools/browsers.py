"""
Chromium-family browsers and where they keep their session snapshots.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional


class BrowserType(str, Enum):
    """Browsers that write SNSS session files."""

    CHROME = "chrome"
    CHROMIUM = "chromium"
    EDGE = "edge"
    BRAVE = "brave"
    VIVALDI = "vivaldi"


DISPLAY_NAMES: Dict[BrowserType, str] = {
    BrowserType.CHROME: "Chrome",
    BrowserType.CHROMIUM: "Chromium",
    BrowserType.EDGE: "Edge",
    BrowserType.BRAVE: "Brave",
    BrowserType.VIVALDI: "Vivaldi",
}

# Profile root per browser, relative to the platform's base directory
_LINUX_ROOTS = {
    BrowserType.CHROME: ".config/google-chrome",
    BrowserType.CHROMIUM: ".config/chromium",
    BrowserType.EDGE: ".config/microsoft-edge",
    BrowserType.BRAVE: ".config/BraveSoftware/Brave-Browser",
    BrowserType.VIVALDI: ".config/vivaldi",
}
_DARWIN_ROOTS = {
    BrowserType.CHROME: "Library/Application Support/Google/Chrome",
    BrowserType.CHROMIUM: "Library/Application Support/Chromium",
    BrowserType.EDGE: "Library/Application Support/Microsoft Edge",
    BrowserType.BRAVE: "Library/Application Support/BraveSoftware/Brave-Browser",
    BrowserType.VIVALDI: "Library/Application Support/Vivaldi",
}
_WINDOWS_ROOTS = {
    BrowserType.CHROME: "Google/Chrome/User Data",
    BrowserType.CHROMIUM: "Chromium/User Data",
    BrowserType.EDGE: "Microsoft/Edge/User Data",
    BrowserType.BRAVE: "BraveSoftware/Brave-Browser/User Data",
    BrowserType.VIVALDI: "Vivaldi/User Data",
}


@dataclass(frozen=True)
class Browser:
    """A browser and the directory holding its Session_*/Tabs_* files."""

    type: BrowserType
    name: str
    session_dir: Path

    def to_dict(self) -> dict:
        return {"type": self.type.value, "name": self.name, "session_dir": str(self.session_dir)}


def parse_browser_type(value: str) -> BrowserType:
    """Parse a browser selector such as "chrome" (case-insensitive).

    Raises:
        ValueError: If value names no supported browser.
    """
    try:
        return BrowserType(value.strip().lower())
    except ValueError:
        choices = ", ".join(t.value for t in BrowserType)
        raise ValueError(f"Unknown browser {value!r} (choose from: {choices})") from None


def session_dir_for(
    browser_type: BrowserType,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    """Return the default-profile Sessions directory for a browser.

    Args:
        browser_type: Browser to resolve.
        platform: sys.platform-style name (default: current platform).
        home: Home directory (default: Path.home()).
        env: Environment mapping, consulted for LOCALAPPDATA on Windows (default: os.environ).

    Raises:
        ValueError: If the platform is not linux, darwin or win32.
    """
    platform = platform or sys.platform
    home = Path(home) if home is not None else Path.home()
    env = os.environ if env is None else env

    if platform.startswith("linux"):
        return home / _LINUX_ROOTS[browser_type] / "Default" / "Sessions"
    if platform == "darwin":
        return home / _DARWIN_ROOTS[browser_type] / "Default" / "Sessions"
    if platform in ("win32", "cygwin"):
        app_data = env.get("LOCALAPPDATA")
        base = Path(app_data) if app_data else home / "AppData" / "Local"
        return base / _WINDOWS_ROOTS[browser_type] / "Default" / "Sessions"
    raise ValueError(f"Unsupported platform: {platform}")


def detect_browsers(
    session_dirs: Optional[Mapping[BrowserType, Path]] = None,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> List[Browser]:
    """Return browsers whose session directory exists, in BrowserType order.

    Args:
        session_dirs: Per-browser directory overrides (e.g. from config).
    """
    overrides = session_dirs or {}
    found = []
    for browser_type in BrowserType:
        path = overrides.get(browser_type) or session_dir_for(browser_type, platform, home, env)
        path = Path(path).expanduser()
        if path.is_dir():
            found.append(Browser(browser_type, DISPLAY_NAMES[browser_type], path))
    return found
