"""
Core session tabs engine - parse driver, session file discovery and multi-browser queries.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .assembler import assemble_entries
from .browsers import DISPLAY_NAMES, Browser, BrowserType, detect_browsers, session_dir_for
from .cursor import ByteCursor
from .errors import SessionParseError, SourceUnavailable
from .models import ParseResult, TabEntry, TabReport
from .snss import iter_records, read_header
from .store import SessionStateStore
from .types import DomainExtractor

logger = logging.getLogger(__name__)

#: File name prefixes of session snapshots inside a Sessions directory.
SESSION_FILE_PREFIXES = ("Session_", "Tabs_")


def parse_session_bytes(
    data: bytes,
    browser: str,
    domain_of: Optional[DomainExtractor] = None,
) -> ParseResult:
    """Decode one complete SNSS byte sequence into open-tab entries.

    Args:
        data: Entire session file contents.
        browser: Label copied verbatim into every entry.
        domain_of: Optional URL -> domain function.

    Returns:
        ParseResult with entries plus decoding statistics.

    Raises:
        BadMagicHeader, UnsupportedVersion, TruncatedRecord: On a malformed
            header or record framing. No partial entries are returned.
    """
    cursor = ByteCursor(data)
    version = read_header(cursor)
    store = SessionStateStore()
    record_count = 0
    for record in iter_records(cursor):
        store.process_command(record.command_type, record.payload)
        record_count += 1

    if store.skipped_commands:
        logger.warning("%s: abandoned %d malformed command(s)", browser, store.skipped_commands)
    if store.unknown_commands:
        logger.debug("%s: ignored command types %s", browser, dict(sorted(store.unknown_commands.items())))

    return ParseResult(
        entries=assemble_entries(store, browser, domain_of),
        version=version,
        record_count=record_count,
        skipped_commands=store.skipped_commands,
        unknown_commands=dict(store.unknown_commands),
    )


def parse_session_file(
    path: Path,
    browser: str,
    domain_of: Optional[DomainExtractor] = None,
) -> ParseResult:
    """Read a session file from disk and parse it.

    Raises:
        SourceUnavailable: If the file cannot be read.
        SessionParseError: On malformed content (see parse_session_bytes).
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SourceUnavailable(f"cannot read session file {path}: {exc}") from exc
    logger.info("parsing %s (%d bytes) as %s", path, len(data), browser)
    return parse_session_bytes(data, browser, domain_of)


def find_latest_session_file(session_dir: Path) -> Path:
    """Return the most recently modified Session_*/Tabs_* file in session_dir.

    Equal modification times resolve to the first name in sorted order.

    Raises:
        SourceUnavailable: If the directory cannot be listed or holds no candidate.
    """
    session_dir = Path(session_dir)
    try:
        names = sorted(p.name for p in session_dir.iterdir())
    except OSError as exc:
        raise SourceUnavailable(f"cannot read session directory {session_dir}: {exc}") from exc

    latest: Optional[Path] = None
    latest_mtime = 0.0
    for name in names:
        if not name.startswith(SESSION_FILE_PREFIXES):
            continue
        path = session_dir / name
        try:
            if not path.is_file():
                continue
            mtime = path.stat().st_mtime
        except OSError:
            continue
        if latest is None or mtime > latest_mtime:
            latest, latest_mtime = path, mtime

    if latest is None:
        raise SourceUnavailable(f"no session file found in {session_dir}")
    return latest


class SessionTabsEngine:
    """Finds browsers' session files and turns them into tab reports."""

    def __init__(
        self,
        session_dirs: Optional[Mapping[BrowserType, Path]] = None,
        platform: Optional[str] = None,
        home: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        domain_of: Optional[DomainExtractor] = None,
    ):
        """Initialize engine.

        Args:
            session_dirs: Per-browser Sessions directory overrides (e.g. from config).
            platform: sys.platform-style name used for default paths (default: current).
            home: Home directory used for default paths (default: Path.home()).
            env: Environment used for default paths on Windows (default: os.environ).
            domain_of: URL -> domain function passed to the assembler.
        """
        self.session_dirs: Dict[BrowserType, Path] = {
            BrowserType(k): Path(v).expanduser() for k, v in (session_dirs or {}).items()
        }
        self.platform = platform
        self.home = home
        self.env = env
        self.domain_of = domain_of

    def session_dir(self, browser_type: BrowserType) -> Path:
        """Override if configured, else the platform default."""
        if browser_type in self.session_dirs:
            return self.session_dirs[browser_type]
        return session_dir_for(browser_type, self.platform, self.home, self.env)

    def detect(self) -> List[Browser]:
        """Browsers whose Sessions directory exists."""
        return detect_browsers(self.session_dirs, self.platform, self.home, self.env)

    def get_browser(self, browser_type: BrowserType) -> Browser:
        """Return the browser record for a type, whether or not it is installed."""
        return Browser(browser_type, DISPLAY_NAMES[browser_type], self.session_dir(browser_type))

    def parse_file(self, path: Path, browser: str) -> ParseResult:
        """Parse an explicit session file."""
        return parse_session_file(path, browser, self.domain_of)

    def parse_browser(self, browser: Browser) -> ParseResult:
        """Parse the newest session file of a browser."""
        session_file = find_latest_session_file(browser.session_dir)
        return self.parse_file(session_file, browser.name)

    def query_tabs(self, browser: Browser) -> List[TabEntry]:
        """Open tabs of one browser.

        Raises:
            SessionParseError: If the session file is missing or malformed.
        """
        return self.parse_browser(browser).entries

    def query_all_browsers(self) -> List[TabEntry]:
        """Open tabs of every detected browser; browsers that fail are logged and skipped."""
        entries: List[TabEntry] = []
        for browser in self.detect():
            try:
                entries.extend(self.query_tabs(browser))
            except SessionParseError as exc:
                logger.warning("skipping %s: %s", browser.name, exc)
        return entries

    @staticmethod
    def build_report(entries: List[TabEntry], browser_label: str) -> TabReport:
        """Wrap entries in a report envelope."""
        return TabReport(browser=browser_label, entries=list(entries))
