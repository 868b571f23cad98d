"""
Browser Session Tools - decode Chromium session snapshots into open-tab lists.

A composable library with thin CLI layer for finding a Chromium-family
browser's session snapshot (SNSS) files, replaying their commands, and listing
the tabs that were open, in which window, in which order, and in which group.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0

Example usage as library:
    from browser_session_tools import parse_session_file

    result = parse_session_file(path, "Chrome")
    for tab in result.entries:
        print(tab.window_id, tab.url)
"""

try:
    from importlib.metadata import version
    __version__ = version("browser_session_tools")
except Exception:
    __version__ = "0.1.0"

__author__ = "Andrew Hundt"

from .assembler import assemble_entries, group_tabs_by_window
from .browsers import Browser, BrowserType, detect_browsers, parse_browser_type, session_dir_for
from .cursor import ByteCursor
from .domain import extract_domain
from .engine import (
    SessionTabsEngine,
    find_latest_session_file,
    parse_session_bytes,
    parse_session_file,
)
from .errors import (
    BadMagicHeader,
    SessionParseError,
    SourceUnavailable,
    TruncatedRecord,
    UnexpectedEndOfData,
    UnsupportedVersion,
)
from .filters import ChainedFilter, TabFilter
from .formatters import CsvFormatter, JsonFormatter, PlainFormatter, ResultFormatter, TableFormatter, get_formatter
from .models import HistoryItem, ParseResult, Tab, TabEntry, TabGroup, TabReport, Window
from .snss import Record, iter_records, read_header
from .store import CommandOutcome, CommandType, SessionStateStore
from .types import DomainExtractor, Formatter, TabSource

__all__ = [
    "BadMagicHeader",
    "Browser",
    "BrowserType",
    "ByteCursor",
    "ChainedFilter",
    "CommandOutcome",
    "CommandType",
    "CsvFormatter",
    "DomainExtractor",
    "Formatter",
    "HistoryItem",
    "JsonFormatter",
    "ParseResult",
    "PlainFormatter",
    "Record",
    "ResultFormatter",
    "SessionParseError",
    "SessionStateStore",
    "SessionTabsEngine",
    "SourceUnavailable",
    "Tab",
    "TabEntry",
    "TabFilter",
    "TabGroup",
    "TabReport",
    "TabSource",
    "TableFormatter",
    "TruncatedRecord",
    "UnexpectedEndOfData",
    "UnsupportedVersion",
    "Window",
    "assemble_entries",
    "detect_browsers",
    "extract_domain",
    "find_latest_session_file",
    "get_formatter",
    "group_tabs_by_window",
    "iter_records",
    "parse_browser_type",
    "parse_session_bytes",
    "parse_session_file",
    "read_header",
    "session_dir_for",
]
