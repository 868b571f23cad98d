"""
Data models for session snapshot decoding - using modern Python patterns.

Entity dataclasses are mutated while commands replay; TabEntry and TabReport
are the consumer-facing output types.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class HistoryItem:
    """One navigation entry of a tab, keyed by its index within the tab."""

    index: int
    url: str = ""
    title: str = ""


@dataclass
class TabGroup:
    """Tab group identified by a 128-bit id split into two 64-bit halves."""

    high: int
    low: int
    name: str = ""

    @property
    def key(self) -> Tuple[int, int]:
        return (self.high, self.low)


@dataclass
class Tab:
    """Tab state accumulated from session commands.

    Attributes:
        id: Session tab id
        window_id: Id of the owning window (0 until SetTabWindow arrives)
        index_in_window: Visual position within the window
        current_navigation_index: History index of the page currently shown
        deleted: Set by TabClosed; the tab stays in the store
        group: Canonical TabGroup instance, if the tab is grouped
        history: Navigation entries keyed by index (one entry per index)
    """

    id: int
    window_id: int = 0
    index_in_window: int = 0
    current_navigation_index: int = 0
    deleted: bool = False
    group: Optional[TabGroup] = None
    history: Dict[int, HistoryItem] = field(default_factory=dict)

    def sorted_history(self) -> List[HistoryItem]:
        """History entries in ascending index order."""
        return [self.history[i] for i in sorted(self.history)]

    def current_item(self) -> Optional[HistoryItem]:
        """Entry at current_navigation_index, else the greatest-index entry, else None."""
        item = self.history.get(self.current_navigation_index)
        if item is not None:
            return item
        if not self.history:
            return None
        return self.history[max(self.history)]


@dataclass
class Window:
    """Window state; tabs is filled only during assembly."""

    id: int
    active_tab_index: int = 0
    deleted: bool = False
    tabs: List[Tab] = field(default_factory=list)


@dataclass
class TabEntry:
    """One open tab as reported to callers."""

    url: str
    title: str
    domain: str
    active: bool
    group: str
    window_id: int
    browser: str

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization (group omitted when empty)."""
        d = {
            "url": self.url,
            "title": self.title,
            "domain": self.domain,
            "active": self.active,
        }
        if self.group:
            d["group"] = self.group
        d["window_id"] = self.window_id
        d["browser"] = self.browser
        return d


@dataclass
class TabReport:
    """Report envelope around a list of tab entries."""

    browser: str
    entries: List[TabEntry] = field(default_factory=list)

    @property
    def total_tabs(self) -> int:
        return len(self.entries)

    @property
    def total_windows(self) -> int:
        """Distinct windows, counted per browser since window ids restart at 1 per file."""
        return len({(e.browser, e.window_id) for e in self.entries})

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "browser": self.browser,
            "total_tabs": self.total_tabs,
            "total_windows": self.total_windows,
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass
class ParseResult:
    """Outcome of parsing one session file.

    Attributes:
        entries: Assembled open-tab records, window order then tab order
        version: SNSS header version (1 or 3)
        record_count: Number of framed records read
        skipped_commands: Recognized commands abandoned because a field failed to decode
        unknown_commands: Count of unrecognized records per command type
    """

    entries: List[TabEntry] = field(default_factory=list)
    version: int = 0
    record_count: int = 0
    skipped_commands: int = 0
    unknown_commands: Dict[int, int] = field(default_factory=dict)

    @property
    def window_count(self) -> int:
        return len({e.window_id for e in self.entries})

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "version": self.version,
            "record_count": self.record_count,
            "skipped_commands": self.skipped_commands,
            "unknown_commands": {str(k): v for k, v in sorted(self.unknown_commands.items())},
            "total_tabs": len(self.entries),
            "total_windows": self.window_count,
        }
