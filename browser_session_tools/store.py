"""
Session state store: replays SNSS commands into tabs, windows and tab groups.

Entities live in per-kind arenas (a list plus an id -> slot mapping). Any
command naming an id creates that entity on first sight; closing a tab or
window only sets its ``deleted`` flag, so later commands for the same id keep
hitting the same object.

Each recognized command decodes all of its fields before touching the store.
A short read abandons that one command (CommandOutcome.ABANDONED) and leaves
the store unchanged; the stream carries on with the next record.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import logging
from collections import Counter
from enum import Enum, IntEnum
from typing import Callable, Dict, Generic, Hashable, List, Optional, TypeVar

from .cursor import ByteCursor
from .errors import UnexpectedEndOfData
from .models import HistoryItem, Tab, TabGroup, Window

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
E = TypeVar("E")


class CommandType(IntEnum):
    """Session command ids handled by the store (components/sessions session_service_commands)."""

    SET_TAB_WINDOW = 0
    SET_TAB_INDEX_IN_WINDOW = 2
    UPDATE_TAB_NAVIGATION = 6
    SET_SELECTED_NAVIGATION_INDEX = 7
    SET_SELECTED_TAB_IN_INDEX = 8
    TAB_CLOSED = 16
    WINDOW_CLOSED = 17
    SET_ACTIVE_WINDOW = 20
    SET_TAB_GROUP = 25
    SET_TAB_GROUP_METADATA2 = 27


class CommandOutcome(str, Enum):
    """What process_command did with a record."""

    APPLIED = "applied"
    IGNORED = "ignored"
    ABANDONED = "abandoned"


class _Arena(Generic[K, E]):
    """Insertion-ordered entity storage with explicit creation."""

    def __init__(self, kind: str, factory: Callable[[K], E]):
        self._kind = kind
        self._factory = factory
        self._items: List[E] = []
        self._slots: Dict[K, int] = {}

    def get_or_create(self, key: K) -> E:
        slot = self._slots.get(key)
        if slot is None:
            slot = len(self._items)
            self._items.append(self._factory(key))
            self._slots[key] = slot
            logger.debug("created %s %s", self._kind, key)
        return self._items[slot]

    def find(self, key: K) -> Optional[E]:
        slot = self._slots.get(key)
        return None if slot is None else self._items[slot]

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def __len__(self) -> int:
        return len(self._items)

    def values(self) -> List[E]:
        return list(self._items)


class SessionStateStore:
    """Entity model built by replaying session commands."""

    def __init__(self):
        """Initialize empty arenas."""
        self._tabs: _Arena[int, Tab] = _Arena("tab", lambda tab_id: Tab(id=tab_id))
        self._windows: _Arena[int, Window] = _Arena("window", lambda window_id: Window(id=window_id))
        self._groups: _Arena[tuple, TabGroup] = _Arena("tab group", lambda key: TabGroup(*key))
        self.active_window_id: Optional[int] = None
        self.skipped_commands = 0
        self.unknown_commands: Counter = Counter()
        self._handlers: Dict[int, Callable[[ByteCursor], Callable[[], None]]] = {
            CommandType.SET_TAB_WINDOW: self._decode_set_tab_window,
            CommandType.SET_TAB_INDEX_IN_WINDOW: self._decode_set_tab_index_in_window,
            CommandType.UPDATE_TAB_NAVIGATION: self._decode_update_tab_navigation,
            CommandType.SET_SELECTED_NAVIGATION_INDEX: self._decode_set_selected_navigation_index,
            CommandType.SET_SELECTED_TAB_IN_INDEX: self._decode_set_selected_tab_in_index,
            CommandType.TAB_CLOSED: self._decode_tab_closed,
            CommandType.WINDOW_CLOSED: self._decode_window_closed,
            CommandType.SET_ACTIVE_WINDOW: self._decode_set_active_window,
            CommandType.SET_TAB_GROUP: self._decode_set_tab_group,
            CommandType.SET_TAB_GROUP_METADATA2: self._decode_set_tab_group_metadata,
        }

    # ── Entity access ────────────────────────────────────────────────────────

    def tab(self, tab_id: int) -> Tab:
        """Return the tab with this id, creating it if unseen."""
        return self._tabs.get_or_create(tab_id)

    def window(self, window_id: int) -> Window:
        """Return the window with this id, creating it if unseen."""
        return self._windows.get_or_create(window_id)

    def group(self, high: int, low: int) -> TabGroup:
        """Return the canonical group for (high, low), creating it if unseen."""
        return self._groups.get_or_create((high, low))

    def find_tab(self, tab_id: int) -> Optional[Tab]:
        return self._tabs.find(tab_id)

    def find_window(self, window_id: int) -> Optional[Window]:
        return self._windows.find(window_id)

    def has_tab(self, tab_id: int) -> bool:
        return tab_id in self._tabs

    def has_window(self, window_id: int) -> bool:
        return window_id in self._windows

    @property
    def tabs(self) -> List[Tab]:
        """All tabs in creation order."""
        return self._tabs.values()

    @property
    def windows(self) -> List[Window]:
        """All windows in creation order."""
        return self._windows.values()

    @property
    def groups(self) -> List[TabGroup]:
        return self._groups.values()

    @property
    def active_window(self) -> Optional[Window]:
        if self.active_window_id is None:
            return None
        return self._windows.find(self.active_window_id)

    # ── Command processing ───────────────────────────────────────────────────

    def process_command(self, command_type: int, payload: bytes) -> CommandOutcome:
        """Apply one command to the store.

        Unknown command types are counted and ignored. A recognized command
        whose payload is too short is abandoned without side effects.
        """
        decoder = self._handlers.get(command_type)
        if decoder is None:
            self.unknown_commands[command_type] += 1
            return CommandOutcome.IGNORED

        try:
            apply = decoder(ByteCursor(payload))
        except UnexpectedEndOfData as exc:
            self.skipped_commands += 1
            logger.warning(
                "abandoned %s command (%d payload bytes): %s",
                CommandType(command_type).name, len(payload), exc,
            )
            return CommandOutcome.ABANDONED

        apply()
        return CommandOutcome.APPLIED

    # Each _decode_* reads every field, then returns a closure that mutates the store.

    def _decode_set_tab_window(self, data: ByteCursor):
        window_id = data.read_uint32()
        tab_id = data.read_uint32()

        def apply():
            self.tab(tab_id).window_id = window_id

        return apply

    def _decode_set_tab_index_in_window(self, data: ByteCursor):
        tab_id = data.read_uint32()
        index = data.read_uint32()

        def apply():
            self.tab(tab_id).index_in_window = index

        return apply

    def _decode_update_tab_navigation(self, data: ByteCursor):
        data.read_uint32()  # pickle payload size
        tab_id = data.read_uint32()
        index = data.read_uint32()
        url = data.read_string()
        title = data.read_string16()

        def apply():
            self.tab(tab_id).history[index] = HistoryItem(index=index, url=url, title=title)

        return apply

    def _decode_set_selected_navigation_index(self, data: ByteCursor):
        tab_id = data.read_uint32()
        index = data.read_uint32()

        def apply():
            self.tab(tab_id).current_navigation_index = index

        return apply

    def _decode_set_selected_tab_in_index(self, data: ByteCursor):
        window_id = data.read_uint32()
        index = data.read_uint32()

        def apply():
            self.window(window_id).active_tab_index = index

        return apply

    def _decode_tab_closed(self, data: ByteCursor):
        tab_id = data.read_uint32()

        def apply():
            self.tab(tab_id).deleted = True

        return apply

    def _decode_window_closed(self, data: ByteCursor):
        window_id = data.read_uint32()

        def apply():
            self.window(window_id).deleted = True

        return apply

    def _decode_set_active_window(self, data: ByteCursor):
        window_id = data.read_uint32()

        def apply():
            self.active_window_id = self.window(window_id).id

        return apply

    def _decode_set_tab_group(self, data: ByteCursor):
        tab_id = data.read_uint32()
        data.read_uint32()  # struct padding
        high = data.read_uint64()
        low = data.read_uint64()

        def apply():
            self.tab(tab_id).group = self.group(high, low)

        return apply

    def _decode_set_tab_group_metadata(self, data: ByteCursor):
        data.read_uint32()  # pickle payload size
        high = data.read_uint64()
        low = data.read_uint64()
        name = data.read_string16()

        def apply():
            self.group(high, low).name = name

        return apply
