"""
Entry assembler: flattens a finished SessionStateStore into open-tab records.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from typing import List, Optional

from .domain import extract_domain
from .models import Tab, TabEntry, Window
from .store import SessionStateStore
from .types import DomainExtractor


def group_tabs_by_window(store: SessionStateStore) -> List[Window]:
    """Attach every tab to its window and return all windows sorted by id.

    Windows referenced only through SetTabWindow are created here. Tabs within
    a window are ordered by index_in_window; ties keep tab creation order.
    """
    for window in store.windows:
        window.tabs = []
    for tab in store.tabs:
        store.window(tab.window_id).tabs.append(tab)
    windows = sorted(store.windows, key=lambda w: w.id)
    for window in windows:
        window.tabs.sort(key=lambda t: t.index_in_window)
    return windows


def _group_name(tab: Tab) -> str:
    if tab.group is not None and tab.group.name:
        return tab.group.name
    return ""


def assemble_entries(
    store: SessionStateStore,
    browser: str,
    domain_of: Optional[DomainExtractor] = None,
) -> List[TabEntry]:
    """Build the ordered tab-entry list for one parsed session.

    Non-deleted windows are numbered 1, 2, ... in ascending original id.
    Within a window, deleted tabs and tabs with no resolvable URL are skipped
    and do not advance the position used to match the window's active tab
    index.

    Args:
        store: Store after the whole record stream has been replayed.
        browser: Label copied verbatim into every entry.
        domain_of: URL -> domain function (default: extract_domain).

    Returns:
        Entries in window order, then in-window order.
    """
    domain_of = domain_of or extract_domain
    active_window_id = store.active_window_id
    entries: List[TabEntry] = []
    window_number = 0

    for window in group_tabs_by_window(store):
        if window.deleted:
            continue
        window_number += 1
        is_active_window = window.id == active_window_id
        position = 0

        for tab in window.tabs:
            if tab.deleted:
                continue
            item = tab.current_item()
            if item is None or not item.url:
                continue

            entries.append(
                TabEntry(
                    url=item.url,
                    title=item.title,
                    domain=domain_of(item.url),
                    active=is_active_window and position == window.active_tab_index,
                    group=_group_name(tab),
                    window_id=window_number,
                    browser=browser,
                )
            )
            position += 1

    return entries
