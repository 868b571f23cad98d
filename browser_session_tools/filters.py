"""
Composable filter implementations for narrowing tab lists.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from typing import Any, Callable, List

from .models import TabEntry


class TabFilter:
    """Composable tab filter; predicates combine with AND."""

    def __init__(self):
        """Initialize filter."""
        self._predicates: List[Callable[[TabEntry], bool]] = []

    def by_domain(self, domain: str) -> "TabFilter":
        """Keep tabs on this domain or one of its subdomains (e.g. 'example.com').

        A leading "www." is dropped, as extract_domain drops it from tab domains.
        """
        wanted = domain.strip().lower().lstrip(".")
        if wanted.startswith("www."):
            wanted = wanted[4:]

        def predicate(t: TabEntry) -> bool:
            return t.domain == wanted or t.domain.endswith("." + wanted)

        self._predicates.append(predicate)
        return self

    def by_browser(self, browser: str) -> "TabFilter":
        """Filter by browser label (case-insensitive)."""

        def predicate(t: TabEntry) -> bool:
            return t.browser.lower() == browser.lower()

        self._predicates.append(predicate)
        return self

    def by_group(self, group: str) -> "TabFilter":
        """Filter by tab group name (case-insensitive substring)."""

        def predicate(t: TabEntry) -> bool:
            return group.lower() in t.group.lower()

        self._predicates.append(predicate)
        return self

    def by_window(self, window_id: int) -> "TabFilter":
        """Filter by assembled window number."""

        def predicate(t: TabEntry) -> bool:
            return t.window_id == window_id

        self._predicates.append(predicate)
        return self

    def by_text(self, text: str) -> "TabFilter":
        """Filter by case-insensitive substring of URL or title."""
        needle = text.lower()

        def predicate(t: TabEntry) -> bool:
            return needle in t.url.lower() or needle in t.title.lower()

        self._predicates.append(predicate)
        return self

    def active_only(self) -> "TabFilter":
        """Keep only the active tab."""
        self._predicates.append(lambda t: t.active)
        return self

    def custom(self, predicate: Callable[[TabEntry], bool]) -> "TabFilter":
        """Add custom filter predicate."""
        self._predicates.append(predicate)
        return self

    def apply(self, tabs: List[TabEntry]) -> List[TabEntry]:
        """Apply all filters to tab list, preserving order."""
        result = tabs
        for predicate in self._predicates:
            result = [t for t in result if predicate(t)]
        return result

    def __call__(self, tabs: List[TabEntry]) -> List[TabEntry]:
        """Support callable interface."""
        return self.apply(tabs)


class ChainedFilter:
    """Combine multiple filters with AND logic."""

    def __init__(self, *filters):
        """Initialize with filters."""
        self._filters = filters

    def apply(self, items: List[Any]) -> List[Any]:
        """Apply all filters in sequence."""
        result = items
        for f in self._filters:
            result = f(result) if callable(f) else f.apply(result)
        return result

    def __call__(self, items: List[Any]) -> List[Any]:
        """Support callable interface."""
        return self.apply(items)
