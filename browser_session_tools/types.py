"""
Type protocols for composable, extensible architecture.

Protocols allow dependency injection and multiple implementations.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from typing import TYPE_CHECKING, Any, List, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .browsers import Browser
    from .models import TabEntry


@runtime_checkable
class DomainExtractor(Protocol):
    """Protocol for URL -> domain functions used by the assembler."""

    def __call__(self, url: str) -> str:
        ...


@runtime_checkable
class TabSource(Protocol):
    """Protocol for anything that can produce open tabs for a browser."""

    def query_tabs(self, browser: "Browser") -> List["TabEntry"]:
        """Return the open tabs of one browser."""
        ...


@runtime_checkable
class Formatter(Protocol):
    """Protocol for output formatting."""

    def format(self, data: Any) -> str:
        """Format data for output."""
        ...

    def format_many(self, items: List[Any]) -> str:
        """Format multiple items."""
        ...
