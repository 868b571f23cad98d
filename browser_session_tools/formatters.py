"""
Output formatters with multiple output types.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import csv
import io
import json
from abc import ABC, abstractmethod
from typing import Any, List

from rich.console import Console
from rich.table import Table

from .models import TabEntry, TabReport


class ResultFormatter(ABC):
    """Base formatter protocol."""

    @abstractmethod
    def format(self, data: Any) -> str:
        """Format data for output."""
        pass

    @abstractmethod
    def format_many(self, items: List[Any]) -> str:
        """Format multiple items."""
        pass


class TableFormatter(ResultFormatter):
    """Format tabs as a Rich table."""

    def __init__(self, title: str = "Open Tabs"):
        """Initialize with title."""
        self.title = title

    def format(self, data: Any) -> str:
        """Format a single tab as labelled lines, or a report as a table."""
        if isinstance(data, TabReport):
            title = f"{data.browser}: {data.total_tabs} tabs in {data.total_windows} windows"
            return self._render(data.entries, title)
        lines = [
            f"Title:    {data.title}",
            f"URL:      {data.url}",
            f"Domain:   {data.domain}",
            f"Window:   {data.window_id}",
            f"Active:   {'yes' if data.active else 'no'}",
            f"Group:    {data.group or '-'}",
            f"Browser:  {data.browser}",
        ]
        return "\n".join(lines)

    def format_many(self, items: List[TabEntry]) -> str:
        """Format multiple tabs as table."""
        return self._render(items, self.title)

    def _render(self, items: List[TabEntry], title: str) -> str:
        table = Table(title=title)
        table.add_column("Win", justify="right", style="magenta")
        table.add_column("", no_wrap=True)
        table.add_column("Title", style="cyan")
        table.add_column("Domain", style="green")
        table.add_column("Group", style="yellow")
        table.add_column("Browser", style="dim")

        for item in items:
            table.add_row(
                str(item.window_id),
                "●" if item.active else "",
                item.title or item.url,
                item.domain,
                item.group,
                item.browser,
            )

        console = Console(width=160)
        with console.capture() as capture:
            console.print(table)
        return capture.get()


class JsonFormatter(ResultFormatter):
    """Format tabs as JSON."""

    def format(self, data: Any) -> str:
        """Format a report envelope or a single tab."""
        return json.dumps(data.to_dict(), indent=2, ensure_ascii=False)

    def format_many(self, items: List[TabEntry]) -> str:
        """Format multiple tabs as JSON array."""
        return json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False)


_CSV_HEADER = ["window_id", "active", "title", "url", "domain", "group", "browser"]


def _tab_to_csv_row(data: TabEntry) -> list:
    return [
        data.window_id,
        "true" if data.active else "false",
        data.title,
        data.url,
        data.domain,
        data.group,
        data.browser,
    ]


class CsvFormatter(ResultFormatter):
    """Format tabs as RFC 4180-compliant CSV (fields properly quoted)."""

    def format(self, data: Any) -> str:
        """Format a report's entries or a single tab as CSV with header."""
        if isinstance(data, TabReport):
            return self.format_many(data.entries)
        return self.format_many([data])

    def format_many(self, items: List[TabEntry]) -> str:
        """Format multiple tabs as CSV with header."""
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(_CSV_HEADER)
        for item in items:
            writer.writerow(_tab_to_csv_row(item))
        return buf.getvalue()


class PlainFormatter(ResultFormatter):
    """Simple plain text formatter, one tab per line."""

    def format(self, data: Any) -> str:
        """Format single item."""
        if isinstance(data, TabReport):
            return self.format_many(data.entries)
        if isinstance(data, TabEntry):
            marker = "*" if data.active else " "
            group = f" [{data.group}]" if data.group else ""
            return f"{marker} w{data.window_id} {data.url}  {data.title}{group}"
        return str(data)

    def format_many(self, items: List[Any]) -> str:
        """Format multiple items."""
        return "\n".join(self.format(item) for item in items)


FORMATS = ("json", "table", "csv", "plain")


def get_formatter(format_type: str, title: str = "Open Tabs") -> ResultFormatter:
    """Factory function to get formatter by type."""
    formatters = {
        "table": TableFormatter,
        "json": JsonFormatter,
        "csv": CsvFormatter,
        "plain": PlainFormatter,
    }

    formatter_class = formatters.get(format_type.lower())
    if not formatter_class:
        raise ValueError(f"Unknown format: {format_type}")

    try:
        return formatter_class(title)
    except TypeError:
        return formatter_class()
