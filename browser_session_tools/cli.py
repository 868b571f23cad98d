"""
Thin CLI layer - orchestrates library components without business logic.

Reads the open tabs of Chromium-family browsers from their session snapshot
files and prints them as JSON, a table, CSV or plain text.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable as _Callable, Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .browsers import DISPLAY_NAMES, BrowserType, parse_browser_type
from .engine import SessionTabsEngine, find_latest_session_file
from .errors import SessionParseError
from .filters import TabFilter
from .formatters import FORMATS, get_formatter
from .models import ParseResult, TabEntry

app = typer.Typer(
    help=(
        "List the open tabs of Chromium-family browsers (Chrome, Chromium, Edge, Brave, Vivaldi).\n\n"
        "Tabs are decoded from the browser's session snapshot files (Sessions/Session_* and "
        "Sessions/Tabs_*) in the default profile. The browser may stay open while you run this.\n\n"
        "Override the config file location with the environment variable:\n\n"
        "  BROWSER_SESSION_TOOLS_CONFIG  Path to config.json"
    ),
)
config_app = typer.Typer(
    help=(
        "View and manage the browser_session_tools config file.\n\n"
        "Config file location (priority order):\n\n"
        "  1. --config CLI flag\n"
        "  2. BROWSER_SESSION_TOOLS_CONFIG env var\n"
        "  3. OS default: ~/Library/Application Support/browser_session_tools/config.json (macOS)\n"
        "               : ~/.config/browser_session_tools/config.json (Linux)"
    ),
)

app.add_typer(config_app, name="config", rich_help_panel="Configuration")

console = Console()
err_console = Console(stderr=True)

_LOGGER_NAME = "browser_session_tools"


# ── CLI rendering infrastructure ──────────────────────────────────────────────

@dataclass
class ColumnSpec:
    """One column in a Rich table: header text + optional display hints."""

    header: str
    style: str = ""
    no_wrap: bool = False
    justify: str = "left"


@dataclass
class TableSpec:
    """Render spec for a list of model objects: table, JSON, or plain text."""

    title_template: str
    columns: List[ColumnSpec]
    row_fn: _Callable
    summary_template: Optional[str] = None


def _render_output(
    items: list,
    fmt: str,
    spec: "TableSpec",
    empty_msg: str = "No results found",
) -> None:
    """Render items as json, plain lines, or a Rich table."""
    if not items:
        console.print(f"[yellow]{empty_msg}[/yellow]")
        return

    dicts = [x.to_dict() if hasattr(x, "to_dict") else dict(x) for x in items]
    if fmt == "json":
        # Write directly to stdout, bypassing Rich markup and ANSI codes
        sys.stdout.write(json.dumps(dicts, indent=2) + "\n")
        return
    if fmt == "plain":
        for d in dicts:
            console.print("  ".join(str(v) for v in spec.row_fn(d)), markup=False)
        return
    from rich.table import Table
    table = Table(title=spec.title_template.format(n=len(items)))
    for col in spec.columns:
        table.add_column(col.header, style=col.style or None, no_wrap=col.no_wrap, justify=col.justify)
    for d in dicts:
        table.add_row(*[str(v) for v in spec.row_fn(d)])
    console.print(table)
    if spec.summary_template:
        console.print(f"\n[bold]{spec.summary_template.format(n=len(items))}[/bold]")


_LIST_SPEC = TableSpec(
    title_template="Detected Browsers ({n} found)",
    columns=[
        ColumnSpec("Browser", style="cyan", no_wrap=True),
        ColumnSpec("Type", style="green"),
        ColumnSpec("Sessions Directory", style="dim"),
    ],
    row_fn=lambda d: [d["name"], d["type"], d["session_dir"]],
)

_STATS_SPEC = TableSpec(
    title_template="Session File Statistics",
    columns=[
        ColumnSpec("Metric", style="cyan", no_wrap=True),
        ColumnSpec("Value", justify="right"),
    ],
    row_fn=lambda d: [d["metric"], d["value"]],
)

_CONFIG_SPEC = TableSpec(
    title_template="Effective Configuration",
    columns=[
        ColumnSpec("Key", style="cyan", no_wrap=True),
        ColumnSpec("Value"),
        ColumnSpec("Source", style="dim"),
    ],
    row_fn=lambda d: [d["key"], d["value"], d["source"]],
)

# Formats _render_output can produce (list, stats, config show)
_LISTING_FORMATS = ("table", "json", "plain")


# ── Logging ───────────────────────────────────────────────────────────────────

def _configure_logging(verbose: int) -> None:
    """Route package logs to stderr: WARNING by default, -v INFO, -vv DEBUG."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.handlers = [handler]
    logger.setLevel(level)


# ── Config ────────────────────────────────────────────────────────────────────

_g_config_path: Optional[str] = None
_config_cache: Optional[dict] = None  # lazily loaded, reset per process

# Known config keys and the JSON type each must hold
_CONFIG_KEY_TYPES = {
    "browser": (str, "a string"),
    "format": (str, "a string"),
    "session_dirs": (dict, "an object"),
}


def _get_config_file_path() -> Path:
    """Return the resolved config file path based on current priority chain."""
    if _g_config_path:
        return Path(_g_config_path).expanduser()
    env_val = os.getenv("BROWSER_SESSION_TOOLS_CONFIG")
    if env_val:
        return Path(env_val).expanduser()
    return Path(typer.get_app_dir("browser_session_tools")) / "config.json"


def load_config() -> dict:
    """Load app config from JSON file. Returns empty dict if not found or unreadable.

    Config file location priority:
      1. ``--config`` CLI flag (set on the root app callback)
      2. ``BROWSER_SESSION_TOOLS_CONFIG`` environment variable
      3. OS-appropriate default via ``typer.get_app_dir("browser_session_tools")``

    Supported keys (all optional):

    - ``browser`` (string): default for ``tabs --browser`` (``auto`` or a browser type).
    - ``format`` (string): default output format (json, table, csv, plain).
    - ``session_dirs`` (object): browser type -> Sessions directory override,
      for non-default profiles or portable installs.

    Example ``config.json``::

        {
            "browser": "chrome",
            "format": "table",
            "session_dirs": {
                "chrome": "~/.config/google-chrome/Profile 1/Sessions"
            }
        }
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    config_file = _get_config_file_path()
    if config_file.exists():
        try:
            with open(config_file, encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ValueError("top-level value must be an object")
            _config_cache = _drop_mistyped_keys(loaded, config_file)
        except (ValueError, OSError) as exc:
            err_console.print(f"[yellow]Warning: could not load config {config_file}: {exc}[/yellow]")
            _config_cache = {}
    else:
        _config_cache = {}

    return _config_cache


def _drop_mistyped_keys(cfg: dict, config_file: Path) -> dict:
    """Remove known keys whose value has the wrong type, warning once per key."""
    for key, (expected, type_name) in _CONFIG_KEY_TYPES.items():
        if key in cfg and not isinstance(cfg[key], expected):
            err_console.print(
                f"[yellow]Warning: ignoring config key '{key}' (must be {type_name}) in {config_file}[/yellow]"
            )
            del cfg[key]
    return cfg


def _config_session_dirs(cfg: dict) -> Dict[BrowserType, Path]:
    """Parse the ``session_dirs`` config key, warning about unusable entries."""
    result: Dict[BrowserType, Path] = {}
    for name, path in (cfg.get("session_dirs") or {}).items():
        if not isinstance(path, str):
            err_console.print(f"[yellow]Warning: ignoring session_dirs entry '{name}': path must be a string[/yellow]")
            continue
        try:
            result[parse_browser_type(name)] = Path(path).expanduser()
        except ValueError as exc:
            err_console.print(f"[yellow]Warning: ignoring session_dirs entry: {exc}[/yellow]")
    return result


# ── Root app callback (global options) ────────────────────────────────────────

@app.callback(invoke_without_command=True)
def app_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None, "--config",
        help=(
            "Path to the browser_session_tools config JSON file. "
            "Default: OS config dir / browser_session_tools / config.json. "
            "Also overridable via BROWSER_SESSION_TOOLS_CONFIG env var."
        ),
        envvar="BROWSER_SESSION_TOOLS_CONFIG",
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True,
        help="Increase log output on stderr (-v info, -vv debug).",
    ),
) -> None:
    global _g_config_path, _config_cache
    if config != _g_config_path:
        _g_config_path = config
        _config_cache = None  # invalidate cache when path changes
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


# ── Engine factory ────────────────────────────────────────────────────────────

def get_engine() -> SessionTabsEngine:
    """Create an engine honouring ``session_dirs`` overrides from the config file."""
    return SessionTabsEngine(session_dirs=_config_session_dirs(load_config()))


# ── Shared helper functions ───────────────────────────────────────────────────

def _resolve_format(fmt: Optional[str], choices: tuple = FORMATS) -> str:
    """CLI --format > config ``format`` > json. Exits 2 on names outside choices."""
    fmt = (fmt or load_config().get("format") or "json").lower()
    if fmt not in choices:
        err_console.print(f"[red]Unknown format:[/red] {fmt}. Choose from: {', '.join(choices)}")
        raise typer.Exit(code=2)
    return fmt


def _resolve_browser_type(selector: str) -> Optional[BrowserType]:
    """'auto' -> None; otherwise the BrowserType. Exits 2 on unknown names."""
    if selector.lower() == "auto":
        return None
    try:
        return parse_browser_type(selector)
    except ValueError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)


def _build_filter(
    domain: Optional[str],
    group: Optional[str],
    search: Optional[str],
    active_only: bool,
) -> TabFilter:
    tab_filter = TabFilter()
    if domain:
        tab_filter.by_domain(domain)
    if group:
        tab_filter.by_group(group)
    if search:
        tab_filter.by_text(search)
    if active_only:
        tab_filter.active_only()
    return tab_filter


def _write_text(text: str, output: Optional[str]) -> None:
    """Write rendered output to a file, or to stdout bypassing Rich markup."""
    if not text.endswith("\n"):
        text += "\n"
    if output:
        target = Path(output).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        err_console.print(f"[green]Wrote:[/green] {target}")
        return
    sys.stdout.write(text)


def _collect_tabs(
    engine: SessionTabsEngine,
    browser_type: Optional[BrowserType],
    session_file: Optional[str],
    session_dir: Optional[str],
    all_browsers: bool,
) -> tuple:
    """Return (entries, browser_label) for the selected source.

    Raises:
        SessionParseError: If a single selected source cannot be parsed.
    """
    label = DISPLAY_NAMES[browser_type] if browser_type else "unknown"
    if session_file:
        return engine.parse_file(Path(session_file).expanduser(), label).entries, label
    if session_dir:
        latest = find_latest_session_file(Path(session_dir).expanduser())
        return engine.parse_file(latest, label).entries, label
    if all_browsers or browser_type is None:
        if not engine.detect():
            err_console.print("[yellow]No Chromium-family browsers detected[/yellow]")
        return engine.query_all_browsers(), "all"
    browser = engine.get_browser(browser_type)
    return engine.query_tabs(browser), browser.name


def _do_tabs(
    engine: SessionTabsEngine,
    browser: str,
    session_file: Optional[str],
    session_dir: Optional[str],
    all_browsers: bool,
    fmt: str,
    output: Optional[str],
    tab_filter: TabFilter,
) -> None:
    """Collect, filter and render open tabs."""
    browser_type = _resolve_browser_type(browser)
    try:
        entries, label = _collect_tabs(engine, browser_type, session_file, session_dir, all_browsers)
    except SessionParseError as exc:
        err_console.print(f"[red]Failed to read tabs:[/red] {exc}")
        raise typer.Exit(code=1)

    report = engine.build_report(tab_filter(entries), label)
    _write_text(get_formatter(fmt).format(report), output)


def _stats_rows(path: str, result: ParseResult) -> List[dict]:
    rows = [
        {"metric": "file", "value": path},
        {"metric": "version", "value": str(result.version)},
        {"metric": "records", "value": str(result.record_count)},
        {"metric": "abandoned commands", "value": str(result.skipped_commands)},
        {"metric": "open tabs", "value": str(len(result.entries))},
        {"metric": "windows", "value": str(result.window_count)},
    ]
    for command_type, count in sorted(result.unknown_commands.items()):
        rows.append({"metric": f"ignored type {command_type}", "value": str(count)})
    return rows


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("tabs")
def tabs(
    browser: Optional[str] = typer.Option(
        None, "--browser", "-b",
        help="Browser: auto, chrome, chromium, edge, brave or vivaldi. Default: config 'browser', else auto (all detected).",
    ),
    session_file: Optional[str] = typer.Option(
        None, "--session-file", "-f",
        help="Read this Session_*/Tabs_* file instead of auto-detecting. Example: -f ~/Sessions/Session_1337",
    ),
    session_dir: Optional[str] = typer.Option(
        None, "--session-dir",
        help="Read the newest Session_*/Tabs_* file in this directory.",
    ),
    all_browsers: bool = typer.Option(False, "--all-browsers", help="Read every detected browser."),
    fmt: Optional[str] = typer.Option(None, "--format", help="Output format: json, table, csv, plain. Default: json"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
    domain: Optional[str] = typer.Option(None, "--domain", help="Only tabs on this domain or its subdomains."),
    group: Optional[str] = typer.Option(None, "--group", help="Only tabs whose group name contains this text."),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Only tabs whose URL or title contains this text."),
    active_only: bool = typer.Option(False, "--active-only", help="Only the active tab of the active window."),
) -> None:
    """List open tabs.

    Examples:
        bsession tabs                               # all detected browsers, JSON
        bsession tabs -b chrome --format table      # Chrome only, Rich table
        bsession tabs -f Session_13345 -b brave     # explicit session file
        bsession tabs --domain github.com -o gh.json
    """
    selector = browser or load_config().get("browser") or "auto"
    _do_tabs(
        get_engine(),
        selector,
        session_file,
        session_dir,
        all_browsers,
        _resolve_format(fmt),
        output,
        _build_filter(domain, group, search, active_only),
    )


@app.command("list")
def list_browsers(
    fmt: str = typer.Option("table", "--format", help="Output format: table, json, plain."),
) -> None:
    """List detected browsers and their session directories.

    Examples:
        bsession list
        bsession list --format json
    """
    fmt = _resolve_format(fmt, _LISTING_FORMATS)
    browsers = get_engine().detect()
    _render_output(browsers, fmt, _LIST_SPEC, empty_msg="No Chromium-family browsers detected")


@app.command("stats")
def stats(
    session_file: str = typer.Argument(..., help="Session_*/Tabs_* file to inspect."),
    browser: str = typer.Option("unknown", "--browser", "-b", help="Browser label for log messages."),
    fmt: str = typer.Option("table", "--format", help="Output format: table, json, plain."),
) -> None:
    """Show decoding statistics for one session file.

    Examples:
        bsession stats ~/.config/google-chrome/Default/Sessions/Session_13345
        bsession stats Session_13345 --format json
    """
    fmt = _resolve_format(fmt, _LISTING_FORMATS)
    try:
        result = get_engine().parse_file(Path(session_file).expanduser(), browser)
    except SessionParseError as exc:
        err_console.print(f"[red]Failed to parse {session_file}:[/red] {exc} [dim]({exc.kind})[/dim]")
        raise typer.Exit(code=1)

    if fmt == "json":
        sys.stdout.write(json.dumps({"file": session_file, **result.to_dict()}, indent=2) + "\n")
        return
    _render_output(_stats_rows(session_file, result), fmt, _STATS_SPEC)


@app.command("version")
def version() -> None:
    """Show version."""
    console.print(f"browser_session_tools version {__version__}")


# ── config_app commands ───────────────────────────────────────────────────────

@config_app.command("path")
def config_path() -> None:
    """Print the config file path (whether or not the file exists).

    Examples:
        bsession config path
        bsession --config /tmp/my.json config path   # show path after override
    """
    console.print(str(_get_config_file_path()), markup=False, soft_wrap=True)


def _config_settings(cfg: dict) -> List[dict]:
    """Rows of key, effective value and where the value came from."""
    rows = [
        {
            "key": "browser",
            "value": cfg.get("browser", "auto"),
            "source": "config" if "browser" in cfg else "default",
        },
        {
            "key": "format",
            "value": cfg.get("format", "json"),
            "source": "config" if "format" in cfg else "default",
        },
    ]
    overrides = _config_session_dirs(cfg)
    for browser_type in BrowserType:
        if browser_type in overrides:
            path = overrides[browser_type]
            source = "config" if path.is_dir() else "config (missing)"
            rows.append({"key": f"session_dirs.{browser_type.value}", "value": str(path), "source": source})
    for key in sorted(set(cfg) - set(_CONFIG_KEY_TYPES)):
        rows.append({"key": key, "value": json.dumps(cfg[key]), "source": "unknown key"})
    return rows


@config_app.command("show")
def config_show(
    fmt: str = typer.Option("table", "--format", "-f", help="Output format: table, json, plain."),
) -> None:
    """Show the config file path and the effective value of every setting.

    Browsers with a ``session_dirs`` override get one row each; their source
    reads "config (missing)" when the directory does not exist.

    Examples:
        bsession config show
        bsession config show --format json
    """
    fmt = _resolve_format(fmt, _LISTING_FORMATS)
    config_file = _get_config_file_path()
    cfg = load_config()
    settings = _config_settings(cfg)

    if fmt == "json":
        sys.stdout.write(json.dumps({
            "config_file": str(config_file),
            "exists": config_file.exists(),
            "config": cfg,
            "settings": settings,
        }, indent=2) + "\n")
        return

    console.print(f"Config file: [cyan]{config_file}[/cyan]")
    if not config_file.exists():
        console.print("[yellow]File does not exist; showing defaults. Run 'bsession config init' to create it.[/yellow]")
    _render_output(settings, fmt, _CONFIG_SPEC)


_CONFIG_INIT_TEMPLATE = {
    "browser": "auto",
    "format": "json",
    "session_dirs": {},
}


@config_app.command("init")
def config_init(
    force: bool = typer.Option(
        False, "--force",
        help="Overwrite the config file if it already exists.",
    ),
) -> None:
    """Create a starter config.json with documented default values.

    Will NOT overwrite an existing config file unless --force is given.

    Examples:
        bsession config init             # create if not exists
        bsession config init --force     # overwrite existing file
    """
    config_file = _get_config_file_path()

    if config_file.exists() and not force:
        err_console.print(
            f"[yellow]Config file already exists:[/yellow] {config_file}\n"
            "Use --force to overwrite."
        )
        raise typer.Exit(code=1)

    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(_CONFIG_INIT_TEMPLATE, indent=2) + "\n", encoding="utf-8")

    global _config_cache
    _config_cache = None

    console.print(f"[green]Created:[/green] {config_file}")
    console.print(
        "[dim]Edit 'session_dirs' to point a browser at a non-default profile.[/dim]\n"
        "[dim]Run 'bsession config show' to verify the active configuration.[/dim]"
    )


# ── Entry point ───────────────────────────────────────────────────────────────

def cli_main():
    """CLI entry point."""
    app()
