"""Centralized terminal output for harplay.

Key principle: stderr for status and warnings, stdout for data.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.json import JSON

# stderr console for status messages
err_console = Console(stderr=True)

# stdout console for data output (JSON, tables)
out_console = Console()


def success(message: str, *, console: Console | None = None) -> None:
    """Print a success message (green checkmark) to stderr."""
    c = console or err_console
    c.print(f"[green]  ✓ {message}[/green]")


def error(message: str, *, console: Console | None = None) -> None:
    """Print an error message (red X) to stderr."""
    c = console or err_console
    c.print(f"[red]  ✗ {message}[/red]")


def warn(message: str, *, console: Console | None = None) -> None:
    """Print a warning message (yellow) to stderr."""
    c = console or err_console
    c.print(f"[yellow]  ⚠ {message}[/yellow]")


def info(message: str, *, console: Console | None = None) -> None:
    """Print an info message (dim) to stderr."""
    c = console or err_console
    c.print(f"[dim]  {message}[/dim]")


def print_json(data: Any, *, console: Console | None = None) -> None:
    """Print a JSON-able value to stdout with syntax highlighting."""
    c = console or out_console
    # soft_wrap keeps long strings on one line so the output stays valid JSON
    c.print(JSON(json.dumps(data, ensure_ascii=False)), soft_wrap=True)


def status_style(status: int) -> str:
    """Rich style name for an HTTP status code."""
    if 200 <= status < 300:
        return "green"
    if 300 <= status < 400:
        return "cyan"
    if 400 <= status < 500:
        return "yellow"
    return "red"
