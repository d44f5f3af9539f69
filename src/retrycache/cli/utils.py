"""
CLI utility helpers — output formatting.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)


def preview(data: Any) -> Any:
    """First record of a list payload, the payload itself otherwise."""
    if isinstance(data, list) and data:
        return data[0]
    return data


def print_json(data: Any) -> None:
    """Pretty-print a JSON-serialisable value."""
    console.print_json(json.dumps(data, default=str))


def print_error(message: str) -> None:
    err_console.print(f"[red]❌ Error:[/red] {escape(message)}")
