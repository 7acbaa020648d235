"""
Rich rendering of command results.

Documents are printed as JSON (BSON values as relaxed Extended JSON).
Count reports ({_id, count} rows) are printed as tables.
"""

from __future__ import annotations

from typing import Any

from bson import json_util
from bson.json_util import RELAXED_JSON_OPTIONS
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from empress.core.results import CommandResult


def to_json(value: Any) -> str:
    return json_util.dumps(value, indent=2, json_options=RELAXED_JSON_OPTIONS)


def _is_count_rows(data: Any) -> bool:
    return (
        isinstance(data, list)
        and bool(data)
        and all(isinstance(row, dict) and set(row) == {"_id", "count"} for row in data)
    )


def count_table(rows: list[dict[str, Any]], title: str = "") -> Table:
    table = Table(title=title or None, show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for row in rows:
        key = row["_id"]
        label = key if isinstance(key, str) else json_util.dumps(key)
        table.add_row(escape(label), str(row["count"]))
    return table


def render_data(console: Console, data: Any, title: str = "") -> None:
    if data is None:
        return
    if _is_count_rows(data):
        console.print(count_table(data, title))
    elif isinstance(data, (list, dict)):
        console.print_json(to_json(data))
    else:
        console.print(str(data), markup=False)


def render_result(console: Console, result: CommandResult) -> None:
    """Print a CommandResult: data and message on success, error details on failure."""
    if not result.ok:
        console.print(f"[red]✗[/red] {result.command}: {escape(result.message)}", highlight=False)
        for detail in result.details:
            console.print(f"  - {detail}", markup=False)
        return

    if result.message:
        console.print(f"[green]✓[/green] {escape(result.message)}", highlight=False)
    render_data(console, result.data, title=result.command)
