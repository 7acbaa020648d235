"""
Export of statements to CSV or JSON.

The output file name depends only on the format and is overwritten on
every export. JSON is written as relaxed MongoDB Extended JSON so ids and
dates survive a round trip through import-statements.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from bson import json_util
from bson.json_util import RELAXED_JSON_OPTIONS
from loguru import logger

from empress.core.errors import FileAccessError
from empress.core.results import CommandResult
from empress.db.gateway import StatementGateway
from empress.handlers.base import command_handler, parse_json_object

EXPORT_FILENAMES = {
    "csv": "exported_statements.csv",
    "json": "exported_statements.json",
}


def export_filename(format: str) -> str:
    """Anything other than csv is exported as JSON."""
    return EXPORT_FILENAMES.get(format.lower(), EXPORT_FILENAMES["json"])


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return json.dumps(value)
    # ObjectId, datetime, nested documents and arrays
    encoded = json.loads(json_util.dumps(value, json_options=RELAXED_JSON_OPTIONS))
    if isinstance(encoded, dict) and len(encoded) == 1:
        (key, inner), = encoded.items()
        if key in ("$oid", "$date") and isinstance(inner, str):
            return inner
    return json.dumps(encoded, ensure_ascii=False)


def write_csv(records: list[dict[str, Any]], path: Path) -> None:
    """One row per statement; columns are top-level keys in first-seen order."""
    fieldnames: list[str] = []
    for record in records:
        for key in record:
            if key not in fieldnames:
                fieldnames.append(key)

    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for record in records:
            writer.writerow({key: _csv_value(record.get(key)) for key in fieldnames})


def write_json(records: list[dict[str, Any]], path: Path) -> None:
    path.write_text(
        json_util.dumps(records, indent=2, json_options=RELAXED_JSON_OPTIONS),
        encoding="utf-8",
    )


@command_handler("export-statements")
def export_statements(
    gateway: StatementGateway, filter: str, format: str, output_dir: str = "."
) -> CommandResult:
    query = parse_json_object(filter)
    results = gateway.find(query)

    path = Path(output_dir) / export_filename(format)
    try:
        if path.suffix == ".csv":
            write_csv(results, path)
        else:
            write_json(results, path)
    except OSError as exc:
        raise FileAccessError(f"Cannot write {path}: {exc}") from exc

    logger.info(f"Exported statements in {format} format.")
    return CommandResult.success(
        "export-statements",
        f"Exported {len(results)} statements to {path}",
        data={"path": str(path), "count": len(results)},
    )
