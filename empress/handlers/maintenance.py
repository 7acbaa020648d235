"""
Database maintenance handlers: health check, backup, restore and reset.

Backup and restore call MongoDB's own dump/restore tools. Arguments are
passed as a list, never through a shell, so paths are not interpreted.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from empress.core.errors import ExternalToolError
from empress.core.results import CommandResult
from empress.db.gateway import StatementGateway
from empress.handlers.base import command_handler

if TYPE_CHECKING:
    from config import Settings

Runner = Callable[..., Any]

RESET_PROMPT = "WARNING: This will purge all records. Are you sure?"

# Last characters of tool stderr kept in the error message
STDERR_TAIL = 500


@command_handler("check-health")
def check_health(gateway: StatementGateway, max_storage_size: int) -> CommandResult:
    """Compare the database storage size with the configured ceiling."""
    stats = gateway.stats_summary()
    storage_size = stats["storageSize"]

    if storage_size > max_storage_size:
        logger.warning("Database size exceeds recommended limit!")
        message = (
            f"Database size exceeds recommended limit "
            f"({storage_size} > {max_storage_size} bytes)"
        )
    else:
        logger.info("Database health is good.")
        message = "Database health is good."

    return CommandResult.success(
        "check-health",
        message,
        data={**stats, "healthy": storage_size <= max_storage_size},
    )


def backup_command(settings: Settings, destination_path: str) -> list[str]:
    return [
        settings.mongodump_bin,
        f"--uri={settings.mongo_uri}",
        f"--db={settings.db_name}",
        f"--out={destination_path}",
    ]


def restore_command(settings: Settings, backup_path: str) -> list[str]:
    return [
        settings.mongorestore_bin,
        f"--uri={settings.mongo_uri}",
        f"--db={settings.db_name}",
        str(Path(backup_path) / settings.db_name),
    ]


def _run_tool(args: Sequence[str], runner: Runner) -> None:
    tool = Path(args[0]).name
    try:
        runner(list(args), check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise ExternalToolError(f"{tool} not found: install the MongoDB database tools") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()[-STDERR_TAIL:]
        raise ExternalToolError(
            f"{tool} exited with status {exc.returncode}: {stderr}"
        ) from exc
    except OSError as exc:
        raise ExternalToolError(f"Cannot run {tool}: {exc}") from exc


@command_handler("backup")
def backup(
    settings: Settings, destination_path: str, runner: Runner = subprocess.run
) -> CommandResult:
    _run_tool(backup_command(settings, destination_path), runner)
    logger.info(f"Database backed up to {destination_path}")
    return CommandResult.success(
        "backup", f"Database backed up successfully to {destination_path}"
    )


@command_handler("restore")
def restore(
    settings: Settings, backup_path: str, runner: Runner = subprocess.run
) -> CommandResult:
    _run_tool(restore_command(settings, backup_path), runner)
    logger.info(f"Database restored from {backup_path}")
    return CommandResult.success(
        "restore", "Database restored successfully from backup."
    )


@command_handler("reset-db")
def reset_db(gateway: StatementGateway, confirm: Callable[[str], bool]) -> CommandResult:
    """
    Delete every statement after an explicit confirmation.

    ``confirm`` receives the warning text and must return True to proceed;
    anything else cancels without touching the database.
    """
    if not confirm(RESET_PROMPT):
        return CommandResult.success("reset-db", "Database reset cancelled.", data={"deleted": 0})

    deleted = gateway.delete_all()
    logger.info(f"Deleted {deleted} records.")
    return CommandResult.success("reset-db", f"Deleted {deleted} records.", data={"deleted": deleted})
