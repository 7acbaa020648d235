"""
Typer CLI for empress-cli.

Commands (one registration each):
    empress create <data>                         - Validate and store one statement
    empress query <filter>                        - Find statements matching a filter
    empress bulkImport <filepath>                 - Store the valid statements in a JSON file
    empress listVerbs | listActors                - Distinct verbs / actors
    empress aggregate <pipeline>                  - Run an aggregation pipeline
    empress groupByDate <filter> <granularity>    - Counts per year/month/day/hour
    empress export-statements <filter> <format>   - Write exported_statements.csv/.json
    empress reset-db                              - Delete every statement (asks first)
    ...

Usage:
    empress --help
    empress                                       # interactive menu
    empress create '{"actor": {...}, "verb": {...}, "object": {...}}'
    empress export-statements '{}' csv

Configuration comes from MONGO_URI, DB_NAME and COLLECTION_NAME (see config.py).
Failed commands are logged and still exit 0 unless STRICT_EXIT_CODES is set.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm

from config import Settings, get_settings, invalid_variables, missing_variables
from empress.cli.interactive import InteractiveSession
from empress.cli.render import render_result, to_json
from empress.core.errors import ConfigError, ConfigInvalid, ConfigMissing
from empress.core.logging import configure_logging
from empress.core.results import CommandResult
from empress.db.gateway import gateway_scope
from empress.handlers import maintenance, profiles, reports, statements, transfer

app = typer.Typer(
    help="empress: xAPI Learning Record Store CLI (MongoDB)",
    no_args_is_help=False,  # Allow running without args for interactive mode
    invoke_without_command=True,
)

console = Console()


# ========================================
# Bootstrap
# ========================================


def load_settings() -> Settings:
    """Load settings, turning a ValidationError into ConfigMissing or ConfigInvalid."""
    try:
        return get_settings()
    except ValidationError as exc:
        missing = missing_variables(exc)
        if missing:
            raise ConfigMissing(missing) from exc
        raise ConfigInvalid(invalid_variables(exc)) from exc


def _help_requested(ctx: typer.Context) -> bool:
    # `empress <command> --help` reaches this callback before the command parses its options
    return any(name in ctx.args for name in ctx.help_option_names)


@app.callback()
def main_callback(ctx: typer.Context) -> None:
    """
    xAPI Learning Record Store CLI.

    Run without arguments to open the interactive menu, or use one of the
    commands below.
    """
    configure_logging()
    if ctx.invoked_subcommand and _help_requested(ctx):
        return

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1)

    configure_logging(settings.log_level, settings.error_log_file)

    if ctx.invoked_subcommand is None:
        session = InteractiveSession(open_gateway=lambda: gateway_scope(settings), console=console)
        try:
            session.run()
        except Exception:  # Top-level guard: the menu loop must not die silently
            logger.exception("An error occurred in interactive mode")
            raise typer.Exit(code=1)


def _finish(result: CommandResult) -> None:
    render_result(console, result)
    if not result.ok and get_settings().strict_exit_codes:
        raise typer.Exit(code=1)


def _run(handler: Callable[..., CommandResult], *args: Any) -> None:
    """Run a database handler inside its own gateway scope."""
    with gateway_scope(get_settings()) as gateway:
        result = handler(gateway, *args)
    _finish(result)


# ========================================
# STATEMENT COMMANDS
# ========================================


@app.command("create")
def create(data: str = typer.Argument(..., help="Statement as JSON")) -> None:
    """Create a new xAPI record."""
    _run(statements.create, data)


@app.command("query")
def query(parameters: str = typer.Argument(..., help="MongoDB filter as JSON")) -> None:
    """Perform complex queries based on provided parameters."""
    _run(statements.query, parameters)


@app.command("bulkImport")
def bulk_import(filepath: str = typer.Argument(..., help="JSON file holding an array of statements")) -> None:
    """Bulk import xAPI data from a JSON file."""
    _run(statements.bulk_import, filepath)


@app.command("bulk-store")
def bulk_store(data: str = typer.Argument(..., help="JSON array of statements")) -> None:
    """Store multiple xAPI statements at once."""
    _run(statements.bulk_store, data)


@app.command("import-statements")
def import_statements(file_path: str = typer.Argument(..., help="JSON file holding an array of statements")) -> None:
    """Import xAPI statements from a file."""
    _run(statements.import_statements, file_path)


@app.command("validate")
def validate(data: str = typer.Argument(..., help="Statement as JSON")) -> None:
    """Check if an xAPI statement has the required structure."""
    _finish(statements.validate(data))


@app.command("analyzeActivity")
def analyze_activity(activity_id: str = typer.Argument(..., help="object.id of the activity")) -> None:
    """Report on interactions related to an activity."""
    _run(statements.analyze_activity, activity_id)


@app.command("search-statements")
def search_statements(text: str = typer.Argument(..., help="Text to search for")) -> None:
    """Search for statements by content."""
    _run(statements.search_statements, text)


@app.command("visualize-actor-progress")
def visualize_actor_progress(actor_id: str = typer.Argument(..., help="Actor mbox")) -> None:
    """Visualize the progress of an actor."""
    _run(statements.visualize_actor_progress, actor_id)


@app.command("set-statement-authority")
def set_statement_authority(
    statement_id: str = typer.Argument(..., help="Statement _id (ObjectId hex)"),
    authority: str = typer.Argument(..., help="Authority as text or JSON"),
) -> None:
    """Set the authority for an xAPI statement."""
    _run(statements.set_statement_authority, statement_id, authority)


@app.command("get-statements-by-duration")
def get_statements_by_duration(
    min_duration: str = typer.Argument(..., help="Lower bound (inclusive)"),
    max_duration: str = typer.Argument(..., help="Upper bound (inclusive)"),
) -> None:
    """Get statements by duration."""
    _run(statements.statements_by_duration, min_duration, max_duration)


@app.command("visualizeData")
def visualize_data(filter: str = typer.Argument(..., help="MongoDB filter as JSON")) -> None:
    """Provide basic visualization of xAPI data."""
    _finish(statements.visualize_data(filter))


# ========================================
# REPORT COMMANDS
# ========================================


@app.command("listVerbs")
def list_verbs() -> None:
    """List all unique verbs used in stored xAPI statements."""
    _run(reports.list_verbs)


@app.command("listActors")
def list_actors() -> None:
    """List all unique actors from the xAPI statements."""
    _run(reports.list_actors)


@app.command("list-object-types")
def list_object_types() -> None:
    """List all object types in the LRS."""
    _run(reports.list_object_types)


@app.command("list-all-extensions")
def list_all_extensions() -> None:
    """List all extensions."""
    _run(reports.list_all_extensions)


@app.command("aggregate")
def aggregate(pipeline: str = typer.Argument(..., help="Aggregation pipeline as a JSON array")) -> None:
    """Perform aggregation operations on xAPI data."""
    _run(reports.aggregate, pipeline)


@app.command("lrsStats")
def lrs_stats() -> None:
    """Retrieve insights about the Learning Record Store."""
    _run(reports.lrs_stats)


@app.command("groupByDate")
def group_by_date(
    filter: str = typer.Argument(..., help="MongoDB filter as JSON"),
    granularity: str = typer.Argument(..., help="year, month, day or hour"),
) -> None:
    """Group xAPI statements by date."""
    _run(reports.group_by_date, filter, granularity)


@app.command("avgScoreByActivity")
def avg_score_by_activity(activity_id: str = typer.Argument(..., help="object.id of the activity")) -> None:
    """Retrieve average score for a specific activity."""
    _run(reports.avg_score_by_activity, activity_id)


@app.command("most-active-actors")
def most_active_actors() -> None:
    """Get the most active actors."""
    _run(reports.most_active_actors)


@app.command("visualize-verb-usage")
def visualize_verb_usage() -> None:
    """Visualize verb usage."""
    _run(reports.visualize_verb_usage)


# ========================================
# DATABASE MANAGEMENT COMMANDS
# ========================================


@app.command("check-health")
def check_health() -> None:
    """Check the health of the xAPI database."""
    _run(maintenance.check_health, get_settings().health_max_storage_size)


@app.command("backup")
def backup(destination_path: str = typer.Argument(..., help="Directory for the dump")) -> None:
    """Create a backup of the xAPI records."""
    _finish(maintenance.backup(get_settings(), destination_path))


@app.command("restore")
def restore(backup_path: str = typer.Argument(..., help="Directory a backup was written to")) -> None:
    """Restore xAPI records from a backup."""
    _finish(maintenance.restore(get_settings(), backup_path))


@app.command("reset-db")
def reset_db() -> None:
    """Purge all records (with warnings and confirmations)."""
    _run(maintenance.reset_db, lambda message: Confirm.ask(message, default=False))


# ========================================
# IMPORT & EXPORT COMMANDS
# ========================================


@app.command("export-statements")
def export_statements(
    filter: str = typer.Argument(..., help="MongoDB filter as JSON"),
    format: str = typer.Argument(..., help="csv or json"),
) -> None:
    """Export xAPI statements to a chosen format (e.g., JSON, CSV)."""
    _run(transfer.export_statements, filter, format, get_settings().export_dir)


# ========================================
# PROFILE & STANDARDS COMMANDS
# ========================================


@app.command("register-verb")
def register_verb(
    verb: str = typer.Argument(..., help="Verb id"),
    definition: str = typer.Argument(..., help="Verb definition"),
) -> None:
    """Register new verbs."""
    _run(profiles.register_verb, get_settings().verbs_collection, verb, definition)


@app.command("register-activity-type")
def register_activity_type(
    type: str = typer.Argument(..., help="Activity type id"),
    definition: str = typer.Argument(..., help="Activity type definition"),
) -> None:
    """Register new activity types."""
    _run(profiles.register_activity_type, get_settings().activity_types_collection, type, definition)


@app.command("check-profile")
def check_profile(
    profile_id: str = typer.Argument(..., help="Profile id"),
    statement: str = typer.Argument(..., help="Statement as JSON"),
) -> None:
    """Check statement against an xAPI profile."""
    _run(profiles.check_profile, get_settings().verbs_collection, profile_id, statement)


@app.command("generate-template")
def generate_template() -> None:
    """Generate an xAPI statement template."""
    console.print("Generated template:")
    console.print_json(to_json(profiles.generate_template()))


@app.command("interactive-mode")
def interactive_mode() -> None:
    """Interactively generate an xAPI statement."""
    settings = get_settings()
    session = InteractiveSession(open_gateway=lambda: gateway_scope(settings), console=console)
    statement = session.collect_statement()
    console.print("Generated statement:")
    console.print_json(to_json(statement))


def run() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    run()
