"""
Configuration settings for empress-cli.

Uses Pydantic Settings for environment variable management with .env file support.
The connection string, database name and collection name have no defaults:
the CLI refuses to start when any of them is missing.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

REQUIRED_VARIABLES = ("MONGO_URI", "DB_NAME", "COLLECTION_NAME")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # MongoDB
    # ========================================
    mongo_uri: str = Field(
        ...,
        min_length=1,
        description="MongoDB connection string",
    )
    db_name: str = Field(
        ...,
        min_length=1,
        description="Database holding the statement collection",
    )
    collection_name: str = Field(
        ...,
        min_length=1,
        description="Collection holding xAPI statements",
    )
    verbs_collection: str = Field(
        default="verbs",
        description="Collection used by register-verb",
    )
    activity_types_collection: str = Field(
        default="activityTypes",
        description="Collection used by register-activity-type",
    )
    server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long pymongo waits for a reachable server",
    )

    # ========================================
    # Health & Maintenance
    # ========================================
    health_max_storage_size: int = Field(
        default=1_000_000_000,
        description="Storage size (bytes) above which check-health warns",
    )
    mongodump_bin: str = Field(
        default="mongodump",
        description="Path to the mongodump executable",
    )
    mongorestore_bin: str = Field(
        default="mongorestore",
        description="Path to the mongorestore executable",
    )

    # ========================================
    # Output
    # ========================================
    export_dir: str = Field(
        default=".",
        description="Directory where export-statements writes its file",
    )

    # ========================================
    # Logging & Behaviour
    # ========================================
    log_level: str = Field(
        default="INFO",
        description="Console log level",
    )
    error_log_file: str = Field(
        default="error.log",
        description="JSON-lines file receiving ERROR records",
    )
    strict_exit_codes: bool = Field(
        default=False,
        description="Exit with code 1 when a command reports a failure",
    )


def _variable(item: dict) -> str:
    return str(item["loc"][0]).upper() if item.get("loc") else ""


def _is_missing(item: dict) -> bool:
    # an empty required value counts as unset
    return item.get("type") == "missing" or _variable(item) in REQUIRED_VARIABLES


def missing_variables(error: ValidationError) -> list[str]:
    """Environment variables a settings ValidationError reports as unset."""
    return [_variable(item) for item in error.errors() if _is_missing(item)]


def invalid_variables(error: ValidationError) -> list[str]:
    """Set-but-unusable variables, as ``NAME: reason`` lines."""
    return [
        f"{_variable(item)}: {item.get('msg', 'invalid value')}"
        for item in error.errors()
        if not _is_missing(item)
    ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
