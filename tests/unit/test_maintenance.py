"""
Unit tests for maintenance handlers: health, backup, restore, reset.

mongodump/mongorestore are never executed; a fake runner records the
argument list instead.
"""

import subprocess
from unittest.mock import Mock

from empress.handlers import maintenance


class TestCheckHealth:
    """Tests for check-health."""

    def test_healthy(self, fake_gateway):
        fake_gateway.stats = {"storageSize": 100}

        result = maintenance.check_health(fake_gateway, 1000)

        assert result.ok is True
        assert result.message == "Database health is good."
        assert result.data["healthy"] is True

    def test_over_limit(self, fake_gateway):
        fake_gateway.stats = {"storageSize": 5000}

        result = maintenance.check_health(fake_gateway, 1000)

        assert result.ok is True
        assert result.data["healthy"] is False
        assert "exceeds recommended limit" in result.message


class TestBackupRestore:
    """Tests for backup and restore argument lists."""

    def test_backup_arguments(self, env_settings):
        runner = Mock()

        result = maintenance.backup(env_settings, "/tmp/dump; rm -rf /", runner=runner)

        assert result.ok is True
        args = runner.call_args.args[0]
        assert args == [
            "mongodump",
            "--uri=mongodb://localhost:27017",
            "--db=lrs",
            "--out=/tmp/dump; rm -rf /",
        ]
        assert runner.call_args.kwargs["check"] is True
        assert "shell" not in runner.call_args.kwargs

    def test_restore_arguments(self, env_settings):
        runner = Mock()

        result = maintenance.restore(env_settings, "backups", runner=runner)

        assert result.ok is True
        assert runner.call_args.args[0][-1].replace("\\", "/") == "backups/lrs"
        assert runner.call_args.args[0][0] == "mongorestore"

    def test_missing_tool(self, env_settings):
        runner = Mock(side_effect=FileNotFoundError("mongodump"))

        result = maintenance.backup(env_settings, "out", runner=runner)

        assert result.ok is False
        assert result.error == "ExternalToolError"
        assert "not found" in result.message

    def test_tool_not_executable(self, env_settings):
        runner = Mock(side_effect=PermissionError(13, "Permission denied"))

        result = maintenance.backup(env_settings, "out", runner=runner)

        assert result.ok is False
        assert result.error == "ExternalToolError"
        assert "Cannot run mongodump" in result.message

    def test_tool_failure(self, env_settings):
        runner = Mock(side_effect=subprocess.CalledProcessError(1, ["mongorestore"], stderr="no such dir"))

        result = maintenance.restore(env_settings, "missing", runner=runner)

        assert result.ok is False
        assert "no such dir" in result.message


class TestResetDb:
    """Tests for reset-db confirmation handling."""

    def test_declined_deletes_nothing(self, fake_gateway, sample_statement):
        fake_gateway.insert_one(sample_statement)

        result = maintenance.reset_db(fake_gateway, confirm=lambda message: False)

        assert result.ok is True
        assert result.message == "Database reset cancelled."
        assert result.data == {"deleted": 0}
        assert "delete_all" not in fake_gateway.operations()
        assert fake_gateway.count_all() == 1

    def test_confirmed_deletes_everything(self, fake_gateway, sample_statement):
        fake_gateway.insert_one(dict(sample_statement))
        fake_gateway.insert_one(dict(sample_statement))

        result = maintenance.reset_db(fake_gateway, confirm=lambda message: True)

        assert result.data == {"deleted": 2}
        assert fake_gateway.count_all() == 0

    def test_prompt_text(self, fake_gateway):
        prompts = []

        maintenance.reset_db(fake_gateway, confirm=lambda message: prompts.append(message) or False)

        assert prompts == [maintenance.RESET_PROMPT]
