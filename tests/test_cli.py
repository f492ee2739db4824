"""Tests for the promoter command-line interface."""

import json

import pytest
from click.testing import CliRunner

from promoter.main import cli


class StaticLoader:
    def __init__(self, config):
        self.config = config

    def load(self):
        return self.config


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def wired(monkeypatch, config, orchestrator):
    monkeypatch.setattr(
        "promoter.base.base_command.get_config_loader", lambda: StaticLoader(config)
    )
    monkeypatch.setattr(
        "promoter.base.base_command.build_orchestrator",
        lambda config, logger=None: orchestrator,
    )


class TestCommands:
    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("deploy", "sync:database", "sync:files", "pre-check", "serve"):
            assert name in result.output

    def test_test_connection_json(self, runner):
        result = runner.invoke(cli, ["test-connection", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "success": True,
            "message": "Successfully connected to production server",
        }

    def test_test_connection_failure_exits_1(self, runner, executor):
        executor.respond("Connection successful", returncode=255, stderr="Connection refused")

        result = runner.invoke(cli, ["test-connection"])

        assert result.exit_code == 1

    def test_sync_database_dry_run(self, runner, executor):
        result = runner.invoke(cli, ["sync:database", "--dry-run", "--no-blog", "--json"])

        assert result.exit_code == 0
        body = json.loads(result.output)
        assert body["success"] is True
        assert "✅ Exported 3 records from development" in body["details"]
        assert executor.calls == []

    def test_sync_database_failure_exits_1(self, runner, executor):
        executor.respond("mysqldump", returncode=2, stderr="Access denied")

        result = runner.invoke(cli, ["sync:database"])

        assert result.exit_code == 1
        assert "Backup failed" in result.output

    def test_sync_files_dry_run(self, runner, executor):
        result = runner.invoke(cli, ["sync:files", "--dry-run", "--no-uploads", "--json"])

        assert result.exit_code == 0
        assert len(executor.mirrors) == 1
        assert executor.mirrors[0]["dry_run"] is True

    def test_backup(self, runner):
        result = runner.invoke(cli, ["backup", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["backupFile"].startswith("backup_")

    def test_deploy_dry_run(self, runner, executor):
        result = runner.invoke(cli, ["deploy", "--dry-run", "--json"])

        assert result.exit_code == 0
        body = json.loads(result.output)
        assert body["status"] == "success"
        assert body["result"]["message"] == "Dry run completed successfully"
        assert executor.uploads == {}

    def test_deploy_no_files_still_ships_code(self, runner, executor):
        result = runner.invoke(cli, ["deploy", "--no-files", "--dry-run", "--json"])

        assert result.exit_code == 0
        assert [mirror["destination"] for mirror in executor.mirrors] == ["/var/www/site"]

    def test_pre_check_json(self, runner, executor):
        executor.respond("df -h", stdout="/dev/sda1  50G  20G  30G  40% /\n")

        result = runner.invoke(cli, ["pre-check", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["allPassed"] is True

    def test_history_empty(self, runner):
        result = runner.invoke(cli, ["history", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"deployments": []}

    def test_status_json(self, runner):
        result = runner.invoke(cli, ["status", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["production"]["connected"] is True
