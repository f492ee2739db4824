"""Tests for pipeline sequencing, gating and results."""

import dataclasses

import pytest

from promoter.constants import MSG_DRY_RUN
from promoter.models.deployment import PipelineStage, StepStatus
from promoter.models.options import SyncOptions
from promoter.services.orchestrator import DeploymentOrchestrator

PROPERTIES_ONLY = dict(
    include_blog=False,
    include_news=False,
    include_market_reports=False,
    include_email_templates=False,
)


def script_of(executor) -> str:
    (script,) = executor.uploads.values()
    return script


class TestSyncDatabase:
    def test_three_property_rows_are_imported(self, orchestrator, executor):
        result = orchestrator.sync_database(SyncOptions(**PROPERTIES_ONLY))

        assert result.success
        assert result.message == "Database synchronization completed successfully"
        assert "✅ Exported 3 records from development" in result.details
        assert "✅ Data imported to production successfully" in result.details

        script = script_of(executor)
        assert script.count("INSERT INTO `properties`") == 3
        assert "'O''Neil Cottage'" in script

    def test_backup_runs_before_import(self, orchestrator, executor):
        orchestrator.sync_database(SyncOptions(**PROPERTIES_ONLY))

        assert executor.kinds == ["run", "upload", "run"]
        assert "mysqldump" in executor.commands[0]
        assert " mysql " in executor.commands[1]

    def test_backup_failure_aborts_before_export_and_import(self, orchestrator, executor):
        executor.respond("mysqldump", returncode=2, stderr="mysqldump: Got error: 1045: Access denied")

        result = orchestrator.sync_database(SyncOptions())

        assert not result.success
        assert executor.uploads == {}
        assert executor.kinds == ["run"]
        assert not any("Exported" in line for line in result.details)
        assert result.errors == ("❌ Backup failed: mysqldump: Got error: 1045: Access denied",)

    def test_without_backup(self, orchestrator, executor):
        orchestrator.sync_database(SyncOptions(backup_first=False, **PROPERTIES_ONLY))
        assert not any("mysqldump" in command for command in executor.commands)

    def test_dry_run_exports_but_touches_nothing(self, orchestrator, executor):
        result = orchestrator.sync_database(SyncOptions(dry_run=True))

        assert result.success
        assert executor.calls == []
        assert "✅ Exported 5 records from development" in result.details
        assert MSG_DRY_RUN in result.details

    def test_export_failure_is_recorded(self, config, executor):
        orchestrator = DeploymentOrchestrator(config, executor, engine=None)

        result = orchestrator.sync_database(SyncOptions(backup_first=False))

        assert not result.success
        assert "Development database not configured" in result.errors[0]
        assert executor.uploads == {}

    def test_results_are_recorded_in_history(self, orchestrator):
        orchestrator.sync_database(SyncOptions(dry_run=True))
        orchestrator.sync_database(SyncOptions(dry_run=True))

        assert len(orchestrator.history) == 2
        assert orchestrator.history.total_count == 2


class TestFullDeployment:
    def test_stages_run_in_order(self, orchestrator, executor):
        result = orchestrator.full_deployment(SyncOptions(**PROPERTIES_ONLY))

        assert result.success
        assert executor.kinds == ["run", "run", "upload", "run", "mirror", "mirror", "run"]
        probe, dump, load, build = executor.commands
        assert probe == "echo 'Connection successful'"
        assert "mysqldump" in dump
        assert " mysql " in load
        assert "npm run build" in build

    def test_probe_failure_reports_only_connectivity(self, orchestrator, executor):
        executor.respond(
            "Connection successful",
            returncode=255,
            stderr="ssh: connect to host prod.example.com port 22: Connection refused",
        )

        result = orchestrator.full_deployment(SyncOptions())

        assert not result.success
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Connection failed: connection refused")
        assert len(executor.calls) == 1

    def test_dry_run_purity(self, orchestrator, executor):
        result = orchestrator.full_deployment(SyncOptions(dry_run=True))

        assert result.success
        assert result.message == "Dry run completed successfully"
        assert executor.uploads == {}
        assert executor.commands == ["echo 'Connection successful'"]
        assert executor.mirrors and all(mirror["dry_run"] for mirror in executor.mirrors)

    def test_file_sync_runs_after_database_failure(self, orchestrator, executor):
        executor.respond(" mysql ", returncode=1, stderr="ERROR 2006: MySQL server has gone away")

        result = orchestrator.full_deployment(SyncOptions(**PROPERTIES_ONLY))

        assert not result.success
        assert result.message == "Deployment completed with errors"
        assert "mirror" in executor.kinds
        assert any("Remote SQL execution failed" in error for error in result.errors)

    def test_without_files_only_uploads_are_left_out(self, orchestrator, executor):
        result = orchestrator.full_deployment(SyncOptions(include_files=False, **PROPERTIES_ONLY))

        assert result.success
        (code,) = executor.mirrors
        assert code["destination"] == "/var/www/site"
        assert "npm run build" in executor.commands[-1]
        assert "ℹ️" not in " ".join(result.details)

    def test_uploads_follow_code_when_files_included(self, orchestrator, executor):
        orchestrator.full_deployment(SyncOptions(**PROPERTIES_ONLY))

        assert [mirror["destination"] for mirror in executor.mirrors] == [
            "/var/www/site",
            "/var/www/site/public/uploads",
        ]

    def test_listener_sees_every_stage(self, orchestrator):
        events = []

        orchestrator.full_deployment(
            SyncOptions(**PROPERTIES_ONLY), listener=lambda stage, status: events.append((stage, status))
        )

        assert events == [
            (PipelineStage.CONNECTIVITY, StepStatus.RUNNING),
            (PipelineStage.CONNECTIVITY, StepStatus.COMPLETED),
            (PipelineStage.BACKUP, StepStatus.RUNNING),
            (PipelineStage.BACKUP, StepStatus.COMPLETED),
            (PipelineStage.DATABASE, StepStatus.RUNNING),
            (PipelineStage.DATABASE, StepStatus.COMPLETED),
            (PipelineStage.FILES, StepStatus.RUNNING),
            (PipelineStage.FILES, StepStatus.COMPLETED),
        ]

    def test_result_is_immutable(self, orchestrator):
        result = orchestrator.full_deployment(SyncOptions(dry_run=True))

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.success = False
        assert isinstance(result.details, tuple)
        assert isinstance(result.errors, tuple)


class TestReadOnlyViews:
    def test_system_status(self, orchestrator, executor):
        orchestrator.sync_database(SyncOptions(dry_run=True))

        status = orchestrator.get_system_status()

        assert status["production"]["connected"]
        assert status["production"]["configured"]
        assert status["development"]["pathExists"]
        assert status["development"]["databaseConnected"]
        assert status["totalDeployments"] == 1
        assert status["lastDeployment"] is not None
        assert executor.commands == ["echo 'Connection successful'"]

    def test_pre_checks_pass(self, orchestrator, executor):
        executor.respond("df -h", stdout="/dev/sda1  50G  20G  30G  40% /\n")

        report = orchestrator.pre_deployment_checks()

        assert report.all_passed
        assert report.checks["productionPath"] == "/var/www/site"
        assert report.checks["remoteTools"] == "rsync, mysql, mysqldump, npm"
        assert report.warnings == []

    def test_pre_checks_flag_missing_tools_and_full_disk(self, orchestrator, executor):
        executor.respond("df -h", stdout="/dev/sda1  50G  48G  2G  96% /\n")
        executor.respond("command -v", stdout="mysqldump\n")

        report = orchestrator.pre_deployment_checks()

        assert not report.all_passed
        assert report.warnings == ["Production disk is 96% full"]
        assert report.errors == ["Missing tools on production: mysqldump"]

    def test_pre_checks_skip_remote_when_unreachable(self, orchestrator, executor):
        executor.respond("Connection successful", returncode=255, stderr="Connection timed out")

        report = orchestrator.pre_deployment_checks()

        assert not report.all_passed
        assert report.checks["productionConnection"] == "failed"
        assert "diskSpace" not in report.checks
        assert len(executor.calls) == 1
