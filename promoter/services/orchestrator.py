"""
Deployment Orchestrator

Sequences the pipeline stages (connectivity, backup, database, files)
and folds their outcomes into immutable DeploymentResults.
"""

import shlex
from typing import Any, Callable, Dict, Optional

from sqlalchemy.engine import Engine

from promoter.constants import MSG_DRY_RUN, REMOTE_TOOLS
from promoter.exceptions import ExportError, PromoterError
from promoter.logger import DeployLogger
from promoter.models.config import DeploymentConfig
from promoter.models.deployment import PipelineStage, PreflightReport, StepStatus
from promoter.models.options import FileSyncOptions, SyncOptions
from promoter.models.results import (
    BackupResult,
    ConnectionCheck,
    DeploymentResult,
    ResultBuilder,
)
from promoter.services.backup_service import BackupService
from promoter.services.connection_probe import ConnectionProbe
from promoter.services.data_exporter import DataExporter, create_development_engine
from promoter.services.data_importer import DataImporter
from promoter.services.file_sync import FileSyncEngine
from promoter.services.history_store import DeploymentHistoryStore
from promoter.services.remote_executor import RemoteExecutor, SSHExecutor

StageListener = Callable[[PipelineStage, StepStatus], None]

DISK_USAGE_WARNING_PERCENT = 90


def _notify(
    listener: Optional[StageListener], stage: PipelineStage, status: StepStatus
) -> None:
    if listener is not None:
        listener(stage, status)


class DeploymentOrchestrator:
    """
    Runs database syncs, file syncs and full deployments.

    Expected failures never raise: they end up in the result's errors.
    Every top-level call is recorded in the history store.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        executor: RemoteExecutor,
        engine: Optional[Engine] = None,
        history: Optional[DeploymentHistoryStore] = None,
        logger: Optional[DeployLogger] = None,
    ):
        self.config = config
        self.executor = executor
        self.logger = logger
        self.history = history if history is not None else DeploymentHistoryStore()

        self.probe = ConnectionProbe(config, executor, logger)
        self.backups = BackupService(config, executor, logger)
        self.exporter = DataExporter(engine, logger) if engine is not None else None
        self.importer = DataImporter(config, executor, logger)
        self.files = FileSyncEngine(config, executor, logger)

    # ------------------------------------------------------------------
    # Single operations
    # ------------------------------------------------------------------

    def test_connection(self) -> ConnectionCheck:
        return self.probe.test_connection()

    def create_backup(self) -> BackupResult:
        return self.backups.create_production_backup()

    def sync_database(self, options: Optional[SyncOptions] = None) -> DeploymentResult:
        """Backup (optional), export and import. Recorded in history."""
        result = self._sync_database(options or SyncOptions())
        self.history.add(result)
        return result

    def sync_files(self, options: Optional[FileSyncOptions] = None) -> DeploymentResult:
        """Mirror code and uploads. Recorded in history."""
        if self.logger:
            self.logger.step("File sync")
        result = self.files.sync_files(options or FileSyncOptions())
        self.history.add(result)
        return result

    def full_deployment(
        self,
        options: Optional[SyncOptions] = None,
        listener: Optional[StageListener] = None,
    ) -> DeploymentResult:
        """
        Connectivity check, then database sync, then file sync.

        An unreachable host aborts with exactly one error. Once the probe
        passes, both sync stages always run.
        """
        options = options or SyncOptions()
        builder = ResultBuilder()

        if self.logger:
            self.logger.step("Checking production connectivity")
        _notify(listener, PipelineStage.CONNECTIVITY, StepStatus.RUNNING)
        check = self.probe.test_connection()
        if not check.success:
            _notify(listener, PipelineStage.CONNECTIVITY, StepStatus.FAILED)
            builder.error(check.message)
            result = builder.build(False, "Deployment aborted: production server unreachable")
            self.history.add(result)
            return result

        _notify(listener, PipelineStage.CONNECTIVITY, StepStatus.COMPLETED)
        builder.detail("✅ Production server connection verified")

        database = self._sync_database(options, listener)
        builder.merge(database)

        # include_files only gates the uploads mirror; code always ships
        if self.logger:
            self.logger.step("File sync")
        _notify(listener, PipelineStage.FILES, StepStatus.RUNNING)
        files = self.files.sync_files(
            FileSyncOptions(include_uploads=options.include_files, dry_run=options.dry_run)
        )
        builder.merge(files)
        _notify(
            listener,
            PipelineStage.FILES,
            StepStatus.COMPLETED if files.success else StepStatus.FAILED,
        )

        if options.dry_run:
            result = builder.build(True, "Dry run completed successfully")
        elif database.success and files.success:
            result = builder.build(True, "Full deployment completed successfully")
        else:
            result = builder.build(False, "Deployment completed with errors")

        self.history.add(result)
        return result

    def _sync_database(
        self, options: SyncOptions, listener: Optional[StageListener] = None
    ) -> DeploymentResult:
        builder = ResultBuilder()

        if not options.backup_first:
            _notify(listener, PipelineStage.BACKUP, StepStatus.SKIPPED)
        elif options.dry_run:
            builder.detail("⏭️ Production backup skipped (dry run)")
            _notify(listener, PipelineStage.BACKUP, StepStatus.SKIPPED)
        else:
            if self.logger:
                self.logger.step("Backing up production database")
            _notify(listener, PipelineStage.BACKUP, StepStatus.RUNNING)
            backup = self.backups.create_production_backup()
            if not backup.success:
                _notify(listener, PipelineStage.BACKUP, StepStatus.FAILED)
                _notify(listener, PipelineStage.DATABASE, StepStatus.SKIPPED)
                builder.error(f"❌ {backup.message}")
                return builder.build(False, "Database sync aborted: production backup failed")
            builder.detail(f"✅ Production backup created: {backup.backup_file}")
            _notify(listener, PipelineStage.BACKUP, StepStatus.COMPLETED)

        if self.logger:
            self.logger.step("Synchronizing database")
        _notify(listener, PipelineStage.DATABASE, StepStatus.RUNNING)

        try:
            snapshot = self._require_exporter().export_development_data(options)
            builder.detail(f"✅ Exported {snapshot.total_records} records from development")
            for key, count in snapshot.counts.items():
                builder.detail(f"   • {key}: {count}")

            if options.dry_run:
                builder.detail(MSG_DRY_RUN)
            else:
                report = self.importer.import_to_production(snapshot, options)
                if self.logger:
                    self.logger.log(f"Applied {report.statements} statements from {report.remote_path}")
                builder.detail("✅ Data imported to production successfully")
        except PromoterError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            _notify(listener, PipelineStage.DATABASE, StepStatus.FAILED)
            builder.error(f"❌ {e.summary}")
            return builder.build(False, f"Database sync failed: {e.message}")

        _notify(listener, PipelineStage.DATABASE, StepStatus.COMPLETED)
        if options.dry_run:
            return builder.build(True, "Dry run completed successfully")
        return builder.build(True, "Database synchronization completed successfully")

    def _require_exporter(self) -> DataExporter:
        if self.exporter is None:
            raise ExportError(
                "Development database not configured",
                context="Set DEV_DATABASE_URL or DB_NAME, DB_USER, DB_PASSWORD",
            )
        return self.exporter

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def get_system_status(self) -> Dict[str, Any]:
        """Reachability plus configuration and history summary."""
        check = self.probe.test_connection()
        latest = self.history.latest
        local_path = self.config.development.local_path_expanded

        return {
            "production": {
                "connected": check.success,
                "message": check.message,
                "host": self.config.production.host,
                "path": self.config.production.remote_path,
                "configured": self.config.production.is_configured,
            },
            "development": {
                "path": self.config.development.local_path,
                "pathExists": bool(local_path and local_path.is_dir()),
                "database": self.config.development.database.name or None,
                "databaseConnected": self.exporter.ping() if self.exporter else False,
            },
            "lastDeployment": latest.timestamp.isoformat() if latest else None,
            "totalDeployments": self.history.total_count,
        }

    def pre_deployment_checks(self) -> PreflightReport:
        """Verify both environments before a deployment is started."""
        report = PreflightReport()

        check = self.probe.test_connection()
        if check.success:
            report.passed("productionConnection", "ok")
            self._check_remote(report)
        else:
            report.failed("productionConnection", "failed", check.message)

        local_path = self.config.development.local_path_expanded
        if local_path and local_path.is_dir():
            report.passed("developmentPath", str(local_path))
        else:
            report.failed(
                "developmentPath",
                "missing",
                f"Development path not found: {self.config.development.local_path}",
            )

        if self.exporter is None:
            report.failed(
                "developmentDatabase", "not configured", "Development database not configured"
            )
        elif self.exporter.ping():
            report.passed("developmentDatabase", "ok")
        else:
            report.failed(
                "developmentDatabase", "unreachable", "Development database is not reachable"
            )

        return report

    def _check_remote(self, report: PreflightReport) -> None:
        remote_path = self.config.production.remote_path

        try:
            disk = self.executor.run(f"df -h {shlex.quote(remote_path or '/')} | tail -1")
            if disk.is_success and disk.stdout.strip():
                usage = self._disk_usage(disk.stdout)
                report.passed("diskSpace", disk.stdout.strip())
                if usage is not None and usage >= DISK_USAGE_WARNING_PERCENT:
                    if self.logger:
                        self.logger.warning(f"Production disk is {usage}% full")
                    report.warn(
                        "diskSpace",
                        disk.stdout.strip(),
                        f"Production disk is {usage}% full",
                    )
            else:
                report.warn("diskSpace", "unknown", "Could not determine production disk space")

            if not remote_path:
                report.failed("productionPath", "not configured", "PROD_PATH is not set")
            else:
                exists = self.executor.run(f"test -d {shlex.quote(remote_path)}")
                if exists.is_success:
                    report.passed("productionPath", remote_path)
                else:
                    report.failed(
                        "productionPath",
                        "missing",
                        f"Production path does not exist: {remote_path}",
                    )

            tools = list(REMOTE_TOOLS)
            install_parts = shlex.split(self.config.install_command)
            if install_parts and install_parts[0] not in tools:
                tools.append(install_parts[0])
            probe = " ; ".join(
                f"command -v {shlex.quote(tool)} >/dev/null 2>&1 || echo {shlex.quote(tool)}"
                for tool in tools
            )
            found = self.executor.run(probe)
            missing = [line.strip() for line in found.stdout.splitlines() if line.strip()]
            if missing:
                report.failed(
                    "remoteTools",
                    "missing: " + ", ".join(missing),
                    f"Missing tools on production: {', '.join(missing)}",
                )
            else:
                report.passed("remoteTools", ", ".join(tools))
        except PromoterError as e:
            report.failed("remoteChecks", "error", e.summary)

    @staticmethod
    def _disk_usage(df_line: str) -> Optional[int]:
        for field in df_line.split():
            if field.endswith("%") and field[:-1].isdigit():
                return int(field[:-1])
        return None


def build_orchestrator(
    config: DeploymentConfig,
    history: Optional[DeploymentHistoryStore] = None,
    logger: Optional[DeployLogger] = None,
) -> DeploymentOrchestrator:
    """Wire the SSH executor and development engine for a config."""
    executor = SSHExecutor(
        config.connection(),
        default_timeout=config.command_timeout,
        logger=logger,
    )
    database = config.development.database
    engine = create_development_engine(database) if (database.url or database.name) else None
    return DeploymentOrchestrator(
        config, executor, engine=engine, history=history, logger=logger
    )
