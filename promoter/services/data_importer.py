"""Production import of an exported development snapshot."""

import shlex
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from promoter.constants import FILE_TIMESTAMP_FORMAT, SCRIPT_FILE_PREFIX
from promoter.entities import MERGE, get_entity
from promoter.exceptions import DataImportError, SSHError
from promoter.logger import DeployLogger
from promoter.models.config import DeploymentConfig
from promoter.models.options import SyncOptions
from promoter.models.results import ExportSnapshot, ImportReport
from promoter.services.backup_service import mysql_client_args, mysql_password_env
from promoter.services.remote_executor import RemoteExecutor
from promoter.sql import SqlScript


class DataImporter:
    """
    Turns a snapshot into one SQL script and applies it on production.

    Replaced entities are truncated and re-inserted in full. Merged
    entities (users) are upserted by primary key so columns that were
    never exported, like password hashes, survive on production.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        executor: RemoteExecutor,
        logger: Optional[DeployLogger] = None,
    ):
        self.config = config
        self.executor = executor
        self.logger = logger

    def build_script(self, snapshot: ExportSnapshot, options: SyncOptions) -> SqlScript:
        script = SqlScript()
        script.comment(f"Promoter deployment script generated {datetime.now().isoformat()}")
        script.statement("SET FOREIGN_KEY_CHECKS=0")

        for key, rows in snapshot.data.items():
            entity = get_entity(key)
            if entity is None or not options.includes(entity.option):
                continue

            script.comment(f"{entity.label} Data")
            if entity.strategy == MERGE:
                for row in rows:
                    script.upsert(entity.table, row, key=entity.primary_key)
            else:
                script.truncate(entity.table)
                for row in rows:
                    script.insert(entity.table, row)

        script.statement("SET FOREIGN_KEY_CHECKS=1")
        return script

    def write_script(self, script: SqlScript, now: Optional[datetime] = None) -> Path:
        """Write the script to a timestamped local file and return its path."""
        now = now or datetime.now()
        directory = Path(self.config.scripts_dir or tempfile.gettempdir())
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{SCRIPT_FILE_PREFIX}{now.strftime(FILE_TIMESTAMP_FORMAT)}.sql"
        path.write_text(script.render(), encoding="utf-8")
        return path

    def get_import_command(self, remote_path: str) -> str:
        database = self.config.production.database
        return (
            f"{mysql_password_env(database)} mysql {mysql_client_args(database)} "
            f"--default-character-set=utf8mb4 {shlex.quote(database.name)} "
            f"< {shlex.quote(remote_path)}"
        )

    def import_to_production(
        self, snapshot: ExportSnapshot, options: SyncOptions
    ) -> ImportReport:
        """
        Generate, upload and execute the import script.

        Raises:
            DataImportError: On dry runs, missing configuration, or any
                transfer/execution failure
        """
        if options.dry_run:
            raise DataImportError("Refusing to import during a dry run")

        production = self.config.production
        if not production.has_ssh_target or not production.database.has_credentials:
            raise DataImportError(
                "Production database is not configured",
                context="Set PROD_HOST, PROD_USER, PROD_DB_NAME, PROD_DB_USER, PROD_DB_PASS",
            )

        script = self.build_script(snapshot, options)
        tables = tuple(
            entity.table
            for entity in (get_entity(key) for key in snapshot.data)
            if entity is not None and options.includes(entity.option)
        )

        local_path = self.write_script(script)
        remote_path = f"{self.config.remote_tmp_dir}/{local_path.name}"

        if self.logger:
            self.logger.log(
                f"Generated {script.statements} statements for {', '.join(tables) or 'no tables'}: {local_path}"
            )

        try:
            upload = self.executor.upload(local_path, remote_path)
            if upload.is_failure:
                raise DataImportError(
                    "Failed to upload SQL script to production",
                    context=upload.error_summary,
                )

            result = self.executor.run(self.get_import_command(remote_path))
            if result.is_failure:
                raise DataImportError(
                    "Remote SQL execution failed",
                    context=result.error_summary,
                )
        except SSHError as e:
            raise DataImportError("Import transport failed", context=e.message)

        return ImportReport(
            script_path=str(local_path),
            remote_path=remote_path,
            statements=script.statements,
            tables=tables,
        )
