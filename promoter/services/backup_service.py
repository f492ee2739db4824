"""Production database backups."""

import shlex
from datetime import datetime
from typing import Optional, Tuple

from promoter.constants import BACKUP_FILE_PREFIX, FILE_TIMESTAMP_FORMAT
from promoter.exceptions import BackupError, SSHError
from promoter.logger import DeployLogger
from promoter.models.config import DatabaseConfig, DeploymentConfig
from promoter.models.results import BackupResult
from promoter.services.remote_executor import RemoteExecutor


def mysql_client_args(database: DatabaseConfig) -> str:
    """Connection flags shared by mysql and mysqldump (no password)."""
    return " ".join(
        [
            "-h",
            shlex.quote(database.host),
            "-P",
            str(database.port),
            "-u",
            shlex.quote(database.user),
        ]
    )


def mysql_password_env(database: DatabaseConfig) -> str:
    """Pass the password through the environment, never argv."""
    return f"MYSQL_PWD={shlex.quote(database.password)}"


class BackupService:
    """Dumps the whole production database to the remote temp directory."""

    def __init__(
        self,
        config: DeploymentConfig,
        executor: RemoteExecutor,
        logger: Optional[DeployLogger] = None,
    ):
        self.config = config
        self.executor = executor
        self.logger = logger

    @staticmethod
    def backup_filename(now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        return f"{BACKUP_FILE_PREFIX}{now.strftime(FILE_TIMESTAMP_FORMAT)}.sql"

    def get_dump_command(self, remote_path: str) -> str:
        database = self.config.production.database
        return (
            f"{mysql_password_env(database)} mysqldump --single-transaction "
            f"{mysql_client_args(database)} {shlex.quote(database.name)} "
            f"> {shlex.quote(remote_path)}"
        )

    def create_production_backup(self) -> BackupResult:
        """
        Dump production to <remote_tmp_dir>/backup_<timestamp>.sql.

        The dump stays on the production host. Never raises.
        """
        try:
            backup_file, remote_path = self._dump()
        except (BackupError, SSHError) as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            return BackupResult(success=False, message=f"Backup failed: {e.message}")

        return BackupResult(
            success=True,
            backup_file=backup_file,
            remote_path=remote_path,
            message=f"Production database backup created: {backup_file}",
        )

    def _dump(self) -> Tuple[str, str]:
        production = self.config.production
        if not production.has_ssh_target:
            raise BackupError("production host not configured")
        if not production.database.has_credentials:
            raise BackupError(
                "production database credentials not configured (PROD_DB_NAME, PROD_DB_USER, PROD_DB_PASS)"
            )

        backup_file = self.backup_filename()
        remote_path = f"{self.config.remote_tmp_dir}/{backup_file}"

        if self.logger:
            self.logger.log(f"Dumping {production.database.name} to {remote_path}")

        result = self.executor.run(self.get_dump_command(remote_path))
        if result.is_failure:
            raise BackupError(result.error_summary)
        return backup_file, remote_path
