"""Code and uploads mirroring to production."""

import shlex
from typing import Optional

from promoter.constants import (
    MSG_DRY_RUN,
    REMOTE_LOGS_DIR,
    RSYNC_EXCLUDES,
    UPLOADS_DIR,
)
from promoter.exceptions import FileSyncError, SSHError
from promoter.logger import DeployLogger
from promoter.models.config import DeploymentConfig
from promoter.models.options import FileSyncOptions
from promoter.models.results import DeploymentResult, RemoteResult, ResultBuilder
from promoter.services.remote_executor import RemoteExecutor


def count_changes(result: RemoteResult) -> int:
    """Number of itemized entries rsync reported."""
    return len([line for line in result.stdout.splitlines() if line.strip()])


class FileSyncEngine:
    """
    Mirrors the development tree onto production.

    Real runs finish with a remote install, build and permission pass;
    dry runs only ask rsync what it would transfer.
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

    def get_post_sync_command(self) -> str:
        """Install, build and normalize ownership/permissions in one shell line."""
        remote_path = shlex.quote(self.config.production.remote_path or "")
        group = shlex.quote(self.config.service_group)
        commands = [
            f"cd {remote_path}",
            self.config.install_command,
            self.config.build_command,
            f"chown -R $(whoami):{group} .",
            "chmod -R 755 .",
            f"mkdir -p {UPLOADS_DIR}",
            f"chmod -R 775 {UPLOADS_DIR}",
            f"mkdir -p {REMOTE_LOGS_DIR}",
            f"chmod 755 {REMOTE_LOGS_DIR}",
        ]
        return " && ".join(commands)

    def sync_files(self, options: FileSyncOptions) -> DeploymentResult:
        """Mirror code (and optionally uploads), then install and build."""
        builder = ResultBuilder()

        try:
            self._sync(options, builder)
        except (FileSyncError, SSHError) as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            builder.error(f"❌ {e.summary}")
            return builder.build(False, f"File sync failed: {e.message}")

        if options.dry_run:
            return builder.build(True, "File sync dry run completed successfully")
        return builder.build(True, "Files synchronized successfully")

    def _sync(self, options: FileSyncOptions, builder: ResultBuilder) -> None:
        production = self.config.production
        local_path = self.config.development.local_path_expanded

        if not production.has_ssh_target or not production.remote_path:
            raise FileSyncError(
                "Production target not configured",
                context="Set PROD_HOST, PROD_USER and PROD_PATH",
            )
        if local_path is None or not local_path.is_dir():
            raise FileSyncError(
                "Development path is not accessible",
                context=f"DEV_PATH={self.config.development.local_path}",
            )

        verb = "would change" if options.dry_run else "changed"

        code = self.executor.mirror(
            local_path,
            production.remote_path,
            excludes=RSYNC_EXCLUDES,
            dry_run=options.dry_run,
        )
        if code.is_failure:
            raise FileSyncError("Code sync failed", context=code.error_summary)
        builder.detail(f"✅ Code files synchronized ({count_changes(code)} entries {verb})")

        if options.include_uploads:
            uploads = local_path / UPLOADS_DIR
            if not uploads.is_dir():
                builder.detail(f"ℹ️ No {UPLOADS_DIR} directory in development, uploads skipped")
            else:
                media = self.executor.mirror(
                    uploads,
                    f"{production.remote_path}/{UPLOADS_DIR}",
                    dry_run=options.dry_run,
                )
                if media.is_failure:
                    raise FileSyncError("Uploads sync failed", context=media.error_summary)
                builder.detail(
                    f"✅ Upload files synchronized ({count_changes(media)} entries {verb})"
                )

        if options.dry_run:
            builder.detail(MSG_DRY_RUN)
            return

        post = self.executor.run(self.get_post_sync_command())
        if post.is_failure:
            raise FileSyncError(
                "Remote install/build failed", context=post.error_summary
            )
        builder.detail("✅ Dependencies installed, built, and permissions set")
