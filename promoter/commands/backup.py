"""Promoter CLI - Backup command"""

import click

from promoter.base import BaseCommand


class BackupCommand(BaseCommand):
    """Dump the production database to the remote temp directory."""

    def execute(self) -> None:
        logger = self.init_logger("backup")

        self.show_header(
            title="Production Backup",
            details={"Database": self.config.production.database.name or "-"},
        )

        if logger:
            logger.step("Dumping production database")
        result = self.get_orchestrator().create_backup()

        if self.json_output:
            self.output_json(
                {
                    "success": result.success,
                    "message": result.message,
                    "backupFile": result.backup_file,
                    "remotePath": result.remote_path,
                },
                exit_code=0 if result.success else 1,
            )
            return

        if result.success:
            logger.success(result.message)
            self.print_dim(f"Remote path: {result.remote_path}")
        else:
            logger.log_error(result.message)
        self.finish(result.success)


@click.command()
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def backup(verbose, json_output):
    """
    Back up the production database

    The dump is written to the production host's temp directory.
    """
    cmd = BackupCommand(verbose=verbose, json_output=json_output)
    cmd.run()
