"""Promoter CLI - Deploy and history commands"""

import getpass

import click
from rich.table import Table

from promoter.base import BaseCommand
from promoter.commands.sync import build_sync_options, sync_options
from promoter.models.options import SyncOptions
from promoter.services.history_store import build_deployment_store
from promoter.services.lifecycle import DeploymentLifecycleTracker
from promoter.ui_components import print_result

STATUS_STYLES = {
    "running": "yellow",
    "success": "green",
    "failed": "red",
}


class DeployCommand(BaseCommand):
    """
    Run a tracked full deployment and wait for it.

    Goes through the lifecycle tracker, so a deployment already running
    elsewhere on the same Redis store is refused.
    """

    def __init__(
        self,
        options: SyncOptions,
        triggered_by: str,
        verbose: bool = False,
        json_output: bool = False,
    ):
        super().__init__(verbose=verbose, json_output=json_output)
        self.options = options
        self.triggered_by = triggered_by

    def execute(self) -> None:
        self.init_logger("deploy")

        self.show_header(
            title="Full Deployment",
            subtitle="Dry run" if self.options.dry_run else None,
            details={
                "Target": f"{self.config.production.ssh_user}@{self.config.production.host}",
                "Triggered by": self.triggered_by,
            },
        )

        tracker = DeploymentLifecycleTracker(
            self.get_orchestrator(),
            store=build_deployment_store(self.config.redis_url),
            logger=self.logger,
        )
        try:
            started = tracker.start_deployment(self.triggered_by, self.options)
            self.print_dim(f"Deployment {started.id}")
            record = tracker.wait(started.id)
        finally:
            tracker.shutdown()

        if self.json_output:
            self.output_json(
                record.to_dict(), exit_code=0 if record.result.success else 1
            )
            return

        print_result(record.result, console=self.console)
        self.finish(record.result.success)


class HistoryCommand(BaseCommand):
    """List tracked deployments from the shared store."""

    def execute(self) -> None:
        store = build_deployment_store(self.config.redis_url)
        records = list(reversed(store.all()))

        if self.json_output:
            self.output_json({"deployments": [record.to_dict() for record in records]})
            return

        self.show_header(title="Deployment History")

        if not records:
            self.print_dim("No deployments recorded")
            if not self.config.redis_url:
                self.print_dim(
                    "History is kept by the API server; set PROMOTER_REDIS_URL to share it"
                )
            return

        table = Table(title_justify="left", padding=(0, 1))
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Status")
        table.add_column("Started", style="dim")
        table.add_column("Duration", style="dim")
        table.add_column("By")
        table.add_column("Message")

        for record in records:
            style = STATUS_STYLES.get(record.status.value, "white")
            duration = record.duration_ms
            table.add_row(
                record.id,
                f"[{style}]{record.status.value}[/{style}]",
                record.started_at.strftime("%Y-%m-%d %H:%M:%S"),
                f"{duration / 1000:.1f}s" if duration is not None else "-",
                record.triggered_by,
                record.result.message if record.result else "",
            )
        self.console.print(table)


@click.command()
@sync_options
@click.option("--no-files", is_flag=True, help="Skip the uploads mirror (code still syncs)")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def deploy(no_files, verbose, json_output, **flags):
    """
    Full deployment: connectivity, backup, database, files

    \b
    Examples:
      promoter deploy --dry-run
      promoter deploy --no-files
    """
    options = build_sync_options(include_files=not no_files, **flags)
    cmd = DeployCommand(
        options,
        triggered_by=getpass.getuser(),
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()


@click.command()
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def history(json_output):
    """
    Show recent tracked deployments, newest first
    """
    cmd = HistoryCommand(json_output=json_output)
    cmd.run()
