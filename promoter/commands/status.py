"""Promoter CLI - Status, connectivity and pre-check commands"""

import click
from rich.table import Table

from promoter.base import BaseCommand
from promoter.ui_components import key_value_table


class StatusCommand(BaseCommand):
    """Show production reachability, configuration and last deployment."""

    def execute(self) -> None:
        orchestrator = self.get_orchestrator()
        status = orchestrator.get_system_status()

        if self.json_output:
            self.output_json(status)
            return

        self.show_header(title="System Status")

        production = status["production"]
        development = status["development"]
        connected = (
            "[green]● reachable[/green]" if production["connected"] else "[red]● unreachable[/red]"
        )

        self.console.print(
            key_value_table(
                {
                    "Production host": production["host"],
                    "Production path": production["path"],
                    "Connection": connected,
                    "Configured": "yes" if production["configured"] else "no",
                    "Development path": development["path"],
                    "Development database": development["database"],
                    "Database reachable": "yes" if development["databaseConnected"] else "no",
                    "Last deployment": status["lastDeployment"],
                    "Deployments this session": status["totalDeployments"],
                },
                title="Promoter",
            )
        )
        if not production["connected"]:
            self.print_dim(production["message"])


class TestConnectionCommand(BaseCommand):
    """Probe the production host over SSH."""

    def execute(self) -> None:
        check = self.get_orchestrator().test_connection()

        if self.json_output:
            self.output_json(
                {"success": check.success, "message": check.message},
                exit_code=0 if check.success else 1,
            )
            return

        if check.success:
            self.print_success(check.message)
        else:
            self.exit_with_error(check.message)


class PreCheckCommand(BaseCommand):
    """Run pre-deployment checks against both environments."""

    def execute(self) -> None:
        self.init_logger("pre-check")
        report = self.get_orchestrator().pre_deployment_checks()

        if self.json_output:
            self.output_json(report.to_dict(), exit_code=0 if report.all_passed else 1)
            return

        self.show_header(title="Pre-deployment Checks")

        table = Table(title_justify="left", padding=(0, 1))
        table.add_column("Check", style="cyan", no_wrap=True)
        table.add_column("Result")
        for name, value in report.checks.items():
            table.add_row(name, value)
        self.console.print(table)

        for warning in report.warnings:
            self.print_warning(warning)
        for error in report.errors:
            self.print_error(error)

        if report.all_passed:
            self.print_success("All checks passed")
        self.finish(report.all_passed)


@click.command()
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def status(verbose, json_output):
    """
    Show production and development status

    \b
    Examples:
      promoter status
      promoter status --json
    """
    cmd = StatusCommand(verbose=verbose, json_output=json_output)
    cmd.run()


@click.command(name="test-connection")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def test_connection(json_output):
    """
    Test SSH connectivity to production
    """
    cmd = TestConnectionCommand(json_output=json_output)
    cmd.run()


@click.command(name="pre-check")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def pre_check(verbose, json_output):
    """
    Verify both environments before deploying

    \b
    Checks:
      - production connectivity and disk space
      - production path and remote tools (rsync, mysql, mysqldump)
      - development path and database
    """
    cmd = PreCheckCommand(verbose=verbose, json_output=json_output)
    cmd.run()
