"""Promoter CLI - Database and file sync commands"""

import click

from promoter.base import BaseCommand
from promoter.models.options import FileSyncOptions, SyncOptions
from promoter.ui_components import print_result


def sync_options(func):
    """Shared SyncOptions flags for sync:database and deploy."""
    flags = [
        click.option("--properties/--no-properties", default=True, help="Sync properties"),
        click.option("--blog/--no-blog", default=True, help="Sync blog posts"),
        click.option("--news/--no-news", default=True, help="Sync featured news"),
        click.option(
            "--market-reports/--no-market-reports", default=True, help="Sync market reports"
        ),
        click.option(
            "--email-templates/--no-email-templates",
            default=True,
            help="Sync email templates and campaigns",
        ),
        click.option(
            "--include-users", is_flag=True, help="Sync users (never password hashes)"
        ),
        click.option("--no-backup", is_flag=True, help="Skip the production backup"),
        click.option("--dry-run", is_flag=True, help="Export only, change nothing"),
    ]
    for flag in reversed(flags):
        func = flag(func)
    return func


def build_sync_options(
    properties=True,
    blog=True,
    news=True,
    market_reports=True,
    email_templates=True,
    include_users=False,
    no_backup=False,
    dry_run=False,
    include_files=True,
) -> SyncOptions:
    return SyncOptions(
        include_properties=properties,
        include_blog=blog,
        include_news=news,
        include_market_reports=market_reports,
        include_email_templates=email_templates,
        include_users=include_users,
        include_files=include_files,
        backup_first=not no_backup,
        dry_run=dry_run,
    )


class SyncDatabaseCommand(BaseCommand):
    """Replicate development content into production."""

    def __init__(self, options: SyncOptions, verbose: bool = False, json_output: bool = False):
        super().__init__(verbose=verbose, json_output=json_output)
        self.options = options

    def execute(self) -> None:
        self.init_logger("sync-database")

        enabled = [name for name, value in self.options.to_dict().items() if value]
        self.show_header(
            title="Database Sync",
            subtitle="Dry run" if self.options.dry_run else None,
            details={"Enabled": ", ".join(enabled)},
        )

        result = self.get_orchestrator().sync_database(self.options)

        if self.json_output:
            self.output_json(result.to_dict(), exit_code=0 if result.success else 1)
            return

        print_result(result, console=self.console)
        self.finish(result.success)


class SyncFilesCommand(BaseCommand):
    """Mirror code and uploads onto production."""

    def __init__(
        self, options: FileSyncOptions, verbose: bool = False, json_output: bool = False
    ):
        super().__init__(verbose=verbose, json_output=json_output)
        self.options = options

    def execute(self) -> None:
        self.init_logger("sync-files")

        self.show_header(
            title="File Sync",
            subtitle="Dry run" if self.options.dry_run else None,
            details={
                "Source": self.config.development.local_path or "-",
                "Target": self.config.production.remote_path or "-",
            },
        )

        result = self.get_orchestrator().sync_files(self.options)

        if self.json_output:
            self.output_json(result.to_dict(), exit_code=0 if result.success else 1)
            return

        print_result(result, console=self.console)
        self.finish(result.success)


@click.command(name="sync:database")
@sync_options
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def sync_database(verbose, json_output, **flags):
    """
    Sync development content into production

    \b
    Examples:
      promoter sync:database --dry-run
      promoter sync:database --no-blog --include-users
    """
    cmd = SyncDatabaseCommand(
        build_sync_options(**flags), verbose=verbose, json_output=json_output
    )
    cmd.run()


@click.command(name="sync:files")
@click.option("--uploads/--no-uploads", default=True, help="Also mirror public/uploads")
@click.option("--dry-run", is_flag=True, help="Show what would be transferred")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def sync_files(uploads, dry_run, verbose, json_output):
    """
    Mirror code (and uploads) to production, then install and build
    """
    cmd = SyncFilesCommand(
        FileSyncOptions(include_uploads=uploads, dry_run=dry_run),
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
