#!/usr/bin/env python3
"""Promoter CLI - Main entry point"""

import functools
import os
import sys

import rich_click as click
from click.exceptions import ClickException, MissingParameter, UsageError
from rich.console import Console

from promoter import __version__
from promoter.commands.backup import backup
from promoter.commands.deploy import deploy, history
from promoter.commands.serve import serve
from promoter.commands.status import pre_check, status, test_connection
from promoter.commands.sync import sync_database, sync_files

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100
click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"
click.rich_click.ERRORS_EPILOGUE = ""

console = Console()

BANNER = """
[bold cyan]╔════════════════════════════════════════════════╗[/bold cyan]
[bold cyan]║[/bold cyan]  [bold white]Promoter[/bold white] - development → production pipeline  [bold cyan]║[/bold cyan]
[bold cyan]╚════════════════════════════════════════════════╝[/bold cyan]
"""


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (MissingParameter, UsageError) as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {e.format_message()}\n")
            if e.ctx and e.ctx.command:
                console.print(
                    f"[dim]Run[/dim] [cyan]promoter {e.ctx.command.name} --help[/cyan] [dim]for usage information[/dim]\n"
                )
            sys.exit(1)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(130)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {e}\n")
            if os.environ.get("DEBUG") or os.environ.get("VERBOSE"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    Promoter - push development content and code to production.

    \b
    Quick Start:
      promoter test-connection        # Can we reach production?
      promoter pre-check              # Verify both environments
      promoter deploy --dry-run       # See what a deployment would do
      promoter deploy                 # Backup, sync database, sync files

    \b
    Individual steps:
      promoter backup                 # Dump the production database
      promoter sync:database          # Replicate development content
      promoter sync:files             # Mirror code and uploads, then build
    """
    if ctx.invoked_subcommand is None:
        console.print(BANNER)
        console.print("[yellow]Run 'promoter --help' for usage[/yellow]\n")


cli.add_command(status)
cli.add_command(test_connection)
cli.add_command(pre_check)
cli.add_command(backup)
cli.add_command(sync_database)
cli.add_command(sync_files)
cli.add_command(deploy)
cli.add_command(history)
cli.add_command(serve)


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli()


if __name__ == "__main__":
    main()
