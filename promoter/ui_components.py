"""
Promoter CLI - UI Components
Standardized headers and result rendering
"""

from rich.console import Console
from rich.table import Table

BRAND = "promoter"

SUCCESS_COLOR = "green"
WARNING_COLOR = "yellow"
ERROR_COLOR = "red"


def _prefix() -> str:
    return f" [bold color(214)]{BRAND}[/bold color(214)] [dim]›[/dim]"


def show_header(
    title: str,
    subtitle: str = None,
    details: dict = None,
    console: Console = None,
):
    """
    Display a standardized command header.

    Args:
        title: Main title (e.g., "Full Deployment")
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Database Sync",
            details={"Target": "deploy@prod.example.com", "Mode": "Dry run"}
        )
    """
    if console is None:
        console = Console()

    console.print(f"{_prefix()} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{_prefix()} [dim]{subtitle}[/dim]")

    if details:
        for key, value in details.items():
            console.print(f"{_prefix()} {key}: [cyan]{value}[/cyan]")

    console.print()


def print_result(result, console: Console = None):
    """Render a DeploymentResult: details, errors, then the verdict line."""
    if console is None:
        console = Console()

    for line in result.details:
        if line.startswith(("⏭️", "ℹ️")):
            console.print(f"  [{WARNING_COLOR}]{line}[/{WARNING_COLOR}]")
        else:
            console.print(f"  {line}")
    for line in result.errors:
        console.print(f"  [{ERROR_COLOR}]{line}[/{ERROR_COLOR}]")

    color = SUCCESS_COLOR if result.success else ERROR_COLOR
    mark = "✓" if result.success else "✗"
    console.print(
        f"\n[{color}]{mark} {result.message}[/{color}] [dim]({result.duration_ms}ms)[/dim]"
    )


def key_value_table(rows: dict, title: str = None) -> Table:
    """Two-column table for status-like dictionaries."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value")
    for key, value in rows.items():
        table.add_row(str(key), "-" if value is None else str(value))
    return table
