"""
Base Command Class

Abstract base for all Promoter CLI commands.
Provides common functionality and structure.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from rich.console import Console

from promoter.core.config_loader import get_config_loader
from promoter.exceptions import PromoterError
from promoter.logger import DeployLogger
from promoter.models.config import DeploymentConfig
from promoter.services.orchestrator import DeploymentOrchestrator, build_orchestrator
from promoter.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Config loading and orchestrator wiring
    - Logger initialization
    - Header display
    - Error handling
    - JSON output support
    """

    def __init__(self, verbose: bool = False, json_output: bool = False):
        self.verbose = verbose
        self.json_output = json_output
        self.console = Console()
        self.logger: Optional[DeployLogger] = None
        self._config: Optional[DeploymentConfig] = None

    @property
    def config(self) -> DeploymentConfig:
        if self._config is None:
            self._config = get_config_loader().load()
        return self._config

    def init_logger(self, command_name: str) -> Optional[DeployLogger]:
        """
        Initialize command logger (skip in JSON mode).

        Args:
            command_name: Command name, used in the log file name

        Returns:
            DeployLogger instance or None if JSON mode
        """
        if self.json_output:
            return None
        self.logger = DeployLogger(
            "cli", command_name, log_dir=self.config.log_dir, verbose=self.verbose
        )
        return self.logger

    def get_orchestrator(self) -> DeploymentOrchestrator:
        return build_orchestrator(self.config, logger=self.logger)

    def output_json(self, data: Dict[str, Any], exit_code: int = 0) -> None:
        """
        Output data as JSON and exit on failure.

        Args:
            data: Data to output as JSON
            exit_code: Exit code (0 for success, non-zero for error)
        """
        print(json.dumps(data, indent=2, default=str))
        if exit_code != 0:
            raise SystemExit(exit_code)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON or verbose mode)."""
        if not self.verbose and not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        """Print success message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[green]✓ {message}[/green]")

    def print_error(self, message: str) -> None:
        """Print error message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[red]✗ {message}[/red]")

    def print_warning(self, message: str) -> None:
        """Print warning message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def print_dim(self, message: str) -> None:
        """Print dim message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[dim]{message}[/dim]")

    def exit_with_error(self, message: str, code: int = 1) -> None:
        """Print error and exit."""
        self.print_error(message)
        raise SystemExit(code)

    def finish(self, success: bool) -> None:
        """Close the logger, point at the log file, exit 1 on failure."""
        if self.logger:
            self.logger.close()
            if not self.json_output:
                self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
        if not success:
            raise SystemExit(1)

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def _report_failure(self, label: str, error: Any, context: Optional[str] = None) -> None:
        if self.json_output:
            print(json.dumps({"error": f"{label}: {error}"}, indent=2))
        else:
            self.console.print(f"\n[bold red]✗ {label}:[/bold red] {error}\n")
            if context:
                self.console.print(f"[dim]Context: {context}[/dim]\n")
        if self.logger:
            self.logger.log_error(f"{label}: {error}", context=context)
            if not self.json_output:
                self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            if self.logger:
                self.console.print(
                    f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n"
                )
            raise SystemExit(130)
        except SystemExit:
            raise
        except PromoterError as e:
            self._report_failure(type(e).__name__, e.message, e.context)
            raise SystemExit(1)
        except FileNotFoundError as e:
            self._report_failure("File not found", e)
            raise SystemExit(1)
        except PermissionError as e:
            self._report_failure("Permission denied", e)
            raise SystemExit(1)
        except ValueError as e:
            self._report_failure("Invalid value", e)
            raise SystemExit(1)
        except Exception as e:
            self._report_failure(type(e).__name__, e)
            raise SystemExit(1)
