"""
Base Command Class

Abstract base for CLI commands: logger setup, header, error handling.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from agent_sandbox.exceptions import SandboxSetupError
from agent_sandbox.logger import SetupLogger
from agent_sandbox.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling and exit codes
    """

    def __init__(self, verbose: bool = False, console: Optional[Console] = None):
        self.verbose = verbose
        self.console = console if console is not None else Console()
        self.logger: Optional[SetupLogger] = None

    def init_logger(self, log_dir: Path, command_name: str) -> SetupLogger:
        """
        Initialize command logger.

        Args:
            log_dir: Root logs directory
            command_name: Command name, used in the log filename

        Returns:
            SetupLogger instance
        """
        self.logger = SetupLogger(
            log_dir, command_name, verbose=self.verbose, console=self.console
        )
        return self.logger

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in verbose mode)."""
        if not self.verbose:
            show_header(
                title=title,
                subtitle=subtitle,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓ {escape(message)}[/green]")

    def print_dim(self, message: str) -> None:
        self.console.print(f"[dim]{escape(message)}[/dim]")

    def _already_logged(self) -> bool:
        """The logger context prints errors it records."""
        return bool(self.logger and self.logger.has_errors)

    def _show_log_location(self) -> None:
        if self.logger and self.logger.log_path:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Exit codes: 0 success, 1 failure or operator abort, 130 interrupted.
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            self._show_log_location()
            raise SystemExit(130)
        except SystemExit:
            raise
        except SandboxSetupError as e:
            if not self._already_logged():
                self.console.print(f"\n[bold red]✗ {escape(e.message)}[/bold red]")
                if e.context:
                    self.print_dim(e.context)
            self._show_log_location()
            raise SystemExit(1)
        except PermissionError as e:
            if not self._already_logged():
                self.console.print(f"\n[bold red]✗ Permission denied:[/bold red] {escape(str(e))}\n")
            self._show_log_location()
            raise SystemExit(1)
        except Exception as e:
            error_type = type(e).__name__
            if not self._already_logged():
                self.console.print(f"\n[bold red]✗ {error_type}:[/bold red] {escape(str(e))}\n")
            self._show_log_location()
            raise SystemExit(1)
