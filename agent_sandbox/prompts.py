"""
Operator prompts

Steps never read stdin directly; they receive a Prompter so tests can
substitute scripted answers.
"""

from typing import Optional, Protocol

from rich.console import Console
from rich.prompt import Confirm


class Prompter(Protocol):
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...

    def acknowledge(self, message: str) -> None:
        """Block until the operator acknowledges."""
        ...


class ConsolePrompter:
    """Prompter backed by the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console if console is not None else Console()

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(question, default=default, console=self.console)

    def acknowledge(self, message: str) -> None:
        self.console.input(f"[bold]{message}[/bold] ")
