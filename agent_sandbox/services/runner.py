"""Command runner for the external tools (ssh, ssh-keygen, git, gh)."""

import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from rich.live import Live
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

from agent_sandbox.exceptions import MissingToolError
from agent_sandbox.logger import SetupLogger
from agent_sandbox.models.results import ExecutionResult


class CommandRunner:
    """
    Runs one external command and records it in the setup log.

    Captured commands show a spinner when the logger is not verbose.
    Interactive commands inherit the terminal and are not captured.
    There is no retry and no timeout: every command runs exactly once.
    """

    def __init__(self, logger: Optional[SetupLogger] = None):
        self.logger = logger

    def is_installed(self, tool: str) -> bool:
        """Check if a tool is on PATH."""
        return shutil.which(tool) is not None

    def run(
        self,
        cmd: List[str],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        description: Optional[str] = None,
        interactive: bool = False,
    ) -> ExecutionResult:
        """
        Run a command.

        Args:
            cmd: Argument vector
            cwd: Working directory
            env: Extra environment variables
            description: Spinner label for captured commands
            interactive: Inherit stdin/stdout/stderr instead of capturing

        Returns:
            ExecutionResult with exit code and captured output

        Raises:
            MissingToolError: If the executable is not installed
        """
        command = shlex.join(str(part) for part in cmd)
        if self.logger:
            self.logger.log_command(command)

        run_env = {**os.environ, **(env or {})}

        try:
            if interactive:
                completed = subprocess.run(cmd, cwd=cwd, env=run_env)
                result = ExecutionResult(returncode=completed.returncode, command=command)
            elif description and self.logger and not self.logger.verbose:
                result = self._run_with_spinner(cmd, cwd, run_env, command, description)
            else:
                result = self._run_captured(cmd, cwd, run_env, command)
        except FileNotFoundError:
            raise MissingToolError(str(cmd[0]))

        if self.logger:
            self.logger.log_output(result.stdout, "stdout")
            self.logger.log_output(result.stderr, "stderr")
            self.logger.log(f"Exit code: {result.returncode}", "DEBUG")

        return result

    def _run_captured(self, cmd, cwd, env, command: str) -> ExecutionResult:
        completed = subprocess.run(
            cmd, cwd=cwd, env=env, capture_output=True, text=True
        )
        return ExecutionResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            command=command,
        )

    def _run_with_spinner(
        self, cmd, cwd, env, command: str, description: str
    ) -> ExecutionResult:
        spinner = Spinner("dots", text=f"[cyan]{description}...[/cyan]")

        with Live(
            Padding(spinner, (0, 0, 0, 2)),
            console=self.logger.console,
            refresh_per_second=10,
        ) as live:
            result = self._run_captured(cmd, cwd, env, command)

            if result.is_success:
                mark = Text("  ✓ ", style="dim")
            else:
                mark = Text("  ✗ ", style="red")
            mark.append(description, style="dim")
            live.update(mark)

        return result
