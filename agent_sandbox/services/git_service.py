"""Git wrapper: atomic clone and fast-forward-only pull."""

import os
import shutil
import tempfile
from pathlib import Path

from agent_sandbox.models.results import ExecutionResult
from agent_sandbox.services.runner import CommandRunner

GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


def partial_prefix(target: Path) -> str:
    """Hidden prefix for a clone in progress next to target."""
    name = target.name if target.name.startswith(".") else f".{target.name}"
    return f"{name}.partial-"


class GitService:
    """
    Service for git operations.

    Both operations report success through the exit code only. A clone is
    made in a hidden temporary sibling and renamed onto the target once it
    is complete.
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def clone(self, url: str, target: Path) -> ExecutionResult:
        """
        Clone url into target.

        Args:
            url: Remote URL (SSH)
            target: Destination; must be absent or an empty directory

        Returns:
            ExecutionResult of the clone (or of the failed install step)
        """
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_dir = Path(tempfile.mkdtemp(prefix=partial_prefix(target), dir=target.parent))

        try:
            result = self.runner.run(
                ["git", "clone", url, str(tmp_dir)],
                env=GIT_ENV,
                description=f"Cloning {target.name}",
            )
            if result.is_failure:
                return result

            try:
                if target.is_dir() and not any(target.iterdir()):
                    target.rmdir()
                os.rename(tmp_dir, target)
            except OSError as e:
                return ExecutionResult(
                    returncode=1,
                    stderr=f"Could not move clone into {target}: {e}",
                    command=result.command,
                )
            return result
        finally:
            if tmp_dir.exists():
                shutil.rmtree(tmp_dir, ignore_errors=True)

    def pull_ff_only(self, path: Path) -> ExecutionResult:
        """Fast-forward the checkout at path; refuses when histories diverged."""
        return self.runner.run(
            ["git", "-C", str(path), "pull", "--ff-only"],
            env=GIT_ENV,
            description=f"Pulling {path.name}",
        )
