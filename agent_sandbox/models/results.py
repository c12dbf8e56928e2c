"""
Result Models

Dataclass models for external tool results and run reports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ToolOutcome(Enum):
    """Classified outcome of an external tool invocation."""

    SUCCESS = "success"
    FAILURE = "failure"
    AMBIGUOUS = "ambiguous"


@dataclass
class ExecutionResult:
    """Result of a command execution (subprocess)."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    @property
    def outcome(self) -> ToolOutcome:
        """Exit-code policy: zero is success, anything else failure."""
        return ToolOutcome.SUCCESS if self.is_success else ToolOutcome.FAILURE

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"


@dataclass
class ProbeResult:
    """Result of the SSH connectivity probe."""

    outcome: ToolOutcome
    output: str = ""
    host: str = ""

    @property
    def is_verified(self) -> bool:
        return self.outcome == ToolOutcome.SUCCESS


@dataclass
class FleetSummary:
    """
    Informational counts for one fleet sync.

    Pulls that could not fast-forward still count as updated; their names are
    kept in not_fast_forwarded. Failed clones count only in failed.
    """

    cloned: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    not_fast_forwarded: List[str] = field(default_factory=list)
    failed_names: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.cloned + self.updated + self.skipped + self.failed

    def __repr__(self) -> str:
        return (
            f"FleetSummary(cloned={self.cloned}, updated={self.updated}, "
            f"skipped={self.skipped}, failed={self.failed})"
        )
