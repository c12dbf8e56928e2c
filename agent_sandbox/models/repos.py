"""
Repository Models
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class CheckoutState(Enum):
    """Observed state of a local checkout path."""

    ABSENT = "absent"
    EMPTY = "empty"
    REPOSITORY = "repository"
    OCCUPIED = "occupied"


@dataclass
class RepoEntry:
    """One repository returned by the GitHub listing."""

    name: str
    ssh_url: str
    archived: bool = False

    @classmethod
    def from_listing(cls, record: Dict[str, Any]) -> "RepoEntry":
        """Build from a `gh repo list --json name,sshUrl,isArchived` record."""
        return cls(
            name=record["name"],
            ssh_url=record["sshUrl"],
            archived=bool(record.get("isArchived", False)),
        )
