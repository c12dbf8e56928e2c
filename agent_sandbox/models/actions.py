"""
Reconciliation Actions

A planned change to one managed resource. Planners return lists of these;
the reconciler applies them in order.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class ActionKind(Enum):
    GENERATE_KEYPAIR = "generate-keypair"
    DERIVE_PUBLIC_KEY = "derive-public-key"
    APPEND_TRUST_ENTRY = "append-trust-entry"
    MOVE_ASIDE = "move-aside"
    CLONE = "clone"
    PULL = "pull"
    SKIP = "skip"


@dataclass
class Action:
    """A single planned change."""

    kind: ActionKind
    resource: str
    target: Path
    source: Optional[str] = None
    destination: Optional[Path] = None
    reason: str = ""

    @property
    def is_change(self) -> bool:
        """Whether applying this action creates or moves anything."""
        return self.kind not in (ActionKind.SKIP, ActionKind.PULL)

    def describe(self) -> str:
        if self.kind == ActionKind.MOVE_ASIDE:
            return f"{self.kind.value} {self.target} -> {self.destination}"
        if self.kind == ActionKind.SKIP:
            return f"{self.kind.value} {self.resource} ({self.reason})"
        return f"{self.kind.value} {self.resource} at {self.target}"

    def __repr__(self) -> str:
        return f"Action({self.kind.value}, {self.resource})"
