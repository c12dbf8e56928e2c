"""
Agent Sandbox Domain Models

Dataclass-based models for type-safe data handling.
"""

from .actions import Action, ActionKind
from .repos import CheckoutState, RepoEntry
from .results import ExecutionResult, FleetSummary, ProbeResult, ToolOutcome
from .ssh import SSHIdentity, TrustEntry

__all__ = [
    # Actions
    "Action",
    "ActionKind",
    # Repositories
    "CheckoutState",
    "RepoEntry",
    # Results
    "ExecutionResult",
    "FleetSummary",
    "ProbeResult",
    "ToolOutcome",
    # SSH
    "SSHIdentity",
    "TrustEntry",
]
