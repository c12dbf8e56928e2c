"""
Setup steps and run states

The steps run strictly in declaration order. Each step lists the steps it
depends on; validate_step_order() rejects an order that runs a step before
one of its dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Set, Tuple


class RunState(Enum):
    START = "start"
    IDENTITY_READY = "identity-ready"
    TRUST_CONFIGURED = "trust-configured"
    CONNECTIVITY_VERIFIED = "connectivity-verified"
    OPERATOR_OVERRIDE = "operator-override"
    SESSION_AUTHENTICATED = "session-authenticated"
    SINGLETON_SYNCED = "singleton-synced"
    FLEET_SYNCED = "fleet-synced"
    DONE = "done"


@dataclass(frozen=True)
class Step:
    name: str
    title: str
    reaches: RunState
    depends_on: Tuple[str, ...] = ()


SETUP_STEPS: Tuple[Step, ...] = (
    Step("identity", "Generate SSH key", RunState.IDENTITY_READY),
    Step(
        "trust",
        "Configure SSH for GitHub",
        RunState.TRUST_CONFIGURED,
        ("identity",),
    ),
    Step(
        "connectivity",
        "Test GitHub SSH connectivity",
        RunState.CONNECTIVITY_VERIFIED,
        ("identity", "trust"),
    ),
    Step(
        "session",
        "Authenticate GitHub CLI",
        RunState.SESSION_AUTHENTICATED,
        ("identity", "trust", "connectivity"),
    ),
    Step(
        "singleton",
        "Sync configuration repository",
        RunState.SINGLETON_SYNCED,
        ("session",),
    ),
    Step(
        "fleet",
        "Sync repositories",
        RunState.FLEET_SYNCED,
        ("session", "singleton"),
    ),
)


def validate_step_order(steps: Iterable[Step]) -> None:
    """
    Check that every dependency is declared before the step needing it.

    Raises:
        ValueError: On duplicate names, unknown dependencies or bad ordering
    """
    steps = list(steps)
    seen: Set[str] = set()
    names = [step.name for step in steps]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate step names in {names}")

    for step in steps:
        for dependency in step.depends_on:
            if dependency not in names:
                raise ValueError(f"Step '{step.name}' depends on unknown step '{dependency}'")
            if dependency not in seen:
                raise ValueError(
                    f"Step '{step.name}' runs before its dependency '{dependency}'"
                )
        seen.add(step.name)


validate_step_order(SETUP_STEPS)
