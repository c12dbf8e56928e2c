"""
Reconciliation core: planner, step graph and the reconciler that applies them.
"""

from .reconciler import Reconciler, RunReport
from .steps import SETUP_STEPS, RunState, Step, validate_step_order

__all__ = [
    "Reconciler",
    "RunReport",
    "SETUP_STEPS",
    "RunState",
    "Step",
    "validate_step_order",
]
