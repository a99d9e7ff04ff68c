"""Orchestrator module for step-based deployment execution.

- StepOrchestrator: connects, runs steps in order, always disposes
- DeploymentStep: a label plus a zero-argument action
- StepResult/DeploymentReport: what ran and how it ended
"""

from .models import (
    DeploymentReport,
    DeploymentStep,
    RunState,
    StepResult,
    StepStatus,
    coerce_steps,
)
from .orchestrator import StepOrchestrator

__all__ = [
    "DeploymentReport",
    "DeploymentStep",
    "RunState",
    "StepOrchestrator",
    "StepResult",
    "StepStatus",
    "coerce_steps",
]
