"""Data models for the orchestrator module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union


class RunState(Enum):
    """Lifecycle of one deploy() call."""
    IDLE = "idle"
    CONNECTING = "connecting"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class StepStatus(Enum):
    """Step execution status."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


StepAction = Callable[[], Any]


@dataclass
class DeploymentStep:
    """A human-readable label and the zero-argument action it runs."""
    label: str
    action: StepAction

    @classmethod
    def coerce(cls, value: Union["DeploymentStep", Mapping[str, Any], Tuple[str, StepAction]]) -> "DeploymentStep":
        """Accept a DeploymentStep, a {"step", "command"} mapping or a (label, action) pair."""
        if isinstance(value, DeploymentStep):
            return value
        if isinstance(value, Mapping):
            label, action = value.get("step"), value.get("command")
        else:
            label, action = value
        if not isinstance(label, str) or not callable(action):
            raise TypeError(f"Invalid deployment step: {value!r}")
        return cls(label=label, action=action)


@dataclass
class StepResult:
    """Outcome of one executed step."""
    index: int
    label: str
    status: StepStatus
    duration: float = 0.0
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, index: int, label: str, duration: float) -> "StepResult":
        return cls(index=index, label=label, status=StepStatus.SUCCESS, duration=duration)

    @classmethod
    def failed(cls, index: int, label: str, duration: float, error: str) -> "StepResult":
        return cls(index=index, label=label, status=StepStatus.FAILED, duration=duration, error=error)


@dataclass
class DeploymentReport:
    """Per-step results of a deploy() call."""
    state: RunState = RunState.IDLE
    steps: List[StepResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.SUCCEEDED

    @property
    def failed_step(self) -> Optional[StepResult]:
        for result in self.steps:
            if result.status == StepStatus.FAILED:
                return result
        return None

    @property
    def duration(self) -> float:
        return sum(result.duration for result in self.steps)


def coerce_steps(steps: Sequence[Any]) -> List[DeploymentStep]:
    return [DeploymentStep.coerce(step) for step in steps]
