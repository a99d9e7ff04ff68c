"""Deployment orchestrator: runs named steps in order over one connection."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, Sequence

from ..errors import DeploymentError
from ..utils.logging import DeployLogger, describe_error
from .models import DeploymentReport, RunState, StepResult, coerce_steps


class StepOrchestrator:
    """
    Connects once, runs each step in caller order and stops at the first failure.

    The connection is disposed exactly once per run, whatever happens.
    A failing step is reported as a single DeploymentError whose detail
    depends on the logger's verbosity.
    """

    def __init__(
        self,
        connect: Callable[[], Any],
        dispose: Callable[[], None],
        logger: Optional[DeployLogger] = None,
    ) -> None:
        self._connect = connect
        self._dispose = dispose
        self.logger = logger or DeployLogger()
        self.state = RunState.IDLE

    def run(self, steps: Sequence[Any]) -> DeploymentReport:
        """
        Execute steps sequentially.

        Args:
            steps: DeploymentStep objects, {"step": label, "command": action}
                mappings or (label, action) pairs

        Returns:
            DeploymentReport with one StepResult per executed step

        Raises:
            AuthenticationError: If no connection could be opened (no step runs)
            RemoteConnectionError: If the new session broke before any step ran
            DeploymentError: If a step raised
        """
        plan = coerce_steps(steps)
        report = DeploymentReport()

        self.state = RunState.CONNECTING
        try:
            self._connect()
        except Exception:
            self.state = RunState.FAILED
            report.state = self.state
            raise

        failure = None
        try:
            self.state = RunState.RUNNING
            for index, step in enumerate(plan):
                self.logger.info("Step %d/%d: %s", index + 1, len(plan), step.label)
                started = time.perf_counter()
                try:
                    with self.logger.timed(f"Step '{step.label}'"):
                        step.action()
                except Exception as exc:
                    elapsed = time.perf_counter() - started
                    report.steps.append(
                        StepResult.failed(index, step.label, elapsed, describe_error(exc))
                    )
                    self.logger.failure(f"Failed step: {step.label}", exc)
                    failure = (step, exc)
                    break
                report.steps.append(
                    StepResult.succeeded(index, step.label, time.perf_counter() - started)
                )
        finally:
            self._dispose()

        if failure is not None:
            self.state = RunState.FAILED
            report.state = self.state
            step, exc = failure
            error = DeploymentError(step.label, exc, verbose=self.logger.verbose)
            if self.logger.verbose:
                raise error from exc
            raise error from None

        self.state = RunState.SUCCEEDED
        report.state = self.state
        self.logger.success("Deployment finished")
        return report
