"""Cleanup orchestrator.

Executes a CleanupPlan strictly in order and halts on the first failure. Nothing is
retried here (the deleter owns retries) and nothing is recreated automatically; after a
failure the caller gets a RecoveryAdvisory describing how to restore what was deleted.

State transitions:
    idle → running → completed (every step succeeded)
    idle → running → halted-on-failure (a step failed)
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from ..models.cleanup_plan import CleanupPlan, DeletionStep
from ..models.cleanup_result import CleanupResult, DeletionStepResult, RecoveryAdvisory, RecoveryInstruction
from .deleter import ResourceDeleter
from .reporter import CleanupReporter

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    HALTED_ON_FAILURE = "halted-on-failure"


class CleanupOrchestrator:
    """Runs cleanup plans step by step.

    Args:
        deleter: Performs the vendor deletion for each step
        reporter: Receives progress events (optional)
        timer: Monotonic clock used for durations
    """

    def __init__(
        self,
        deleter: ResourceDeleter,
        reporter: Optional[CleanupReporter] = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.deleter = deleter
        self.reporter = reporter
        self.timer = timer
        self.state = OrchestratorState.IDLE

    def execute(self, plan: CleanupPlan) -> CleanupResult:
        """Execute a plan.

        Args:
            plan: Plan to execute; its steps are run in order, once

        Returns:
            CleanupResult with per-step results and recovery guidance
        """
        self.state = OrchestratorState.RUNNING
        started = self.timer()
        total = len(plan.steps)
        results: List[DeletionStepResult] = []
        failed: Optional[DeletionStepResult] = None

        if self.reporter:
            self.reporter.plan_started(plan)

        for index, step in enumerate(plan.steps, start=1):
            if self.reporter:
                self.reporter.step_started(step, index, total)

            result = self._run_step(step)
            results.append(result)

            if not result.success:
                failed = result
                logger.error(f"Step {index}/{total} failed ({step.id}): {result.error}")
                if self.reporter:
                    self.reporter.step_failed(result, index, total)
                break

            if self.reporter:
                self.reporter.step_completed(result, index, total)

        completed = [r for r in results if r.success]
        advisory = RecoveryAdvisory()
        if failed is not None:
            self.state = OrchestratorState.HALTED_ON_FAILURE
            advisory = build_recovery_advisory(completed, failed, remaining=total - len(results))
        else:
            self.state = OrchestratorState.COMPLETED

        cleanup_result = CleanupResult(
            success=failed is None,
            completed_steps=len(completed),
            failed_steps=0 if failed is None else 1,
            step_results=results,
            rollback_performed=not advisory.is_empty,
            total_duration=self.timer() - started,
            recovery_advisory=advisory,
            error=None if failed is None else f"Cleanup halted at step {failed.step.order}: {failed.error}",
        )

        if self.reporter:
            if not advisory.is_empty:
                self.reporter.recovery(advisory)
            self.reporter.summary(cleanup_result)

        logger.info(
            f"Cleanup {self.state.value}: {cleanup_result.completed_steps} completed, "
            f"{cleanup_result.failed_steps} failed"
        )
        return cleanup_result

    def _run_step(self, step: DeletionStep) -> DeletionStepResult:
        step_started = self.timer()
        try:
            success, error, rollback_data = self.deleter.delete(step)
        except Exception as e:
            logger.exception(f"Deleter raised while deleting {step.id}")
            success, error, rollback_data = False, str(e), None
        return DeletionStepResult(
            step=step,
            success=success,
            duration=self.timer() - step_started,
            error=error,
            rollback_data=rollback_data,
        )


def build_recovery_advisory(
    completed: List[DeletionStepResult],
    failed: DeletionStepResult,
    remaining: int = 0,
) -> RecoveryAdvisory:
    """Build manual-recovery guidance for the steps that completed before a failure.

    Args:
        completed: Successful results, in execution order
        failed: The result that halted execution
        remaining: Number of steps that were never started

    Returns:
        RecoveryAdvisory with instructions ordered most recent deletion first
    """
    instructions = []
    for result in reversed(completed):
        data = result.rollback_data or {}
        command = data.get("recreate_command")
        instruction = f"Recreate with: {command}" if command else "Recreate manually from your provider dashboard"
        instructions.append(
            RecoveryInstruction(
                step_id=result.step.id,
                resource_type=result.step.type,
                description=result.step.description,
                instruction=instruction,
                rollback_data=dict(data),
            )
        )

    notes = [
        f"Step '{failed.step.description}' failed: {failed.error}",
        "No automatic rollback was performed.",
    ]
    if instructions:
        notes.append("Restore data from your backups before recreating deleted resources.")
    if remaining:
        notes.append(f"{remaining} remaining step(s) were not started and their resources are untouched.")

    return RecoveryAdvisory(instructions=instructions, notes=notes)
