"""Cleanup result model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .cleanup_plan import DeletionStep
from .resource_type import ResourceType


@dataclass
class DeletionStepResult:
    """Outcome of a single deletion step.

    Attributes:
        step: The step that was executed
        success: Whether the resource is gone (already-deleted counts as success)
        duration: Seconds spent on the step
        error: Failure description
        rollback_data: How to recreate the resource manually
    """

    step: DeletionStep
    success: bool
    duration: float = 0.0
    error: Optional[str] = None
    rollback_data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step.id,
            "type": self.step.type.value,
            "description": self.step.description,
            "success": self.success,
            "duration": round(self.duration, 3),
            "error": self.error,
            "rollback_data": self.rollback_data,
        }


@dataclass(frozen=True)
class RecoveryInstruction:
    """Manual instruction for recreating one deleted resource."""

    step_id: str
    resource_type: ResourceType
    description: str
    instruction: str
    rollback_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step_id,
            "resource_type": self.resource_type.value,
            "description": self.description,
            "instruction": self.instruction,
            "rollback_data": dict(self.rollback_data),
        }


@dataclass(frozen=True)
class RecoveryAdvisory:
    """Manual-recovery guidance returned after a halted cleanup.

    Instructions are ordered most recent deletion first.
    """

    instructions: List[RecoveryInstruction] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.instructions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instructions": [instr.to_dict() for instr in self.instructions],
            "notes": list(self.notes),
        }


@dataclass
class CleanupResult:
    """Outcome of executing a cleanup plan.

    Invariants:
        - completed_steps + failed_steps <= number of planned steps
        - failed_steps <= 1 (execution halts on the first failure)
        - rollback_performed is True exactly when recovery guidance was produced

    Attributes:
        success: True when every step completed
        completed_steps: Number of successful steps
        failed_steps: Number of failed steps (0 or 1)
        step_results: Results in execution order
        rollback_performed: Whether recovery guidance was produced (never an automated action)
        total_duration: Seconds spent executing
        recovery_advisory: Manual-recovery guidance
        error: Failure description
        run_id: Identifier used for the audit log
    """

    success: bool
    completed_steps: int = 0
    failed_steps: int = 0
    step_results: List[DeletionStepResult] = field(default_factory=list)
    rollback_performed: bool = False
    total_duration: float = 0.0
    recovery_advisory: RecoveryAdvisory = field(default_factory=RecoveryAdvisory)
    error: Optional[str] = None
    run_id: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "CleanupResult":
        """Build a failed result for an error raised before any step ran."""
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "success": self.success,
            "completed_steps": self.completed_steps,
            "failed_steps": self.failed_steps,
            "step_results": [result.to_dict() for result in self.step_results],
            "rollback_performed": self.rollback_performed,
            "total_duration": round(self.total_duration, 3),
            "recovery_advisory": self.recovery_advisory.to_dict(),
            "error": self.error,
        }
