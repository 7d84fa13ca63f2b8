"""Cleanup plan model.

A CleanupPlan is an ordered list of DeletionSteps built by the planner and executed once by
the orchestrator. Steps are frozen; the plan is never reordered after it is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .environment import Environment
from .resource_type import BackupType, ResourceType, Severity

SCOPES = ("development", "staging", "production", "all")


@dataclass
class ResourceSelection:
    """Which resources a cleanup run targets.

    Attributes:
        selected_types: Resource kinds to delete
        scope: development, staging, production or all
        excluded_resources: Resource ids to keep
    """

    selected_types: List[ResourceType] = field(default_factory=list)
    scope: str = "all"
    excluded_resources: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.selected_types = [ResourceType(t) if not isinstance(t, ResourceType) else t for t in self.selected_types]
        if self.scope != "all":
            self.scope = Environment.parse(self.scope).value

    @property
    def environments(self) -> List[Environment]:
        """Environments covered by the scope."""
        if self.scope == "all":
            return list(Environment)
        return [Environment(self.scope)]

    def includes_environment(self, environment: Optional[Environment]) -> bool:
        return environment is None or environment in self.environments

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selected_types": [t.value for t in self.selected_types],
            "scope": self.scope,
            "environments": [env.value for env in self.environments],
            "excluded_resources": list(self.excluded_resources),
        }


@dataclass(frozen=True)
class DeletionStep:
    """One resource deletion.

    Attributes:
        id: Step identifier (unique within the plan)
        type: Kind of resource deleted
        description: Human-readable description
        parameters: Deletion parameters for the deleter (includes "resource_id" and "provider")
        environment: Environment of the resource (None for project-wide resources)
        order: 1-based position in the plan
        requires_backup: Whether a backup is required before deletion
        dependencies: Ids of earlier steps that must complete first
    """

    id: str
    type: ResourceType
    description: str
    parameters: Dict[str, Any]
    order: int
    environment: Optional[Environment] = None
    requires_backup: bool = False
    dependencies: Sequence[str] = ()

    @property
    def resource_id(self) -> str:
        return self.parameters.get("resource_id", self.id)

    @property
    def provider(self) -> Optional[str]:
        return self.parameters.get("provider")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "description": self.description,
            "parameters": dict(self.parameters),
            "environment": self.environment.value if self.environment else None,
            "order": self.order,
            "requires_backup": self.requires_backup,
            "dependencies": list(self.dependencies),
        }


class BackupStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class BackupEntry:
    type: ResourceType
    resource_id: str
    backup_type: BackupType
    status: BackupStatus = BackupStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "resource_id": self.resource_id,
            "status": self.status.value,
            "backup_type": self.backup_type.value,
        }


@dataclass(frozen=True)
class BackupPlan:
    entries: List[BackupEntry] = field(default_factory=list)
    destination: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"entries": [entry.to_dict() for entry in self.entries], "destination": self.destination}


@dataclass(frozen=True)
class CleanupPlan:
    """Ordered deletion plan for one project.

    Invariant: every id in a step's `dependencies` belongs to an earlier step.

    Attributes:
        project_name: Project the plan belongs to
        steps: Deletion steps in execution order
        target_resources: Selection the plan was built from
        backup_plan: Backups to take before deleting
        estimated_duration: Estimated total time in seconds
        risk_level: Overall risk of the selected resources
    """

    project_name: str
    steps: List[DeletionStep]
    target_resources: ResourceSelection
    backup_plan: BackupPlan
    estimated_duration: int
    risk_level: Severity

    @property
    def is_empty(self) -> bool:
        return not self.steps

    def validate(self) -> bool:
        """Validate step ordering.

        Raises:
            ValueError: If a step depends on a step that is not earlier in the plan
        """
        seen = set()
        for index, step in enumerate(self.steps, start=1):
            if step.order != index:
                raise ValueError(f"Step {step.id} has order {step.order}, expected {index}")
            for dep in step.dependencies:
                if dep not in seen:
                    raise ValueError(f"Step {step.id} depends on {dep} which does not precede it")
            seen.add(step.id)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "steps": [step.to_dict() for step in self.steps],
            "target_resources": self.target_resources.to_dict(),
            "backup_plan": self.backup_plan.to_dict(),
            "estimated_duration": self.estimated_duration,
            "risk_level": self.risk_level.value,
        }
