"""Dependency graph model: deletion order, risk assessment and backup requirements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .resource_type import BackupType, ResourceType, RiskType, Severity


@dataclass(frozen=True)
class DeletionPriority:
    """Position of one resource in the deletion order.

    Attributes:
        resource_type: Kind of resource
        resource_id: Resource identifier
        priority: Deletion tier; lower numbers are deleted first
        dependencies: Ids of the resources referencing this one, all with a lower priority
    """

    resource_type: ResourceType
    resource_id: str
    priority: int
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_type": self.resource_type.value,
            "resource_id": self.resource_id,
            "priority": self.priority,
            "dependencies": list(self.dependencies),
        }


@dataclass(frozen=True)
class RiskFactor:
    type: RiskType
    severity: Severity
    description: str
    affected_resources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "affected_resources": list(self.affected_resources),
        }


@dataclass(frozen=True)
class RiskAssessment:
    """Overall risk of deleting a set of resources."""

    overall: Severity
    factors: List[RiskFactor] = field(default_factory=list)
    mitigations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall.value,
            "factors": [factor.to_dict() for factor in self.factors],
            "mitigations": list(self.mitigations),
        }


@dataclass(frozen=True)
class BackupRequirement:
    resource_type: ResourceType
    resource_id: str
    required: bool
    backup_type: BackupType
    estimated_size: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_type": self.resource_type.value,
            "resource_id": self.resource_id,
            "required": self.required,
            "backup_type": self.backup_type.value,
            "estimated_size": self.estimated_size,
        }


@dataclass(frozen=True)
class DependencyGraph:
    """Deletion ordering and risk data derived from an inventory.

    Invariant: for every entry, each id in `dependencies` has a strictly lower priority.
    """

    deletion_order: List[DeletionPriority] = field(default_factory=list)
    risk_assessment: RiskAssessment = field(default_factory=lambda: RiskAssessment(overall=Severity.LOW))
    backup_requirements: List[BackupRequirement] = field(default_factory=list)

    def priority_of(self, resource_id: str) -> Optional[DeletionPriority]:
        for entry in self.deletion_order:
            if entry.resource_id == resource_id:
                return entry
        return None

    def validate(self) -> bool:
        """Check that every dependency is deleted strictly earlier.

        Raises:
            ValueError: If an entry depends on a resource with an equal or higher priority
        """
        priorities = {entry.resource_id: entry.priority for entry in self.deletion_order}
        for entry in self.deletion_order:
            for dep in entry.dependencies:
                if dep in priorities and priorities[dep] >= entry.priority:
                    raise ValueError(
                        f"Resource {entry.resource_id} (priority {entry.priority}) depends on "
                        f"{dep} (priority {priorities[dep]})"
                    )
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deletion_order": [entry.to_dict() for entry in self.deletion_order],
            "risk_assessment": self.risk_assessment.to_dict(),
            "backup_requirements": [req.to_dict() for req in self.backup_requirements],
        }
