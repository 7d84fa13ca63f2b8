"""Resource kinds handled by teardown and their per-kind metadata."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .environment import Environment


class ResourceType(Enum):
    """Closed set of discoverable resource kinds."""

    HOSTING_PROJECT = "hosting-project"
    DATABASE = "database"
    STORAGE_STORE = "storage-store"
    ENVIRONMENT_VARIABLES = "environment-variables"
    DOMAINS = "domains"

    @property
    def profile(self) -> "ResourceProfile":
        return RESOURCE_PROFILES[self]


class RiskType(Enum):
    """Kind of harm a deletion can cause."""

    DATA_LOSS = "data_loss"
    SERVICE_DISRUPTION = "service_disruption"
    DEPENDENCY_BREAK = "dependency_break"


class Severity(Enum):
    """Risk severity, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def highest(cls, severities) -> "Severity":
        """Most severe value in an iterable (LOW when empty)."""
        result = cls.LOW
        for severity in severities:
            if severity.rank > result.rank:
                result = severity
        return result


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2, Severity.CRITICAL: 3}


class BackupType(Enum):
    """What a backup of the resource would capture."""

    DATA = "data"
    CONFIG = "config"


@dataclass(frozen=True)
class ResourceProfile:
    """Static metadata shared by every resource of one kind.

    Attributes:
        referenced_by: Kinds whose resources reference this kind and go first
        risk_type: Risk factor type raised when this kind is deleted
        severity: Base severity of deleting this kind
        backup_type: Kind of backup that would preserve it
        backup_required: Whether a backup is required before deletion
        time_budget: Estimated deletion time per resource, in seconds
        icon: Console icon for reporting
        label: Human-readable name
        production_severity: Severity override for production resources
    """

    referenced_by: Tuple[ResourceType, ...]
    risk_type: RiskType
    severity: Severity
    backup_type: BackupType
    backup_required: bool
    time_budget: int
    icon: str
    label: str
    production_severity: Optional[Severity] = None

    def severity_for(self, environment: Optional[Environment]) -> Severity:
        if environment == Environment.PRODUCTION and self.production_severity is not None:
            return self.production_severity
        return self.severity


RESOURCE_PROFILES = {
    ResourceType.DOMAINS: ResourceProfile(
        referenced_by=(),
        risk_type=RiskType.SERVICE_DISRUPTION,
        severity=Severity.MEDIUM,
        backup_type=BackupType.CONFIG,
        backup_required=False,
        time_budget=10,
        icon="🌍",
        label="Domains",
    ),
    ResourceType.HOSTING_PROJECT: ResourceProfile(
        referenced_by=(ResourceType.DOMAINS,),
        risk_type=RiskType.SERVICE_DISRUPTION,
        severity=Severity.HIGH,
        backup_type=BackupType.CONFIG,
        backup_required=True,
        time_budget=45,
        icon="🌐",
        label="Hosting project",
    ),
    ResourceType.ENVIRONMENT_VARIABLES: ResourceProfile(
        referenced_by=(ResourceType.HOSTING_PROJECT,),
        risk_type=RiskType.DEPENDENCY_BREAK,
        severity=Severity.MEDIUM,
        backup_type=BackupType.CONFIG,
        backup_required=True,
        time_budget=15,
        icon="🔧",
        label="Environment variables",
    ),
    ResourceType.STORAGE_STORE: ResourceProfile(
        referenced_by=(ResourceType.ENVIRONMENT_VARIABLES,),
        risk_type=RiskType.DATA_LOSS,
        severity=Severity.LOW,
        backup_type=BackupType.DATA,
        backup_required=False,
        time_budget=20,
        icon="📦",
        label="Storage store",
    ),
    ResourceType.DATABASE: ResourceProfile(
        referenced_by=(ResourceType.ENVIRONMENT_VARIABLES,),
        risk_type=RiskType.DATA_LOSS,
        severity=Severity.HIGH,
        backup_type=BackupType.DATA,
        backup_required=True,
        time_budget=30,
        icon="🗄️",
        label="Database",
        production_severity=Severity.CRITICAL,
    ),
}
