"""Data models for provisioning and teardown."""

from .cleanup_plan import BackupEntry, BackupPlan, BackupStatus, CleanupPlan, DeletionStep, ResourceSelection
from .cleanup_result import CleanupResult, DeletionStepResult, RecoveryAdvisory, RecoveryInstruction
from .dependency_graph import BackupRequirement, DeletionPriority, DependencyGraph, RiskAssessment, RiskFactor
from .environment import ALL_ENVIRONMENTS, Environment
from .inventory import (
    DatabaseResource,
    DatabaseResources,
    DiscoveredResource,
    EnvironmentVariable,
    HostingResources,
    ResourceInventory,
    StorageResources,
    StorageStoreResource,
)
from .provisioning_record import (
    DatabaseBlock,
    DatabaseRecord,
    HostingRecord,
    ProvisioningRecord,
    ProvisioningRequest,
    StorageRecord,
)
from .provisioning_result import ProvisioningResult
from .resource_type import RESOURCE_PROFILES, BackupType, ResourceProfile, ResourceType, RiskType, Severity

__all__ = [
    "ALL_ENVIRONMENTS",
    "BackupEntry",
    "BackupPlan",
    "BackupRequirement",
    "BackupStatus",
    "BackupType",
    "CleanupPlan",
    "CleanupResult",
    "DatabaseBlock",
    "DatabaseRecord",
    "DatabaseResource",
    "DatabaseResources",
    "DeletionPriority",
    "DeletionStep",
    "DeletionStepResult",
    "DependencyGraph",
    "DiscoveredResource",
    "Environment",
    "EnvironmentVariable",
    "HostingRecord",
    "HostingResources",
    "ProvisioningRecord",
    "ProvisioningRequest",
    "ProvisioningResult",
    "RESOURCE_PROFILES",
    "RecoveryAdvisory",
    "RecoveryInstruction",
    "ResourceInventory",
    "ResourceProfile",
    "ResourceSelection",
    "ResourceType",
    "RiskAssessment",
    "RiskFactor",
    "RiskType",
    "Severity",
    "StorageRecord",
    "StorageResources",
    "StorageStoreResource",
]
