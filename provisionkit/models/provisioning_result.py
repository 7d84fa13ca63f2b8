"""Provisioning result model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .provisioning_record import DatabaseRecord, ProvisioningRecord


@dataclass
class ProvisioningResult:
    """Outcome of a provisioning request, returned instead of raising.

    Attributes:
        success: True when every requested resource was created
        record: What was created (partial on failure)
        credentials: Env keys written, keyed by environment short name ("shared" for project-wide keys)
        databases: Databases that were created successfully
        failed_environments: Environments whose provisioning failed
        env_files: Env files that were written
        error: Failure description
    """

    success: bool
    record: Optional[ProvisioningRecord] = None
    credentials: Optional[Dict[str, Dict[str, str]]] = None
    databases: List[DatabaseRecord] = field(default_factory=list)
    failed_environments: List[str] = field(default_factory=list)
    env_files: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.success and self.record is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "record": self.record.to_dict() if self.record else None,
            "databases": [db.to_dict() for db in self.databases],
            "failed_environments": list(self.failed_environments),
            "env_files": list(self.env_files),
            "error": self.error,
        }
