"""Audit storage for cleanup runs.

Stores and retrieves audit logs in YAML format for troubleshooting and recovery.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..models.cleanup_plan import CleanupPlan
from ..models.cleanup_result import CleanupResult

# Keys whose values are masked before they are written to disk
SECRET_KEY_PATTERN = re.compile(r"(token|secret|password|key|auth)", re.IGNORECASE)
SAFE_KEYS = {"keys", "resource_type", "resource_id", "recreate_command"}


def mask_secrets(data: Any) -> Any:
    """Recursively mask values stored under secret-looking keys."""
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key not in SAFE_KEYS and SECRET_KEY_PATTERN.search(str(key)) and isinstance(value, str) and value:
                masked[key] = "****"
            else:
                masked[key] = mask_secrets(value)
        return masked
    if isinstance(data, list):
        return [mask_secrets(item) for item in data]
    return data


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class AuditStorage:
    """Audit log storage and retrieval.

    Stores cleanup run audit logs as YAML files organized by year/month.

    Storage structure:
        ~/.provisionkit/audit-logs/
            2025/
                11/
                    cleanup-run_123.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.provisionkit/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".provisionkit" / "audit-logs")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_run(
        self,
        run_id: str,
        project_path: str,
        plan: CleanupPlan,
        result: CleanupResult,
        timestamp: Optional[datetime] = None,
    ) -> Path:
        """Write the audit log of one cleanup run.

        Overwrites an existing log with the same run ID.

        Args:
            run_id: Run identifier
            project_path: Project the run targeted
            plan: Executed plan
            result: Execution result
            timestamp: When the run started (default: now, UTC)

        Returns:
            Path of the written audit file
        """
        timestamp = _as_utc(timestamp or datetime.now(timezone.utc))
        year_month_dir = self.storage_dir / str(timestamp.year) / f"{timestamp.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "resource_cleanup",
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            "run": {
                "run_id": run_id,
                "timestamp": timestamp.isoformat(),
                "project_name": plan.project_name,
                "project_path": str(project_path),
                "selection": plan.target_resources.to_dict(),
                "risk_level": plan.risk_level.value,
                "planned_steps": len(plan.steps),
                "estimated_duration": plan.estimated_duration,
                "success": result.success,
                "completed_steps": result.completed_steps,
                "failed_steps": result.failed_steps,
                "rollback_performed": result.rollback_performed,
                "total_duration": round(result.total_duration, 3),
                "error": result.error,
            },
            "steps": [mask_secrets(step_result.to_dict()) for step_result in result.step_results],
            "recovery": mask_secrets(result.recovery_advisory.to_dict()),
        }

        audit_file = year_month_dir / f"cleanup-{run_id}.yaml"
        with open(audit_file, "w", encoding="utf-8") as f:
            yaml.dump(audit_data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        return audit_file

    def get_run(self, run_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a run's audit log by ID.

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/cleanup-{run_id}.yaml"):
            with open(audit_file, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        return None

    def query_runs(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Query runs within a date range.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all

        Returns:
            Audit logs ordered by directory and file name
        """
        since = _as_utc(since) if since else None
        until = _as_utc(until) if until else None
        results = []

        for year_dir in sorted(self.storage_dir.glob("*")):
            if not year_dir.is_dir():
                continue

            for month_dir in sorted(year_dir.glob("*")):
                if not month_dir.is_dir():
                    continue

                for audit_file in sorted(month_dir.glob("cleanup-*.yaml")):
                    with open(audit_file, "r", encoding="utf-8") as f:
                        audit_data = yaml.safe_load(f)

                    timestamp = _as_utc(datetime.fromisoformat(audit_data["run"]["timestamp"]))
                    if since and timestamp < since:
                        continue
                    if until and timestamp > until:
                        continue

                    results.append(audit_data)

        return results
