"""Teardown entry points.

``run_cleanup`` wires discovery, planning, execution and audit logging together and never
raises: validation problems and unexpected errors come back as a failed CleanupResult.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from ..config import Config
from ..errors import ValidationError
from ..models.cleanup_plan import CleanupPlan, ResourceSelection
from ..models.cleanup_result import CleanupResult
from .audit import AuditStorage
from .deleter import ResourceDeleter
from .discovery import discover
from .orchestrator import CleanupOrchestrator
from .planner import build_plan
from .reporter import CleanupReporter

logger = logging.getLogger(__name__)


def preview_cleanup(project_path: Union[str, Path], selection: ResourceSelection) -> CleanupPlan:
    """Discover resources and build a plan without deleting anything.

    Raises:
        ValidationError: If the selection is empty or names types the project does not have
        ValueError: If the project manifest is malformed
    """
    inventory = discover(project_path)
    return build_plan(inventory, selection)


def run_cleanup(
    project_path: Union[str, Path],
    selection: ResourceSelection,
    *,
    config: Optional[Config] = None,
    deleter: Optional[ResourceDeleter] = None,
    reporter: Optional[CleanupReporter] = None,
    audit_storage: Optional[AuditStorage] = None,
) -> CleanupResult:
    """Discover, plan and execute a cleanup.

    Args:
        project_path: Project root
        selection: Types, scope and exclusions
        config: Vendor settings for the default deleter
        deleter: Deleter to use instead of the default one
        reporter: Progress reporter (optional)
        audit_storage: Where to write the audit log (optional)

    Returns:
        CleanupResult; `error` is set when the run failed or never started
    """
    run_id = f"run_{uuid.uuid4().hex[:12]}"
    started_at = datetime.now(timezone.utc)

    try:
        plan = preview_cleanup(project_path, selection)
    except ValidationError as e:
        logger.error(f"Invalid cleanup selection: {e}")
        return CleanupResult(success=False, error=str(e), run_id=run_id)
    except Exception as e:
        logger.exception("Failed to plan cleanup")
        return CleanupResult(success=False, error=str(e), run_id=run_id)

    try:
        deleter = deleter or ResourceDeleter(config=config, project_path=project_path)
        result = CleanupOrchestrator(deleter, reporter=reporter).execute(plan)
    except Exception as e:
        logger.exception("Unexpected error during cleanup")
        return CleanupResult(success=False, error=str(e), run_id=run_id)

    result.run_id = run_id
    if audit_storage is not None:
        try:
            path = audit_storage.log_run(run_id, str(project_path), plan, result, timestamp=started_at)
            logger.info(f"Audit log written to {path}")
        except OSError as e:
            logger.warning(f"Could not write audit log: {e}")

    return result
