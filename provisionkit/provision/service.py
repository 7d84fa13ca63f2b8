"""Provisioning entry point.

``provision_cloud_resources`` never raises: every outcome, including unexpected errors, is
converted into a ProvisioningResult.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config import Config
from ..errors import ProvisioningError, ValidationError
from ..models.environment import Environment
from ..models.provisioning_record import ProvisioningRecord, ProvisioningRequest
from ..models.provisioning_result import ProvisioningResult
from .base import Provisioner
from .credentials import succeeded_environments, write_env_files
from .factory import resolve_provisioner
from .manifest import save_manifest

logger = logging.getLogger(__name__)


def provision_cloud_resources(
    request: ProvisioningRequest,
    config: Optional[Config] = None,
    provisioner: Optional[Provisioner] = None,
) -> ProvisioningResult:
    """Provision resources, persist the manifest and write env files.

    Args:
        request: What to create
        config: Settings (auto_provision toggle, cloud_mode, vendor credentials)
        provisioner: Provisioner to use instead of the one selected by config

    Returns:
        ProvisioningResult describing what happened
    """
    config = config or Config()

    if not config.auto_provision:
        logger.info("Automatic provisioning disabled, skipping")
        return ProvisioningResult(success=True)

    if request.is_empty:
        logger.info("Nothing to provision")
        return ProvisioningResult(success=True)

    try:
        provisioner = provisioner or resolve_provisioner(config)
        record = provisioner.provision(request)
    except ValidationError as e:
        logger.error(f"Invalid provisioning request: {e}")
        return ProvisioningResult(success=False, error=str(e))
    except ProvisioningError as e:
        return _handle_partial_failure(request, e)
    except Exception as e:
        logger.exception("Unexpected error during provisioning")
        return ProvisioningResult(success=False, error=str(e))

    try:
        save_manifest(request.project_path, record)
        written = write_env_files(request.project_path, record, request.environments)
    except Exception as e:
        logger.exception("Failed to persist provisioning results")
        return ProvisioningResult(success=False, record=record, error=f"Failed to write results: {e}")

    return ProvisioningResult(
        success=True,
        record=record,
        credentials=written["credentials"],
        databases=list(record.database.databases) if record.database else [],
        env_files=written["files"],
    )


def _handle_partial_failure(request: ProvisioningRequest, error: ProvisioningError) -> ProvisioningResult:
    failed = _failed_environment_names(error)
    logger.error(f"Provisioning failed: {error}")

    record: Optional[ProvisioningRecord] = error.partial_record
    if record is None or (record.database is None and record.storage is None and record.hosting is None):
        return ProvisioningResult(success=False, record=record, failed_environments=failed, error=str(error))

    succeeded = succeeded_environments(request.environments, failed)
    try:
        save_manifest(request.project_path, record)
        written = write_env_files(request.project_path, record, succeeded)
    except Exception:
        logger.exception("Failed to persist partial provisioning results")
        return ProvisioningResult(success=False, record=record, failed_environments=failed, error=str(error))

    return ProvisioningResult(
        success=False,
        record=record,
        credentials=written["credentials"],
        databases=list(record.database.databases) if record.database else [],
        failed_environments=failed,
        env_files=written["files"],
        error=str(error),
    )


def _failed_environment_names(error: ProvisioningError) -> List[str]:
    names = []
    for name in error.failed_environments:
        try:
            names.append(Environment.parse(name).value)
        except ValueError:
            names.append(name)
    return names
