"""Resource deletion strategies.

Maps each (resource type, provider) pair to the vendor call that deletes it, with retry
logic for transient failures. This is the only place teardown retries anything.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..config import Config
from ..errors import VendorCommandError
from ..models.cleanup_plan import DeletionStep
from ..models.resource_type import ResourceType
from ..vendors.runner import is_transient
from ..vendors.s3 import S3Buckets
from ..vendors.supabase import SupabaseCLI
from ..vendors.turso import TursoCLI
from ..vendors.vercel import VercelCLI
from ..vendors.wrangler import WranglerCLI

logger = logging.getLogger(__name__)

DeletionOutcome = Tuple[bool, Optional[str], Optional[Dict[str, Any]]]


class ResourceDeleter:
    """Deletes the resource behind a DeletionStep.

    Args:
        config: Vendor credentials and settings
        project_path: Project directory (vercel commands run against the linked project)
        max_retries: Maximum number of attempts for transient failures (default: 3)
        sleep: Sleep function used between retries
    """

    # Deletion method mapping: (resource_type, provider) -> method name
    DELETION_METHODS = {
        (ResourceType.HOSTING_PROJECT, "vercel"): "_delete_vercel_project",
        (ResourceType.DOMAINS, "vercel"): "_delete_domain",
        (ResourceType.ENVIRONMENT_VARIABLES, "vercel"): "_delete_environment_variables",
        (ResourceType.DATABASE, "turso"): "_delete_turso_database",
        (ResourceType.DATABASE, "supabase"): "_delete_supabase_project",
        (ResourceType.STORAGE_STORE, "vercel-blob"): "_delete_blob_store",
        (ResourceType.STORAGE_STORE, "aws-s3"): "_delete_s3_bucket",
        (ResourceType.STORAGE_STORE, "cloudflare-r2"): "_delete_r2_bucket",
    }

    def __init__(
        self,
        config: Optional[Config] = None,
        project_path: Optional[Union[str, Path]] = None,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or Config()
        self.project_path = project_path
        self.max_retries = max_retries
        self.sleep = sleep

    def delete(self, step: DeletionStep) -> DeletionOutcome:
        """Delete the resource described by a step.

        Args:
            step: Deletion step

        Returns:
            Tuple of (success, error_message, rollback_data)
        """
        key = (step.type, step.provider)
        if key not in self.DELETION_METHODS:
            error_msg = f"Unsupported resource: {step.type.value} ({step.provider})"
            logger.warning(error_msg)
            return (False, error_msg, None)

        method = getattr(self, self.DELETION_METHODS[key])
        rollback_data = self.rollback_data(step)

        for attempt in range(self.max_retries):
            try:
                deleted = method(step.parameters)
                if deleted:
                    logger.info(f"Successfully deleted {step.type.value}: {step.resource_id}")
                else:
                    logger.info(f"Resource {step.resource_id} already deleted")
                return (True, None, rollback_data)

            except VendorCommandError as e:
                if is_transient(e) and attempt < self.max_retries - 1:
                    wait_time = 2**attempt
                    logger.debug(
                        f"Transient failure deleting {step.resource_id}, "
                        f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    self.sleep(wait_time)
                    continue
                logger.error(f"Failed to delete {step.resource_id}: {e}")
                return (False, str(e), None)

            except Exception as e:
                error_msg = f"Unexpected error deleting {step.type.value} {step.resource_id}: {e}"
                logger.error(error_msg)
                return (False, error_msg, None)

        error_msg = f"Failed to delete {step.type.value} {step.resource_id} after {self.max_retries} attempts"
        logger.error(error_msg)
        return (False, error_msg, None)

    def rollback_data(self, step: DeletionStep) -> Dict[str, Any]:
        """Describe how to recreate a resource by hand."""
        params = step.parameters
        data: Dict[str, Any] = {
            "resource_type": step.type.value,
            "resource_id": step.resource_id,
            "provider": step.provider,
        }
        if step.environment is not None:
            data["environment"] = step.environment.value

        if step.type == ResourceType.HOSTING_PROJECT:
            name = params.get("project_name") or step.resource_id
            data.update(org_id=params.get("org_id"), recreate_command=f"vercel project add {name}")
        elif step.type == ResourceType.DOMAINS:
            data["recreate_command"] = f"vercel domains add {params.get('domain', step.resource_id)}"
        elif step.type == ResourceType.ENVIRONMENT_VARIABLES:
            target = params.get("target")
            keys = list(params.get("keys", []))
            data.update(keys=keys, target=target, recreate_command=f"vercel env add <KEY> {target}")
        elif step.type == ResourceType.DATABASE:
            name = params.get("name", step.resource_id)
            if step.provider == "turso":
                data["recreate_command"] = f"turso db create {name}"
            else:
                data["recreate_command"] = f"supabase projects create {name}"
            data["url"] = params.get("url")
        elif step.type == ResourceType.STORAGE_STORE:
            name = params.get("name", step.resource_id)
            commands = {
                "vercel-blob": f"vercel blob store add {name}",
                "aws-s3": f"aws s3api create-bucket --bucket {name}",
                "cloudflare-r2": f"wrangler r2 bucket create {name}",
            }
            data["recreate_command"] = commands.get(step.provider or "", "")
            if params.get("region"):
                data["region"] = params["region"]
        return data

    # Vendor calls. Each returns True when deleted, False when the resource was already gone.

    def _vercel(self) -> VercelCLI:
        return VercelCLI(
            token=self.config.vercel_token,
            scope=self.config.vercel_scope,
            cwd=self.project_path,
            timeout=self.config.vendor_timeout,
        )

    def _delete_vercel_project(self, params: Dict[str, Any]) -> bool:
        return self._vercel().remove_project(params.get("project_name") or params["project_id"])

    def _delete_domain(self, params: Dict[str, Any]) -> bool:
        return self._vercel().remove_domain(params["domain"])

    def _delete_environment_variables(self, params: Dict[str, Any]) -> bool:
        vercel = self._vercel()
        removed = [key for key in params.get("keys", []) if vercel.remove_env(key, params["target"])]
        return bool(removed)

    def _delete_turso_database(self, params: Dict[str, Any]) -> bool:
        turso = TursoCLI(token=self.config.turso_token, timeout=self.config.vendor_timeout)
        if not params.get("inferred"):
            return turso.destroy_database(params["name"])

        # Names guessed from env files must match a live database; "not found" is a failure
        url = params.get("url") or params["name"]
        name = turso.find_database(url)
        if name is None:
            raise VendorCommandError(f"No Turso database serves {url}", command=TursoCLI.COMMAND, args=["db", "list"])
        if not turso.destroy_database(name):
            raise VendorCommandError(
                f"Turso database {name} not found", command=TursoCLI.COMMAND, args=["db", "destroy", name]
            )
        return True

    def _delete_supabase_project(self, params: Dict[str, Any]) -> bool:
        supabase = SupabaseCLI(token=self.config.supabase_token, timeout=self.config.vendor_timeout)
        return supabase.delete_project(params["name"])

    def _delete_blob_store(self, params: Dict[str, Any]) -> bool:
        return self._vercel().remove_blob_store(params["store_id"])

    def _delete_s3_bucket(self, params: Dict[str, Any]) -> bool:
        buckets = S3Buckets(region=params.get("region") or self.config.aws_region, profile=self.config.aws_profile)
        return buckets.delete_bucket(params["store_id"])

    def _delete_r2_bucket(self, params: Dict[str, Any]) -> bool:
        wrangler = WranglerCLI(
            token=self.config.cloudflare_token,
            account_id=self.config.cloudflare_account_id,
            timeout=self.config.vendor_timeout,
        )
        return wrangler.delete_bucket(params["store_id"])
