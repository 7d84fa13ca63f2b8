"""Provisioner backed by vendor CLIs and boto3."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..config import Config
from ..errors import ProvisioningError
from ..models.environment import Environment
from ..models.provisioning_record import DatabaseRecord, HostingRecord, ProvisioningRequest, StorageRecord
from ..vendors.s3 import S3Buckets
from ..vendors.supabase import SupabaseCLI
from ..vendors.turso import TursoCLI
from ..vendors.vercel import VercelCLI
from ..vendors.wrangler import WranglerCLI
from .base import Provisioner

logger = logging.getLogger(__name__)


class RealProvisioner(Provisioner):
    """Creates real cloud resources.

    Args:
        config: Vendor credentials and settings
        clock: Timestamp source for records (optional)
    """

    mode = "real"

    def __init__(self, config: Optional[Config] = None, clock: Optional[Callable] = None):
        super().__init__(clock=clock)
        self.config = config or Config()

    def _vercel(self, request: ProvisioningRequest) -> VercelCLI:
        return VercelCLI(
            token=self.config.vercel_token,
            scope=self.config.vercel_scope,
            cwd=request.project_path,
            timeout=self.config.vendor_timeout,
        )

    def create_hosting(self, name: str, request: ProvisioningRequest) -> HostingRecord:
        project = self._vercel(request).create_project(name)
        logger.info(f"Vercel project ready: {project.project_id}")
        return HostingRecord(
            project_id=project.project_id,
            project_name=project.name,
            org_id=project.org_id or self.config.vercel_org_id,
            production_url=project.production_url,
        )

    def create_database(
        self,
        provider: str,
        environment: Environment,
        name: str,
        request: ProvisioningRequest,
    ) -> DatabaseRecord:
        if provider == "turso":
            turso = TursoCLI(
                token=self.config.turso_token,
                group=self.config.turso_group,
                location=self.config.turso_location,
                timeout=self.config.vendor_timeout,
            )
            db = turso.create_database(name)
            return DatabaseRecord(environment=environment, name=db.name, url=db.url, auth_token=db.auth_token)

        if provider == "supabase":
            supabase = SupabaseCLI(
                token=self.config.supabase_token,
                org_id=self.config.supabase_org_id,
                region=self.config.supabase_region,
                db_password=self.config.supabase_db_password,
                timeout=self.config.vendor_timeout,
            )
            project = supabase.create_project(name)
            return DatabaseRecord(
                environment=environment,
                name=project.ref,
                url=project.url,
                auth_token=project.service_role_key,
            )

        raise ProvisioningError(f"Unsupported database provider: {provider}")

    def create_storage(self, provider: str, name: str, request: ProvisioningRequest) -> StorageRecord:
        if provider == "vercel-blob":
            store = self._vercel(request).create_blob_store(name)
            tokens = {"read_write": store.read_write_token} if store.read_write_token else {}
            return StorageRecord(provider=provider, store_name=store.name, store_id=store.store_id, tokens=tokens)

        if provider == "aws-s3":
            buckets = S3Buckets(region=self.config.aws_region, profile=self.config.aws_profile)
            bucket = buckets.ensure_bucket(name)
            return StorageRecord(
                provider=provider,
                store_name=bucket,
                store_id=bucket,
                public_url=buckets.public_url(bucket),
                region=self.config.aws_region,
            )

        if provider == "cloudflare-r2":
            wrangler = WranglerCLI(
                token=self.config.cloudflare_token,
                account_id=self.config.cloudflare_account_id,
                timeout=self.config.vendor_timeout,
            )
            bucket = wrangler.create_bucket(name)
            return StorageRecord(provider=provider, store_name=bucket, store_id=bucket, endpoint=wrangler.endpoint)

        raise ProvisioningError(f"Unsupported storage provider: {provider}")
