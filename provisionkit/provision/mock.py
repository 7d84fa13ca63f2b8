"""Provisioner that fabricates deterministic records without calling any vendor."""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Iterable, Optional

from ..errors import ProvisioningError
from ..models.environment import Environment
from ..models.provisioning_record import DatabaseRecord, HostingRecord, ProvisioningRequest, StorageRecord
from .base import Provisioner

logger = logging.getLogger(__name__)


def _fake_token(*parts: str) -> str:
    return hashlib.sha256(":".join(parts).encode("utf-8")).hexdigest()[:32]


class MockProvisioner(Provisioner):
    """Returns fake but stable resources derived from resource names.

    Args:
        fail_environments: Environments whose database creation should fail
        fail_storage: Make storage creation fail
        clock: Timestamp source for records (optional)
    """

    mode = "mock"

    def __init__(
        self,
        fail_environments: Optional[Iterable[str]] = None,
        fail_storage: bool = False,
        clock: Optional[Callable] = None,
    ):
        super().__init__(clock=clock)
        self.fail_environments = set(Environment.parse_many(fail_environments or []))
        self.fail_storage = fail_storage

    def create_hosting(self, name: str, request: ProvisioningRequest) -> HostingRecord:
        return HostingRecord(
            project_id=f"prj_mock{_fake_token('vercel', name)[:16]}",
            project_name=name,
            org_id="team_mock",
            production_url=f"https://{name}.vercel.app",
        )

    def create_database(
        self,
        provider: str,
        environment: Environment,
        name: str,
        request: ProvisioningRequest,
    ) -> DatabaseRecord:
        if environment in self.fail_environments:
            raise ProvisioningError(f"Simulated failure creating {provider} database {name}")

        if provider == "supabase":
            ref = _fake_token("supabase", name)[:20]
            url = f"https://{ref}.supabase.co"
        else:
            url = f"libsql://{name}-mock.turso.io"
        logger.debug(f"Mock {provider} database {name} -> {url}")
        return DatabaseRecord(
            environment=environment,
            name=name,
            url=url,
            auth_token=f"mock-{_fake_token(provider, name)}",
        )

    def create_storage(self, provider: str, name: str, request: ProvisioningRequest) -> StorageRecord:
        if self.fail_storage:
            raise ProvisioningError(f"Simulated failure creating {provider} store {name}")

        if provider == "vercel-blob":
            return StorageRecord(
                provider=provider,
                store_name=name,
                store_id=f"store_mock{_fake_token('blob', name)[:12]}",
                tokens={"read_write": f"vercel_blob_rw_mock_{_fake_token('blob-rw', name)}"},
            )
        if provider == "aws-s3":
            return StorageRecord(
                provider=provider,
                store_name=name,
                store_id=name,
                public_url=f"https://{name}.s3.us-east-1.amazonaws.com",
                region="us-east-1",
            )
        return StorageRecord(
            provider=provider,
            store_name=name,
            store_id=name,
            endpoint="https://mock-account.r2.cloudflarestorage.com",
        )
