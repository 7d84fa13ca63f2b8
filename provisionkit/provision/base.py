"""Provisioner base class.

A Provisioner turns a ProvisioningRequest into a ProvisioningRecord. The base class owns
the flow shared by every variant: names are validated up front, the hosting project is
created first, per-environment databases run concurrently, and storage comes last.
Subclasses only implement the per-resource creation calls.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Dict, Hashable, Optional, Tuple, TypeVar

from ..errors import ProvisioningError, ValidationError
from ..models.environment import Environment
from ..models.provisioning_record import (
    DatabaseBlock,
    DatabaseRecord,
    HostingRecord,
    ProvisioningRecord,
    ProvisioningRequest,
    StorageRecord,
)
from .naming import get_naming_policy

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


def run_concurrently(
    tasks: Dict[K, Callable[[], T]],
    max_workers: Optional[int] = None,
) -> Tuple[Dict[K, T], Dict[K, BaseException]]:
    """Run independent tasks on a thread pool and wait for all of them.

    A failing task never cancels the others.

    Args:
        tasks: Callables keyed by an identifier
        max_workers: Pool size (default: one thread per task)

    Returns:
        Tuple of (results by key, exceptions by key), both in the order of `tasks`
    """
    if not tasks:
        return {}, {}

    results: Dict[K, T] = {}
    errors: Dict[K, BaseException] = {}
    with ThreadPoolExecutor(max_workers=max_workers or len(tasks)) as executor:
        futures = {key: executor.submit(task) for key, task in tasks.items()}
        for key, future in futures.items():
            try:
                results[key] = future.result()
            except Exception as e:
                errors[key] = e
    return results, errors


class Provisioner(ABC):
    """Creates the cloud resources described by a ProvisioningRequest."""

    mode: str = "real"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def resource_names(self, request: ProvisioningRequest) -> Dict[str, object]:
        """Derive and validate every resource name for a request.

        Returns:
            Mapping with "hosting" (str or None), "databases" ({Environment: str}) and
            "storage" (str or None)

        Raises:
            ValidationError: If the request or any derived name is invalid
        """
        request.validate()
        names: Dict[str, object] = {"hosting": None, "databases": {}, "storage": None}

        if request.hosting:
            names["hosting"] = get_naming_policy("vercel").name_for(request.project_name)
        if request.database_provider:
            policy = get_naming_policy(request.database_provider)
            names["databases"] = {env: policy.name_for(request.project_name, env) for env in request.environments}
        if request.storage_provider:
            names["storage"] = get_naming_policy(request.storage_provider).name_for(request.project_name)
        return names

    def provision(self, request: ProvisioningRequest) -> ProvisioningRecord:
        """Provision every resource in the request.

        Args:
            request: What to create

        Returns:
            ProvisioningRecord describing the created resources

        Raises:
            ValidationError: If a name or the request is invalid (nothing was created)
            ProvisioningError: If any resource failed; `partial_record` holds what succeeded
        """
        names = self.resource_names(request)
        logger.info(f"Provisioning resources for {request.project_name} ({self.mode} mode)")

        hosting: Optional[HostingRecord] = None
        if names["hosting"]:
            try:
                hosting = self.create_hosting(names["hosting"], request)
            except ValidationError:
                raise
            except Exception as e:
                logger.error(f"Hosting project creation failed: {e}")
                raise ProvisioningError(
                    f"Failed to create hosting project {names['hosting']}",
                    cause=e,
                    partial_record=self._record(request),
                ) from e

        database: Optional[DatabaseBlock] = None
        failures: Dict[str, BaseException] = {}
        db_names: Dict[Environment, str] = names["databases"]  # type: ignore[assignment]
        if db_names:
            provider = request.database_provider
            tasks = {
                env: (lambda env=env, name=name: self.create_database(provider, env, name, request))
                for env, name in db_names.items()
            }
            created, errors = run_concurrently(tasks)
            for env, error in errors.items():
                logger.error(f"Database provisioning failed for {env.value}: {error}")
                failures[env.value] = error
            database = DatabaseBlock(
                provider=provider,
                databases=tuple(created[env] for env in request.environments if env in created),
            )

        storage: Optional[StorageRecord] = None
        storage_error: Optional[BaseException] = None
        if names["storage"]:
            try:
                storage = self.create_storage(request.storage_provider, names["storage"], request)
            except Exception as e:
                logger.error(f"Storage provisioning failed: {e}")
                storage_error = e

        record = self._record(request, database=database, storage=storage, hosting=hosting)

        if failures or storage_error is not None:
            parts = []
            if failures:
                parts.append(f"database provisioning failed for: {', '.join(failures)}")
            if storage_error is not None:
                parts.append(f"storage provisioning failed: {storage_error}")
            raise ProvisioningError(
                "Provisioning incomplete: " + "; ".join(parts),
                cause=storage_error or next(iter(failures.values())),
                failures=failures,
                partial_record=record,
            )

        if database is not None:
            record.validate(request.environments)
        logger.info(f"Provisioned resources for {request.project_name}")
        return record

    def _record(self, request: ProvisioningRequest, **blocks) -> ProvisioningRecord:
        return ProvisioningRecord(
            mode=self.mode,
            created_at=self.clock(),
            project_name=request.project_name,
            **blocks,
        )

    @abstractmethod
    def create_hosting(self, name: str, request: ProvisioningRequest) -> HostingRecord:
        """Create (or reuse) the hosting project."""

    @abstractmethod
    def create_database(
        self,
        provider: str,
        environment: Environment,
        name: str,
        request: ProvisioningRequest,
    ) -> DatabaseRecord:
        """Create (or reuse) one environment's database."""

    @abstractmethod
    def create_storage(self, provider: str, name: str, request: ProvisioningRequest) -> StorageRecord:
        """Create (or reuse) the project's object storage."""
