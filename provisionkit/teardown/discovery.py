"""Resource discovery.

Finds the cloud resources attached to a project directory. Evidence comes from the
provisioning manifest, the hosting link files and the project's env files. Manifest entries
take precedence; env-file evidence only adds resources that are not already known.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urlparse

from ..envfile import parse_env_file
from ..models.environment import Environment
from ..models.inventory import (
    DatabaseResource,
    DatabaseResources,
    EnvironmentVariable,
    HostingResources,
    ResourceInventory,
    StorageResources,
    StorageStoreResource,
    mask_secret,
)
from ..provision.credentials import MANAGED_KEYS
from ..provision.manifest import load_manifest
from .graph import build_graph

logger = logging.getLogger(__name__)

SHARED_ENV_FILES = [".env"]

ENV_FILES: Dict[Environment, List[str]] = {
    Environment.DEVELOPMENT: [".env.local", ".env.development"],
    Environment.STAGING: [".env.staging"],
    Environment.PRODUCTION: [".env.prod", ".env.production"],
}

KEY_SUFFIXES: Dict[Environment, List[str]] = {
    Environment.DEVELOPMENT: ["DEV", "DEVELOPMENT"],
    Environment.STAGING: ["STAGING", "STG"],
    Environment.PRODUCTION: ["PROD", "PRODUCTION"],
}


class EnvironmentMap:
    """Env file contents grouped by environment (shared values folded in)."""

    def __init__(self, shared: Dict[str, str], own: Dict[Environment, Dict[str, str]]):
        self.shared = shared
        self.own = own
        self.by_environment = {env: {**shared, **values} for env, values in own.items()}
        self.combined: Dict[str, str] = dict(shared)
        for values in own.values():
            self.combined.update(values)

    def lookup(self, environment: Environment, keys: Sequence[str]) -> Optional[str]:
        """Find the first matching value, trying ``KEY_<ENV>`` variants before ``KEY``."""
        values = self.by_environment[environment]
        for key in keys:
            for suffix in KEY_SUFFIXES[environment]:
                if values.get(f"{key}_{suffix}"):
                    return values[f"{key}_{suffix}"]
            if values.get(key):
                return values[key]
        return None


def read_environment_map(project_path: Path) -> EnvironmentMap:
    shared = _merge_files(project_path, SHARED_ENV_FILES)
    own = {environment: _merge_files(project_path, files) for environment, files in ENV_FILES.items()}
    return EnvironmentMap(shared, own)


def _merge_files(project_path: Path, file_names: Sequence[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for name in file_names:
        values.update(parse_env_file(project_path / name))
    return values


def _read_json(path: Path) -> Optional[Any]:
    if not path.is_file():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return None


def _hostname_label(url: str, fallback: str) -> str:
    host = urlparse(url).hostname
    return host.split(".")[0] if host else fallback


class ResourceDiscovery:
    """Discovers the resources attached to a project directory."""

    def discover(self, project_path: Union[str, Path]) -> ResourceInventory:
        """Build a ResourceInventory for a project.

        Args:
            project_path: Project root

        Returns:
            ResourceInventory; every block is None when nothing is found

        Raises:
            ValueError: If the manifest exists but is malformed
        """
        path = Path(project_path).resolve()
        record = load_manifest(path)
        env_map = read_environment_map(path)

        link = _read_json(path / ".vercel" / "project.json") or {}
        vercel_config = _read_json(path / "vercel.json") or {}

        project_name = (record.project_name if record else None) or link.get("projectName") or path.name

        hosting = self._discover_hosting(path, record, env_map, link, vercel_config)
        databases = self._discover_databases(record, env_map)
        storage = self._discover_storage(record, env_map)

        inventory = ResourceInventory(
            project_name=project_name,
            project_path=path,
            hosting=hosting,
            databases=databases,
            storage=storage,
        )
        graph = build_graph(inventory)
        logger.info(f"Discovered {len(graph.deletion_order)} resources in {path}")
        return ResourceInventory(
            project_name=inventory.project_name,
            project_path=inventory.project_path,
            hosting=hosting,
            databases=databases,
            storage=storage,
            dependency_graph=graph,
        )

    def _discover_hosting(
        self,
        path: Path,
        record,
        env_map: EnvironmentMap,
        link: Dict[str, Any],
        vercel_config: Dict[str, Any],
    ) -> Optional[HostingResources]:
        combined = env_map.combined
        manifest_hosting = record.hosting if record else None

        project_id = (
            (manifest_hosting.project_id if manifest_hosting else None)
            or link.get("projectId")
            or combined.get("VERCEL_PROJECT_ID")
        )
        org_id = (
            (manifest_hosting.org_id if manifest_hosting else None)
            or link.get("orgId")
            or combined.get("VERCEL_ORG_ID")
        )
        has_hints = any(key.startswith("VERCEL_") for key in combined)
        if not (project_id or org_id or has_hints):
            return None

        return HostingResources(
            project_id=project_id,
            org_id=org_id,
            project_name=(manifest_hosting.project_name if manifest_hosting else None) or link.get("projectName"),
            domains=self._discover_domains(path, vercel_config),
            environment_variables=self._discover_variables(env_map),
        )

    def _discover_domains(self, path: Path, vercel_config: Dict[str, Any]) -> List[str]:
        alias = vercel_config.get("alias")
        if alias:
            return [str(item) for item in (alias if isinstance(alias, list) else [alias])]

        parsed = _read_json(path / "domains.json")
        if isinstance(parsed, dict):
            parsed = parsed.get("domains")
        if isinstance(parsed, list):
            return [str(item.get("name") if isinstance(item, dict) else item) for item in parsed]
        return []

    def _discover_variables(self, env_map: EnvironmentMap) -> List[EnvironmentVariable]:
        variables: List[EnvironmentVariable] = []

        def managed(key: str) -> bool:
            return key.startswith("VERCEL_") or key in MANAGED_KEYS

        for key, value in env_map.shared.items():
            if managed(key):
                variables.append(EnvironmentVariable(key=key, value=mask_secret(value), source=".env"))
        for environment, values in env_map.own.items():
            for key, value in values.items():
                if managed(key):
                    variables.append(
                        EnvironmentVariable(
                            key=key,
                            value=mask_secret(value),
                            environment=environment,
                            source=", ".join(ENV_FILES[environment]),
                        )
                    )
        return variables

    def _discover_databases(self, record, env_map: EnvironmentMap) -> Optional[DatabaseResources]:
        provider: Optional[str] = None
        resources: Dict[Environment, DatabaseResource] = {}

        if record is not None and record.database is not None:
            provider = record.database.provider
            for db in record.database.databases:
                resources[db.environment] = DatabaseResource(
                    environment=db.environment,
                    identifier=db.name,
                    url=db.url,
                    token=db.auth_token,
                )

        detected = provider or self._detect_database_provider(env_map.combined)
        if detected is not None:
            provider = detected
            for environment in Environment:
                if environment in resources:
                    continue
                found = self._database_from_env(provider, environment, env_map)
                if found is not None:
                    resources[environment] = found

        if provider is None or not resources:
            return None
        return DatabaseResources(
            provider=provider,
            resources=tuple(resources[env] for env in Environment if env in resources),
        )

    @staticmethod
    def _detect_database_provider(values: Dict[str, str]) -> Optional[str]:
        declared = (values.get("DATABASE_PROVIDER") or "").lower()
        if declared in ("turso", "libsql"):
            return "turso"
        if declared in ("supabase", "postgres"):
            return "supabase"
        if any(key.startswith(("TURSO_", "LIBSQL")) for key in values):
            return "turso"
        if any("supabase" in key.lower() for key in values):
            return "supabase"
        return None

    @staticmethod
    def _database_from_env(
        provider: str,
        environment: Environment,
        env_map: EnvironmentMap,
    ) -> Optional[DatabaseResource]:
        if provider == "turso":
            url = env_map.lookup(environment, ["TURSO_DATABASE_URL", "LIBSQL_DATABASE_URL"])
            token = env_map.lookup(environment, ["TURSO_AUTH_TOKEN", "LIBSQL_AUTH_TOKEN"])
            fallback = "unknown-database"
        else:
            url = env_map.lookup(environment, ["NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_URL"])
            token = env_map.lookup(environment, ["SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_SERVICE_ROLE"])
            fallback = "unknown-project"
        if not url:
            return None
        return DatabaseResource(
            environment=environment,
            identifier=_hostname_label(url, fallback),
            url=url,
            token=token,
            inferred=True,
        )

    def _discover_storage(self, record, env_map: EnvironmentMap) -> Optional[StorageResources]:
        stores: List[StorageStoreResource] = []
        known_ids = set()

        if record is not None and record.storage is not None:
            storage = record.storage
            stores.append(
                StorageStoreResource(
                    provider=storage.provider,
                    id=storage.store_id,
                    name=storage.store_name,
                    token=storage.tokens.get("read_write"),
                    region=storage.region,
                )
            )
            known_ids.add(storage.store_id)

        for environment in Environment:
            store_id = env_map.lookup(environment, ["BLOB_STORE_ID"])
            token = env_map.lookup(environment, ["BLOB_READ_WRITE_TOKEN", "BLOB_RW_TOKEN"])
            if store_id and token and store_id not in known_ids:
                stores.append(
                    StorageStoreResource(
                        provider="vercel-blob",
                        id=store_id,
                        name=f"{environment.value}-blob-store",
                        token=token,
                    )
                )
                known_ids.add(store_id)

        bucket = env_map.combined.get("AWS_S3_BUCKET")
        if bucket and bucket not in known_ids:
            stores.append(
                StorageStoreResource(
                    provider="aws-s3",
                    id=bucket,
                    name=bucket,
                    region=env_map.combined.get("AWS_REGION"),
                )
            )
            known_ids.add(bucket)

        r2_bucket = env_map.combined.get("R2_BUCKET_NAME")
        if r2_bucket and r2_bucket not in known_ids:
            stores.append(StorageStoreResource(provider="cloudflare-r2", id=r2_bucket, name=r2_bucket))

        if not stores:
            return None
        return StorageResources(stores=tuple(stores))


def discover(project_path: Union[str, Path]) -> ResourceInventory:
    """Discover the resources attached to a project directory."""
    return ResourceDiscovery().discover(project_path)
