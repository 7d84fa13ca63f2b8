"""Mapping of provisioned resources to env file keys."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .. import envfile
from ..models.environment import Environment
from ..models.provisioning_record import DatabaseRecord, HostingRecord, ProvisioningRecord, StorageRecord

logger = logging.getLogger(__name__)

ENV_FILES: Dict[Environment, List[str]] = {
    Environment.DEVELOPMENT: [".env.local", ".env.development"],
    Environment.STAGING: [".env.staging"],
    Environment.PRODUCTION: [".env.production"],
}

SHARED_KEY = "shared"

# Keys written by provisioning; discovery reports these as hosting environment variables
MANAGED_KEYS = frozenset(
    [
        "DATABASE_URL",
        "TURSO_DATABASE_URL",
        "TURSO_AUTH_TOKEN",
        "SUPABASE_URL",
        "NEXT_PUBLIC_SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "BLOB_STORE_ID",
        "BLOB_READ_WRITE_TOKEN",
        "AWS_S3_BUCKET",
        "S3_PUBLIC_URL",
        "R2_BUCKET_NAME",
        "R2_ENDPOINT",
    ]
)


def database_env_values(provider: str, database: DatabaseRecord) -> Dict[str, str]:
    """Env keys for one environment's database."""
    if provider == "turso":
        token = database.auth_token or ""
        return {
            "DATABASE_URL": f"{database.url}?authToken={token}" if token else database.url,
            "TURSO_DATABASE_URL": database.url,
            "TURSO_AUTH_TOKEN": token,
        }
    if provider == "supabase":
        return {
            "SUPABASE_URL": database.url,
            "NEXT_PUBLIC_SUPABASE_URL": database.url,
            "SUPABASE_SERVICE_ROLE_KEY": database.auth_token or "",
        }
    return {"DATABASE_URL": database.url}


def storage_env_values(storage: StorageRecord) -> Dict[str, str]:
    if storage.provider == "vercel-blob":
        values = {"BLOB_STORE_ID": storage.store_id}
        if storage.tokens.get("read_write"):
            values["BLOB_READ_WRITE_TOKEN"] = storage.tokens["read_write"]
        return values
    if storage.provider == "aws-s3":
        values = {"AWS_S3_BUCKET": storage.store_name}
        if storage.region:
            values["AWS_REGION"] = storage.region
        if storage.public_url:
            values["S3_PUBLIC_URL"] = storage.public_url
        return values
    if storage.provider == "cloudflare-r2":
        values = {"R2_BUCKET_NAME": storage.store_name}
        if storage.endpoint:
            values["R2_ENDPOINT"] = storage.endpoint
        return values
    return {}


def hosting_env_values(hosting: HostingRecord) -> Dict[str, str]:
    values = {"VERCEL_PROJECT_ID": hosting.project_id}
    if hosting.org_id:
        values["VERCEL_ORG_ID"] = hosting.org_id
    return values


def build_credentials(
    record: ProvisioningRecord,
    environments: Sequence[Environment],
) -> Dict[str, Dict[str, str]]:
    """Collect env values per environment.

    Args:
        record: What was provisioned
        environments: Environments whose files may be written (succeeded ones only)

    Returns:
        Values keyed by environment short name, plus "shared" for project-wide keys
    """
    credentials: Dict[str, Dict[str, str]] = {}

    shared: Dict[str, str] = {}
    if record.storage is not None:
        shared.update(storage_env_values(record.storage))
    if record.hosting is not None:
        shared.update(hosting_env_values(record.hosting))
    if shared:
        credentials[SHARED_KEY] = shared

    for environment in environments:
        values: Dict[str, str] = {}
        if record.database is not None:
            database = record.database.for_environment(environment)
            if database is not None:
                values.update(database_env_values(record.database.provider, database))
        if values:
            credentials[environment.short_name] = values

    return credentials


def write_env_files(
    project_path: Path,
    record: ProvisioningRecord,
    environments: Sequence[Environment],
) -> Dict[str, object]:
    """Merge provisioned credentials into the project's env files.

    Database keys go to the files of their own environment. Storage and hosting keys go to
    the files of every environment in `environments`. ``.env.local`` belongs to development
    and is only written when development succeeded.

    Args:
        project_path: Project root
        record: What was provisioned
        environments: Environments that succeeded

    Returns:
        Dict with "credentials" (as from build_credentials) and "files" (paths written)
    """
    credentials = build_credentials(record, environments)
    shared = credentials.get(SHARED_KEY, {})

    pending: Dict[str, Dict[str, str]] = {}
    for environment in environments:
        env_values = credentials.get(environment.short_name, {})
        if not env_values and not shared:
            continue
        for file_name in ENV_FILES[environment]:
            values = pending.setdefault(file_name, {})
            values.update(shared)
            values.update(env_values)

    written: List[str] = []
    for file_name, values in pending.items():
        path = Path(project_path) / file_name
        envfile.merge(path, values)
        written.append(str(path))
        logger.debug(f"Wrote {len(values)} keys to {path}")

    return {"credentials": credentials, "files": written}


def succeeded_environments(
    requested: Sequence[Environment],
    failed: Optional[Sequence[str]] = None,
) -> List[Environment]:
    failed_set = {Environment.parse(name) for name in (failed or [])}
    return [env for env in requested if env not in failed_set]
