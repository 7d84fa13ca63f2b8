"""Manifest persistence (cloud-resources.json at the project root)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from ..envfile import atomic_write
from ..models.provisioning_record import ProvisioningRecord

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "cloud-resources.json"


def manifest_path(project_path: Union[str, Path]) -> Path:
    return Path(project_path) / MANIFEST_FILENAME


def save_manifest(project_path: Union[str, Path], record: ProvisioningRecord) -> Path:
    """Write the record as pretty-printed JSON.

    Returns:
        Path of the manifest file
    """
    path = manifest_path(project_path)
    atomic_write(path, json.dumps(record.to_dict(), indent=2) + "\n")
    logger.info(f"Saved manifest to {path}")
    return path


def load_manifest(project_path: Union[str, Path]) -> Optional[ProvisioningRecord]:
    """Read the manifest.

    Returns:
        ProvisioningRecord, or None when the project has no manifest

    Raises:
        ValueError: If the file is not valid manifest JSON
    """
    path = manifest_path(project_path)
    if not path.is_file():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return ProvisioningRecord.from_dict(data)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed manifest {path}: {e}") from e
