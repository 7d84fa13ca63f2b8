"""Provisioner selection."""

from __future__ import annotations

import logging

from ..config import Config
from .base import Provisioner
from .mock import MockProvisioner
from .real import RealProvisioner

logger = logging.getLogger(__name__)


def resolve_provisioner(config: Config) -> Provisioner:
    """Pick the provisioner named by ``config.cloud_mode`` (real when unset).

    Raises:
        ValueError: If cloud_mode is not "real" or "mock"
    """
    mode = (config.cloud_mode or "real").lower()
    if mode == "mock":
        logger.debug("Using mock provisioner")
        return MockProvisioner()
    if mode == "real":
        return RealProvisioner(config)
    raise ValueError(f"Unknown cloud mode: {config.cloud_mode}")
