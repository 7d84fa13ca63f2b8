"""Cloud resource provisioning.

Classes:
    Provisioner: Base class shared by the real and mock variants
    RealProvisioner: Vendor CLI / boto3 backed provisioner
    MockProvisioner: Deterministic fake provisioner
"""

from __future__ import annotations

from .base import Provisioner
from .factory import resolve_provisioner
from .mock import MockProvisioner
from .real import RealProvisioner
from .service import provision_cloud_resources

__all__ = [
    "MockProvisioner",
    "Provisioner",
    "RealProvisioner",
    "provision_cloud_resources",
    "resolve_provisioner",
]
