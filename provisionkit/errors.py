"""Error taxonomy for provisioning and teardown.

ValidationError is always raised locally, before any vendor call is issued.
ProvisioningError wraps vendor failures raised while creating resources.
VendorCommandError is raised by the vendor command layer for a failed process.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .models.provisioning_record import ProvisioningRecord


class ProvisionKitError(Exception):
    """Base class for all provisionkit errors."""


class ValidationError(ProvisionKitError, ValueError):
    """Invalid naming or resource selection. Never retried."""


class VendorCommandError(ProvisionKitError):
    """A vendor CLI or SDK call failed.

    Attributes:
        command: Executable name (e.g. "turso")
        args: Argument vector passed to the command
        exit_code: Process exit code (None if the process never ran)
        stderr: Raw standard error captured for diagnostics
    """

    def __init__(
        self,
        message: str,
        command: str = "",
        args: Optional[Sequence[str]] = None,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.args_list: List[str] = list(args or [])
        self.exit_code = exit_code
        self.stderr = stderr

    def __str__(self) -> str:
        message = super().__str__()
        if self.stderr:
            return f"{message}: {self.stderr.strip()}"
        return message


class ProvisioningError(ProvisionKitError):
    """Resource creation failed for one or more resources.

    Attributes:
        cause: Underlying exception (single-resource failures)
        failures: Per-environment causes for multi-environment failures
        partial_record: Record of the resources that were created before the failure
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        failures: Optional[Dict[str, BaseException]] = None,
        partial_record: Optional["ProvisioningRecord"] = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.failures: Dict[str, BaseException] = dict(failures or {})
        self.partial_record = partial_record

    @property
    def failed_environments(self) -> List[str]:
        """Names of the environments whose provisioning failed."""
        return list(self.failures.keys())
