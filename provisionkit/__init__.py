"""provisionkit - per-environment cloud resource provisioning and teardown."""

__version__ = "0.4.0"
