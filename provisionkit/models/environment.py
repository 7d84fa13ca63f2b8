"""Deployment environment model."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List


class Environment(Enum):
    """The three fixed deployment environments.

    Values are the canonical wire strings. Each member also has a short name used in the
    manifest and a suffix appended to per-environment resource names.
    """

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]

    @property
    def suffix(self) -> str:
        return _SUFFIXES[self]

    @classmethod
    def parse(cls, value: "str | Environment") -> "Environment":
        """Parse an environment name or alias (dev, stg, prod, ...).

        Raises:
            ValueError: If the value is not a known environment
        """
        if isinstance(value, Environment):
            return value
        key = str(value).strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unknown environment: {value}. Must be one of: dev, staging, prod")

    @classmethod
    def parse_many(cls, values: Iterable["str | Environment"]) -> List["Environment"]:
        """Parse several names, dropping duplicates and keeping canonical order."""
        parsed = {cls.parse(value) for value in values}
        return [env for env in cls if env in parsed]


_SHORT_NAMES = {
    Environment.DEVELOPMENT: "dev",
    Environment.STAGING: "staging",
    Environment.PRODUCTION: "prod",
}

_SUFFIXES = {
    Environment.DEVELOPMENT: "-dev",
    Environment.STAGING: "-stg",
    Environment.PRODUCTION: "-prod",
}

_ALIASES = {
    "dev": Environment.DEVELOPMENT,
    "development": Environment.DEVELOPMENT,
    "stg": Environment.STAGING,
    "staging": Environment.STAGING,
    "prod": Environment.PRODUCTION,
    "production": Environment.PRODUCTION,
}

ALL_ENVIRONMENTS = list(Environment)
