"""Resource naming policies.

Each provider has its own length and character-set rules. A NamingPolicy derives a
per-environment name from the project name and validates it before any vendor call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional

from ..errors import ValidationError
from ..models.environment import Environment

LONGEST_ENV_SUFFIX = max(len(env.suffix) for env in Environment)


def slugify(value: str) -> str:
    """Lower-case a name and collapse runs of non-alphanumerics into single dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return slug.strip("-")


@dataclass(frozen=True)
class NamingPolicy:
    """Naming rules for one provider.

    Attributes:
        provider: Provider the rules apply to
        min_length: Minimum name length
        max_length: Maximum name length
        pattern: Regular expression a full name must match
        suffix: Fixed suffix appended after the environment suffix (e.g. "-blob")
        per_environment: Whether names carry an environment suffix
    """

    provider: str
    min_length: int
    max_length: int
    pattern: str
    suffix: str = ""
    per_environment: bool = True

    def base_name(self, project_name: str) -> str:
        """Derive the base name from the project name, leaving room for suffixes."""
        slug = slugify(project_name)
        if not slug or not slug[0].isalpha():
            slug = f"app-{slug}" if slug else "app"

        room = self.max_length - len(self.suffix)
        if self.per_environment:
            room -= LONGEST_ENV_SUFFIX
        return slug[:room].rstrip("-")

    def name_for(self, project_name: str, environment: Optional[Environment] = None) -> str:
        """Build and validate a resource name.

        Raises:
            ValidationError: If the resulting name violates the provider rules
        """
        name = self.base_name(project_name)
        if self.per_environment:
            if environment is None:
                raise ValidationError(f"{self.provider} resource names need an environment")
            name += environment.suffix
        name += self.suffix
        self.validate(name)
        return name

    def validate(self, name: str) -> bool:
        """Check a name against the provider rules.

        Raises:
            ValidationError: If the name is too short, too long or uses invalid characters
        """
        if not self.min_length <= len(name) <= self.max_length:
            raise ValidationError(
                f"Invalid {self.provider} name '{name}': length must be "
                f"{self.min_length}-{self.max_length} characters (got {len(name)})"
            )
        if not re.match(self.pattern, name):
            raise ValidationError(f"Invalid {self.provider} name '{name}': must match {self.pattern}")
        return True


NAMING_POLICIES: Dict[str, NamingPolicy] = {
    "turso": NamingPolicy("turso", 3, 32, r"^[a-z][a-z0-9-]*$"),
    "supabase": NamingPolicy("supabase", 1, 63, r"^[a-z][a-z0-9-]*$"),
    "vercel-blob": NamingPolicy("vercel-blob", 3, 32, r"^[a-z][a-z0-9-]*$", suffix="-blob", per_environment=False),
    "aws-s3": NamingPolicy("aws-s3", 3, 63, r"^[a-z0-9][a-z0-9.-]*[a-z0-9]$", suffix="-s3", per_environment=False),
    "cloudflare-r2": NamingPolicy(
        "cloudflare-r2", 3, 63, r"^[a-z0-9][a-z0-9-]*[a-z0-9]$", suffix="-r2", per_environment=False
    ),
    "vercel": NamingPolicy("vercel", 1, 100, r"^[a-z0-9][a-z0-9._-]*$", per_environment=False),
}


def get_naming_policy(provider: str) -> NamingPolicy:
    """Look up the naming policy for a provider.

    Raises:
        ValidationError: If the provider has no policy
    """
    try:
        return NAMING_POLICIES[provider]
    except KeyError:
        raise ValidationError(f"No naming policy for provider: {provider}") from None
