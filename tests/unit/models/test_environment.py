"""Tests for the Environment enum."""

from __future__ import annotations

import pytest

from provisionkit.models.environment import Environment


class TestEnvironment:
    """Test suite for Environment."""

    def test_canonical_values(self) -> None:
        assert [env.value for env in Environment] == ["development", "staging", "production"]

    def test_short_names_and_suffixes(self) -> None:
        assert Environment.DEVELOPMENT.short_name == "dev"
        assert Environment.STAGING.short_name == "staging"
        assert Environment.PRODUCTION.short_name == "prod"
        assert Environment.DEVELOPMENT.suffix == "-dev"
        assert Environment.STAGING.suffix == "-stg"
        assert Environment.PRODUCTION.suffix == "-prod"

    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("dev", Environment.DEVELOPMENT),
            ("Development", Environment.DEVELOPMENT),
            ("stg", Environment.STAGING),
            (" staging ", Environment.STAGING),
            ("prod", Environment.PRODUCTION),
            ("PRODUCTION", Environment.PRODUCTION),
        ],
    )
    def test_parse_accepts_aliases(self, alias: str, expected: Environment) -> None:
        assert Environment.parse(alias) == expected

    def test_parse_passes_through_members(self) -> None:
        assert Environment.parse(Environment.STAGING) is Environment.STAGING

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown environment"):
            Environment.parse("qa")

    def test_parse_many_deduplicates_in_canonical_order(self) -> None:
        """Test that duplicates collapse and order follows dev, staging, prod."""
        parsed = Environment.parse_many(["prod", "dev", "production"])

        assert parsed == [Environment.DEVELOPMENT, Environment.PRODUCTION]
