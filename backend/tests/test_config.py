"""
Prayer Wall Backend — Settings Tests
======================================

What we test:
    ✅ DATABASE_URL rewriting for the asyncpg driver
    ✅ Validation of policy, timezone and log level
    ✅ CORS origin splitting
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from prayerwall.config import Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestDatabaseUrl:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("postgres://u:p@db:5432/wall", "postgresql+asyncpg://u:p@db:5432/wall"),
            ("postgresql://u:p@db/wall", "postgresql+asyncpg://u:p@db/wall"),
            ("postgresql+asyncpg://u:p@db/wall", "postgresql+asyncpg://u:p@db/wall"),
            ("sqlite+aiosqlite:///wall.db", "sqlite+aiosqlite:///wall.db"),
            ("", ""),
        ],
    )
    def test_async_database_url(self, raw, expected):
        assert make_settings(database_url=raw).async_database_url == expected


class TestValidation:

    def test_policy_is_normalized(self):
        assert make_settings(timestamp_policy="RELATIVE").timestamp_policy == "relative"

    def test_unknown_policy_rejected(self):
        with pytest.raises(PydanticValidationError):
            make_settings(timestamp_policy="fuzzy")

    def test_known_timezone_accepted(self):
        assert make_settings(display_timezone="Africa/Cairo").display_timezone == "Africa/Cairo"

    def test_unknown_timezone_rejected(self):
        with pytest.raises(PydanticValidationError):
            make_settings(display_timezone="Nowhere/Special")

    def test_log_level_is_upper_cased(self):
        assert make_settings(log_level="debug").log_level == "DEBUG"

    def test_bad_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            make_settings(log_level="chatty")

    def test_list_limit_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            make_settings(list_limit=0)


def test_cors_origins_list():
    settings = make_settings(cors_origins="https://a.example, https://b.example")
    assert settings.cors_origins_list == ["https://a.example", "https://b.example"]
