"""Tests for environment-driven settings."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from momoetl.config import Settings

MOMO_VARS = [
    "MOMO_DB_PATH",
    "MOMO_DEFAULT_CURRENCY",
    "MOMO_COUNTRY_CODE",
    "MOMO_TIMEZONE",
    "MOMO_FEE_PERCENT",
    "MOMO_WORKERS",
    "MOMO_BATCH_TIMEOUT",
    "MOMO_DEAD_LETTER_DIR",
    "MOMO_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in MOMO_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()

    assert settings == Settings()
    assert settings.default_currency == "USD"
    assert settings.fee_percent == Decimal("1.0")
    assert settings.workers == 1
    assert settings.batch_timeout is None


def test_from_env(clean_env):
    """Test that every MOMO_* variable is picked up."""
    clean_env.setenv("MOMO_DB_PATH", "/tmp/momo.db")
    clean_env.setenv("MOMO_DEFAULT_CURRENCY", "rwf")
    clean_env.setenv("MOMO_COUNTRY_CODE", "250")
    clean_env.setenv("MOMO_TIMEZONE", "Africa/Kigali")
    clean_env.setenv("MOMO_FEE_PERCENT", "1.5")
    clean_env.setenv("MOMO_WORKERS", "4")
    clean_env.setenv("MOMO_BATCH_TIMEOUT", "30")
    clean_env.setenv("MOMO_LOG_LEVEL", "DEBUG")

    settings = Settings.from_env()

    assert settings.db_path == "/tmp/momo.db"
    assert settings.default_currency == "RWF"
    assert settings.country_code == "250"
    assert settings.timezone == "Africa/Kigali"
    assert settings.fee_percent == Decimal("1.5")
    assert settings.workers == 4
    assert settings.batch_timeout == 30.0
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name,value",
    [("MOMO_WORKERS", "many"), ("MOMO_BATCH_TIMEOUT", "soon"), ("MOMO_FEE_PERCENT", "1%")],
)
def test_invalid_numbers(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        Settings.from_env()


def test_with_overrides_skips_none():
    settings = Settings(workers=2).with_overrides(workers=None, batch_timeout=5.0)

    assert settings.workers == 2
    assert settings.batch_timeout == 5.0


def test_empty_variable_uses_default(clean_env):
    clean_env.setenv("MOMO_WORKERS", "")
    assert Settings.from_env().workers == 1


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(PydanticValidationError):
        settings.workers = 3
