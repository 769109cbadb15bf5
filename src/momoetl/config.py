"""Runtime settings read from the environment."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "MOMO_"
DEFAULT_HOME = Path.home() / ".momoetl"


class Settings(BaseSettings):
    """Pipeline settings.

    Every field can be set through a MOMO_* environment variable (for
    example MOMO_WORKERS=4); CLI options override the environment through
    ``with_overrides``.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        env_ignore_empty=True,
        frozen=True,
    )

    db_path: Optional[str] = None
    default_currency: str = "USD"
    country_code: str = "256"
    timezone: str = "UTC"
    fee_percent: Decimal = Decimal("1.0")
    workers: int = 1
    batch_timeout: Optional[float] = None
    dead_letter_dir: str = str(DEFAULT_HOME / "dead_letter")
    log_level: str = "WARNING"

    @field_validator("default_currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from MOMO_* environment variables.

        Raises:
            ValueError: Naming the variable whose value cannot be parsed
        """
        try:
            return cls()
        except ValidationError as e:
            problems = "; ".join(
                f"{ENV_PREFIX}{str(error['loc'][0]).upper()} {error['msg'].lower()}"
                for error in e.errors()
            )
            raise ValueError(f"Invalid settings: {problems}") from None

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return self.model_copy(update=changes)
