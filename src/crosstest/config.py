"""Runner configuration."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crosstest.cartesian.naming import DEFAULT_NAME_PATTERN


class CrosstestSettings(BaseSettings):
    """Settings for running Cartesian tests.

    Loads from environment variables automatically:
        CROSSTEST_NAME_PATTERN, CROSSTEST_CONCURRENCY, CROSSTEST_MAXFAIL,
        CROSSTEST_TIMEOUT, CROSSTEST_VERBOSITY, CROSSTEST_LOG_LEVEL

    Command-line flags take precedence over the environment.
    """

    name_pattern: str = Field(
        default=DEFAULT_NAME_PATTERN,
        description="Display name pattern for tests that do not declare one",
    )
    concurrency: int = Field(default=1, ge=0, description="Test methods run at once (0 = runner maximum)")
    maxfail: int | None = Field(default=None, ge=1, description="Stop after this many failing test methods")
    timeout: float | None = Field(default=None, gt=0, description="Per test method timeout in seconds")
    verbosity: int = Field(default=0, ge=-1, le=2)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="CROSSTEST_",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


def get_settings(**overrides: object) -> CrosstestSettings:
    """Build settings from the environment, applying non-None overrides."""
    values = {key: value for key, value in overrides.items() if value is not None}
    return CrosstestSettings(**values)
