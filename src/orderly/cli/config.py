"""CLI configuration using Pydantic settings.

Configuration is loaded from:
1. Environment variables (ORDERLY_* prefix)
2. .env file in current directory
3. Default values
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from orderly.compare import SortFlag


class OrderlyConfig(BaseSettings):
    """Configuration for the orderly CLI.

    Environment variables are prefixed with ORDERLY_.
    """

    model_config = SettingsConfigDict(
        env_prefix="ORDERLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Output
    json_indent: int = 2

    # Collection defaults
    page_size: int = 20
    sort_flag: SortFlag = SortFlag.REGULAR
    strict: bool = False

    # Logging
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            msg = f"Invalid log level: {v}. Must be one of {valid_levels}"
            raise ValueError(msg)
        return upper

    @field_validator("json_indent")
    @classmethod
    def validate_json_indent(cls, v: int) -> int:
        if v < 0:
            msg = f"json_indent must be >= 0, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("sort_flag", mode="before")
    @classmethod
    def validate_sort_flag(cls, v: object) -> object:
        """Accept flag names in any case."""
        return v.lower() if isinstance(v, str) else v


@lru_cache
def get_config() -> OrderlyConfig:
    """Get the global configuration.

    Configuration is cached after first load.

    Returns:
        OrderlyConfig instance.
    """
    return OrderlyConfig()


def clear_config_cache() -> None:
    """Clear the configuration cache (for testing)."""
    get_config.cache_clear()
