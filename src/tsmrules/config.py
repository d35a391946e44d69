"""
Process settings for tsmrules.

Uses Pydantic BaseSettings for environment variable integration.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (TSMRULES_*)
3. .env file
4. Default values

Example:
    from tsmrules.config import get_settings

    settings = get_settings()
    print(settings.log_level)  # From TSMRULES_LOG_LEVEL or default
"""

from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TsmRulesSettings(BaseSettings):
    """
    Settings for the tsmrules command line.

    Example:
        export TSMRULES_LOG_LEVEL=debug
        export TSMRULES_RULES_FILE=/etc/tsmrules/rules.yaml
    """

    model_config = SettingsConfigDict(
        env_prefix="TSMRULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format",
    )
    rules_file: Optional[str] = Field(
        default=None,
        description="Rules file used when none is given on the command line",
    )

    @field_validator("rules_file")
    @classmethod
    def expand_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ and environment variables in paths."""
        if v is None:
            return v
        return os.path.expanduser(os.path.expandvars(v))


_settings: Optional[TsmRulesSettings] = None


def get_settings(**overrides) -> TsmRulesSettings:
    """
    Get the global settings instance.

    Creates a singleton on first call.  Passing overrides rebuilds it.
    """
    global _settings

    if overrides or _settings is None:
        _settings = TsmRulesSettings(**overrides)

    return _settings


def reset_settings() -> None:
    """Reset the global settings (for testing)."""
    global _settings
    _settings = None
