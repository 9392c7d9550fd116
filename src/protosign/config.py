"""
Centralized configuration for protosign.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (PROTOSIGN_*)
3. .env file
4. Default values

Example:
    from protosign.config import get_config

    config = get_config()
    print(config.log_level)  # From PROTOSIGN_LOG_LEVEL or default
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProtoSignConfig(BaseSettings):
    """
    Runtime settings for protosign.

    Example:
        export PROTOSIGN_LOG_LEVEL=debug
        export PROTOSIGN_INCLUDE_PATHS='["protos", "third_party"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="PROTOSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging level",
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format",
    )

    # Output
    output_format: Literal["text", "json"] = Field(
        default="text",
        description="Default rendering of breaking-change reports",
    )

    # Parsing
    allow_fallback: bool = Field(
        default=True,
        description="Use degraded text extraction when the compiler rejects a file",
    )
    include_paths: list[str] = Field(
        default_factory=list,
        description="Extra directories searched for imports",
    )

    @field_validator("include_paths")
    @classmethod
    def expand_paths(cls, v: list[str]) -> list[str]:
        """Expand ~ and environment variables in paths."""
        return [os.path.expanduser(os.path.expandvars(p)) for p in v]

    def get_include_paths(self) -> list[Path]:
        return [Path(p) for p in self.include_paths]


# Global singleton
_config: Optional[ProtoSignConfig] = None


def get_config(**overrides) -> ProtoSignConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.
    """
    global _config

    if overrides or _config is None:
        _config = ProtoSignConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
