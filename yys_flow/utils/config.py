"""Application configuration.

Deployment-specific values (base path, asset policy, rules file) are read from
.env and environment variables so the same build can be served under any
sub-path.
"""
from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    base_url: str = Field(
        default="/",
        validation_alias=AliasChoices("BASE_URL", "NUXT_APP_BASE_URL"),
    )
    asset_policy: Literal["degrade", "strict"] = "degrade"
    preview_padding: float = 80.0
    rules_config_path: str = ""  # Empty means the built-in rule set
    log_level: str = "INFO"


settings = Settings()
