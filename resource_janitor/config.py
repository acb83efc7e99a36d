# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Configuration management for the resource janitor.

Settings are loaded from environment variables (and an optional .env file)
with defaults suitable for a dry local run. Command-line flags override
them.
"""

from datetime import timedelta
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.duration import parse_duration


def split_patterns(value: str | None) -> list[str]:
    """Split a comma-separated tag pattern list, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults except the state path, which must be given
    here or on the command line.
    """

    # State Configuration
    state_path: Optional[str] = Field(
        default=None,
        description="s3://bucket/key of the tracker state object",
        validation_alias=AliasChoices("JANITOR_STATE_PATH", "STATE_PATH")
    )
    ttl: timedelta = Field(
        default=timedelta(hours=24),
        description="Maximum resource age, e.g. 24h or 1h30m",
        validation_alias=AliasChoices("JANITOR_TTL", "TTL")
    )

    # Policy Configuration
    include_tags: str = Field(
        default="",
        description="Comma-separated key or key=value patterns a resource must all carry",
        validation_alias="JANITOR_INCLUDE_TAGS"
    )
    exclude_tags: str = Field(
        default="",
        description="Comma-separated key or key=value patterns that protect a resource",
        validation_alias="JANITOR_EXCLUDE_TAGS"
    )
    dry_run: bool = Field(
        default=False,
        description="Report deletion candidates without deleting",
        validation_alias="JANITOR_DRY_RUN"
    )
    max_concurrent_scanners: int = Field(
        default=1,
        ge=1,
        le=16,
        description="How many scanners may run at once",
        validation_alias="JANITOR_MAX_CONCURRENT_SCANNERS"
    )

    # AWS Configuration
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region to clean",
        validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION")
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="LOG_LEVEL"
    )
    cloudwatch_enabled: bool = Field(
        default=False,
        description="Enable CloudWatch logging",
        validation_alias="CLOUDWATCH_ENABLED"
    )
    cloudwatch_log_group: str = Field(
        default="/resource-janitor",
        description="CloudWatch log group name",
        validation_alias="CLOUDWATCH_LOG_GROUP"
    )
    cloudwatch_log_stream: Optional[str] = Field(
        default=None,
        description="CloudWatch log stream name (one per run if not set)",
        validation_alias="CLOUDWATCH_LOG_STREAM"
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("ttl", mode="before")
    @classmethod
    def _parse_ttl(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @property
    def include_tag_patterns(self) -> list[str]:
        return split_patterns(self.include_tags)

    @property
    def exclude_tag_patterns(self) -> list[str]:
        return split_patterns(self.exclude_tags)


def get_settings() -> Settings:
    """
    Get application settings.

    Loads settings from environment variables and .env file.

    Returns:
        Settings instance with all configuration values
    """
    return Settings()

