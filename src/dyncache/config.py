"""
Configuration management using pydantic-settings.

Loads configuration from DYNCACHE_* environment variables and .env files.
Validates the table schema and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dyncache.types import RESERVED_CHARACTERS


class Settings(BaseSettings):
    """Cache settings loaded from environment variables.

    Required:
        DYNCACHE_TABLE_NAME: DynamoDB table holding the cache records

    Optional:
        DYNCACHE_PRIMARY_FIELD: Partition key attribute name
        DYNCACHE_VALUE_FIELD: Encoded value attribute name
        DYNCACHE_TTL_FIELD: TTL attribute name (Unix seconds)
        DYNCACHE_KEY_PREFIX: Prefix prepended to every cache key
        DYNCACHE_CODEC: Value codec (pickle or json)
        DYNCACHE_AWS_REGION: AWS region for the boto3 client
        DYNCACHE_ENDPOINT_URL: Custom endpoint (DynamoDB Local, LocalStack)
        DYNCACHE_CONNECT_TIMEOUT_S / DYNCACHE_READ_TIMEOUT_S: Client timeouts
        DYNCACHE_MAX_ATTEMPTS: botocore retry attempts
        DYNCACHE_BATCH_GET_SIZE / DYNCACHE_BATCH_WRITE_SIZE: Batch chunk sizes
        DYNCACHE_LOG_LEVEL: Logging level
        DYNCACHE_LOG_FILE: Optional JSON Lines log file
    """

    model_config = SettingsConfigDict(
        env_prefix="DYNCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    TABLE_NAME: str = Field(..., min_length=1, description="DynamoDB table name")

    # Table schema
    PRIMARY_FIELD: str = Field(default="id", min_length=1, description="Partition key attribute")
    VALUE_FIELD: str = Field(default="value", min_length=1, description="Value attribute")
    TTL_FIELD: str = Field(default="ttl", min_length=1, description="TTL attribute")

    KEY_PREFIX: str | None = Field(default=None, description="Prefix for every cache key")
    CODEC: Literal["pickle", "json"] = Field(default="pickle", description="Value codec")

    # boto3 client
    AWS_REGION: str | None = Field(default=None, description="AWS region")
    ENDPOINT_URL: str | None = Field(default=None, description="Custom DynamoDB endpoint")
    CONNECT_TIMEOUT_S: float = Field(default=5.0, gt=0.0, description="Connect timeout")
    READ_TIMEOUT_S: float = Field(default=10.0, gt=0.0, description="Read timeout")
    MAX_ATTEMPTS: int = Field(default=3, ge=1, le=10, description="botocore retry attempts")

    # DynamoDB hard limits are 100 keys per BatchGetItem and 25 per BatchWriteItem
    BATCH_GET_SIZE: int = Field(default=100, ge=1, le=100, description="Keys per BatchGetItem")
    BATCH_WRITE_SIZE: int = Field(default=25, ge=1, le=25, description="Keys per BatchWriteItem")

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON Lines log file")

    @field_validator("KEY_PREFIX")
    @classmethod
    def validate_key_prefix(cls, v: str | None) -> str | None:
        """Reject prefixes that would make every key invalid."""
        if v is None or v == "":
            return None
        if any(ch in RESERVED_CHARACTERS for ch in v):
            raise ValueError(
                f"KEY_PREFIX cannot contain any of the reserved characters: '{RESERVED_CHARACTERS}'"
            )
        return v

    @model_validator(mode="after")
    def validate_distinct_fields(self) -> Settings:
        """Ensure the three table attributes do not collide."""
        fields = [self.PRIMARY_FIELD, self.VALUE_FIELD, self.TTL_FIELD]
        if len(set(fields)) != len(fields):
            raise ValueError(
                "PRIMARY_FIELD, VALUE_FIELD and TTL_FIELD must be distinct attribute names"
            )
        return self

    @property
    def table_name(self) -> str:
        """Get table name (lowercase alias)."""
        return self.TABLE_NAME

    @property
    def key_prefix(self) -> str | None:
        """Get key prefix (lowercase alias)."""
        return self.KEY_PREFIX


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
