"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class EncryptionConfig(BaseSettings):
    """Campaign payload encryption configuration."""

    model_config = {"env_prefix": "CAMPAIGNVAULT_ENCRYPTION_"}

    key: str = ""  # urlsafe base64 Fernet key; derived from `secret` when blank
    secret: str = "campaignvault-dev-secret"


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "CAMPAIGNVAULT_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis campaign store configuration."""

    model_config = {"env_prefix": "CAMPAIGNVAULT_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key_prefix: str = "campaignvault"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "CAMPAIGNVAULT_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    max_upload_bytes: int = 10 * 1024 * 1024
    storage_backend: Literal["memory", "dynamodb", "redis"] = "memory"

    encryption: EncryptionConfig = EncryptionConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
