"""Pluggable campaign stores behind the ICampaignStore Protocol."""

from __future__ import annotations

from campaignvault.core.config import AppSettings
from campaignvault.core.protocols import ICampaignStore
from campaignvault.persistence.dynamodb_backend import DynamoDBCampaignStore
from campaignvault.persistence.memory_backend import MemoryCampaignStore
from campaignvault.persistence.redis_backend import RedisCampaignStore


def create_persistence(settings: AppSettings | None = None) -> ICampaignStore:
    """Create the campaign store selected by ``settings.storage_backend``."""
    if settings is None:
        settings = AppSettings()

    if settings.storage_backend == "dynamodb":
        return DynamoDBCampaignStore(
            table_suffix=settings.dynamodb.table_suffix,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
        )

    if settings.storage_backend == "redis":
        return RedisCampaignStore(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            key_prefix=settings.redis.key_prefix,
        )

    return MemoryCampaignStore()
