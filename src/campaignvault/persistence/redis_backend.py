"""Redis backend implementing ICampaignStore."""

from __future__ import annotations

from datetime import datetime, timezone

import redis

from campaignvault.core.exceptions import StorageError
from campaignvault.models.campaign import Campaign, CampaignCreate


class RedisCampaignStore:
    """ICampaignStore backed by Redis: one JSON value per campaign plus an id index."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "campaignvault") -> None:
        self._host = host
        self._port = port
        self._db = db
        self._prefix = key_prefix
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def _key(self, campaign_id: int) -> str:
        return f"{self._prefix}:campaign:{campaign_id}"

    @property
    def _counter_key(self) -> str:
        return f"{self._prefix}:campaign:next_id"

    @property
    def _index_key(self) -> str:
        return f"{self._prefix}:campaigns"

    def create_campaign(self, campaign: CampaignCreate) -> Campaign:
        try:
            campaign_id = int(self._client.incr(self._counter_key))
            stored = Campaign(
                id=campaign_id,
                created_at=datetime.now(timezone.utc),
                **campaign.model_dump(),
            )
            pipe = self._client.pipeline()
            pipe.set(self._key(campaign_id), stored.model_dump_json())
            pipe.zadd(self._index_key, {str(campaign_id): campaign_id})
            pipe.execute()
            return stored
        except Exception as exc:
            raise StorageError(f"Redis create_campaign failed: {exc}") from exc

    def get_campaign(self, campaign_id: int) -> Campaign | None:
        try:
            raw = self._client.get(self._key(campaign_id))
        except Exception as exc:
            raise StorageError(f"Redis GET failed for campaign {campaign_id}: {exc}") from exc
        return Campaign.model_validate_json(raw) if raw is not None else None

    def get_campaigns(self) -> list[Campaign]:
        try:
            ids = self._client.zrange(self._index_key, 0, -1)
            if not ids:
                return []
            values = self._client.mget([self._key(int(i)) for i in ids])
        except Exception as exc:
            raise StorageError(f"Redis campaign listing failed: {exc}") from exc
        return [Campaign.model_validate_json(v) for v in values if v is not None]
