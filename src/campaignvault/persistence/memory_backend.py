"""In-memory campaign store: dict-backed, for unit tests and local runs."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from campaignvault.models.campaign import Campaign, CampaignCreate


class MemoryCampaignStore:
    """Dict-backed ICampaignStore."""

    def __init__(self) -> None:
        self._campaigns: dict[int, Campaign] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.create_calls = 0

    def create_campaign(self, campaign: CampaignCreate) -> Campaign:
        with self._lock:
            self.create_calls += 1
            stored = Campaign(
                id=self._next_id,
                created_at=datetime.now(timezone.utc),
                **campaign.model_dump(),
            )
            self._campaigns[stored.id] = stored
            self._next_id += 1
        return stored.model_copy(deep=True)

    def get_campaign(self, campaign_id: int) -> Campaign | None:
        with self._lock:
            campaign = self._campaigns.get(campaign_id)
            return campaign.model_copy(deep=True) if campaign else None

    def get_campaigns(self) -> list[Campaign]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._campaigns.values()]

    def put_raw(self, campaign: Campaign) -> None:
        """Store a campaign as-is, bypassing id assignment (tests use this to plant bad payloads)."""
        with self._lock:
            self._campaigns[campaign.id] = campaign
            self._next_id = max(self._next_id, campaign.id + 1)
