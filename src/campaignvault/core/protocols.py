"""Protocol interfaces for the collaborators the ingestion pipeline consumes.

The pipeline only talks to a cipher and a campaign store through these
Protocols; structural typing, no inheritance required.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from campaignvault.core.types import CampaignId
from campaignvault.models.campaign import Campaign, CampaignCreate


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

@runtime_checkable
class ICipher(Protocol):
    """Symmetric string cipher. ``decrypt(encrypt(x)) == x``."""

    def encrypt(self, plaintext: str) -> str: ...

    def decrypt(self, ciphertext: str) -> str: ...


# ---------------------------------------------------------------------------
# Persistence: Campaign Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ICampaignStore(Protocol):
    """Campaign persistence. Assigns ``id`` and ``created_at`` on create."""

    def create_campaign(self, campaign: CampaignCreate) -> Campaign: ...

    def get_campaign(self, campaign_id: CampaignId) -> Campaign | None: ...

    def get_campaigns(self) -> list[Campaign]: ...
