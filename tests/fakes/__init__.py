"""Shared test doubles: memory store plus failure-injecting collaborators."""

from __future__ import annotations

from campaignvault.core.exceptions import StorageError
from campaignvault.models.campaign import Campaign, CampaignCreate
from campaignvault.persistence.memory_backend import MemoryCampaignStore


class FailingCampaignStore(MemoryCampaignStore):
    """Store whose writes always fail."""

    def create_campaign(self, campaign: CampaignCreate) -> Campaign:
        self.create_calls += 1
        raise StorageError("database unavailable")


class CountingCipher:
    """Wraps a real cipher and counts encrypt calls."""

    def __init__(self, inner) -> None:
        self._inner = inner
        self.encrypt_calls = 0

    def encrypt(self, plaintext: str) -> str:
        self.encrypt_calls += 1
        return self._inner.encrypt(plaintext)

    def decrypt(self, ciphertext: str) -> str:
        return self._inner.decrypt(ciphertext)


__all__ = ["CountingCipher", "FailingCampaignStore", "MemoryCampaignStore"]
