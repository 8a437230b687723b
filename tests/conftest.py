"""Shared fixtures: a real Fernet cipher and an in-memory campaign store."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from campaignvault.core.config import AppSettings
from campaignvault.crypto.fernet_cipher import FernetCipher
from campaignvault.ingest.pipeline import CampaignPipeline
from campaignvault.persistence.memory_backend import MemoryCampaignStore


@pytest.fixture
def cipher():
    return FernetCipher(Fernet.generate_key())


@pytest.fixture
def store():
    return MemoryCampaignStore()


@pytest.fixture
def settings():
    return AppSettings()


@pytest.fixture
def pipeline(cipher, store, settings):
    return CampaignPipeline(cipher=cipher, store=store, settings=settings)
