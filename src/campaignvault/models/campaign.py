"""Campaign, canonical field and encrypted payload models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class CanonicalField(StrEnum):
    FIRST_NAME = "First Name"
    LAST_NAME = "Last Name"
    TITLE = "Title"
    COMPANY = "Company"
    EMAIL = "Email"
    MOBILE_PHONE = "Mobile Phone"
    OTHER_PHONE = "Other Phone"
    CORPORATE_PHONE = "Corporate Phone"
    PERSON_LINKEDIN_URL = "Person Linkedin Url"
    COMPANY_LINKEDIN_URL = "Company Linkedin Url"
    WEBSITE = "Website"
    STATE = "State"
    COUNTRY = "Country"


TIME_ZONE_FIELD = "Time Zone"  # derived, never user-mapped

CANONICAL_FIELDS: tuple[str, ...] = tuple(f.value for f in CanonicalField)

REQUIRED_FIELDS: tuple[str, ...] = (
    CanonicalField.FIRST_NAME.value,
    CanonicalField.LAST_NAME.value,
    CanonicalField.EMAIL.value,
)

ROW_KEYS: frozenset[str] = frozenset(CANONICAL_FIELDS) | {TIME_ZONE_FIELD}


class CampaignData(BaseModel):
    """Decrypted campaign payload: normalized rows keyed by canonical field."""

    model_config = {"populate_by_name": True}

    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, str]] = Field(default_factory=list)
    field_mappings: dict[str, str] = Field(default_factory=dict, alias="fieldMappings")

    @model_validator(mode="after")
    def _check_closed_key_set(self) -> CampaignData:
        unknown = set(self.headers) - ROW_KEYS
        for row in self.rows:
            unknown |= set(row) - ROW_KEYS
        unknown |= set(self.field_mappings) - ROW_KEYS
        if unknown:
            raise ValueError(f"unknown campaign fields: {sorted(unknown)}")
        if len(self.headers) != len(self.field_mappings):
            raise ValueError("headers and fieldMappings disagree in length")
        return self

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class CampaignCreate(BaseModel):
    """Caller-supplied fields for a new campaign; the store assigns the rest."""

    name: str
    encrypted_data: str
    field_mappings: dict[str, str] = Field(default_factory=dict)
    record_count: int = 0


class Campaign(CampaignCreate):
    """Persisted campaign. Never mutated after creation."""

    id: int
    created_at: datetime


class CampaignSummary(BaseModel):
    """Write-path and listing projection: no ciphertext, no rows."""

    id: int
    name: str
    record_count: int
    field_mappings: dict[str, str] = Field(default_factory=dict)
    created_at: datetime | None = None

    @classmethod
    def from_campaign(cls, campaign: Campaign) -> CampaignSummary:
        return cls(
            id=campaign.id,
            name=campaign.name,
            record_count=campaign.record_count,
            field_mappings=dict(campaign.field_mappings),
            created_at=campaign.created_at,
        )


class CampaignDetail(BaseModel):
    """Decrypted read-path view of one campaign."""

    id: int
    name: str
    data: CampaignData
    created_at: datetime
