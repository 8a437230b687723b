"""CampaignVault exception hierarchy."""

from __future__ import annotations


class CampaignVaultError(Exception):
    """Base exception for all CampaignVault errors."""


class IngestionError(CampaignVaultError):
    """An upload was rejected before anything was persisted."""


class EmptyFileError(IngestionError):
    """Uploaded file has no non-blank lines."""

    def __init__(self, filename: str = "") -> None:
        self.filename = filename
        super().__init__(f"Uploaded file {filename!r} contains no data" if filename
                         else "Uploaded file contains no data")


class MissingRequiredFieldError(IngestionError):
    """Field mapping omits one or more required canonical fields."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Please map these required fields: {', '.join(self.missing)}")


class InvalidFieldMappingError(IngestionError):
    """Field mapping names keys outside the canonical field set."""

    def __init__(self, unknown: list[str]) -> None:
        self.unknown = list(unknown)
        super().__init__(f"Unknown canonical fields in mapping: {', '.join(self.unknown)}")


class UploadTooLargeError(IngestionError):
    """Uploaded payload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Upload of {size} bytes exceeds limit of {limit} bytes")


class CampaignNotFoundError(CampaignVaultError):
    """No campaign with the requested id."""

    def __init__(self, campaign_id: int) -> None:
        self.campaign_id = campaign_id
        super().__init__(f"Campaign {campaign_id} not found")


class CorruptedCampaignError(CampaignVaultError):
    """Stored campaign payload could not be decrypted or parsed."""

    def __init__(self, campaign_id: int, reason: str = "") -> None:
        self.campaign_id = campaign_id
        self.reason = reason
        message = f"Campaign {campaign_id} data is corrupted"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DecryptionError(CampaignVaultError):
    """Ciphertext is invalid or was encrypted with a different key."""


class StorageError(CampaignVaultError):
    """Campaign store operation failed."""
