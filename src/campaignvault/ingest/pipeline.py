"""CampaignPipeline: CSV upload to encrypted, persisted campaign and back.

Write path: parse -> resolve mapping -> normalize rows -> derive timezone ->
serialize -> encrypt -> persist. Either every step succeeds and exactly one
campaign is created, or nothing is written and the caller gets an error.

Read path: fetch -> decrypt -> parse. Undecryptable or unparsable payloads
surface as CorruptedCampaignError; nothing is retried.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from campaignvault.core.config import AppSettings
from campaignvault.core.exceptions import (
    CampaignNotFoundError,
    CorruptedCampaignError,
    DecryptionError,
    EmptyFileError,
    InvalidFieldMappingError,
    MissingRequiredFieldError,
    UploadTooLargeError,
)
from campaignvault.core.logging_config import get_logger
from campaignvault.core.protocols import ICampaignStore, ICipher
from campaignvault.core.types import FieldMapping, NormalizedRow, RawRow
from campaignvault.ingest.auto_mapper import auto_map, missing_required
from campaignvault.ingest.csv_parser import ParsedCsv, parse_csv, parse_line, split_lines
from campaignvault.ingest.timezone import derive_timezone
from campaignvault.models.campaign import (
    CANONICAL_FIELDS,
    TIME_ZONE_FIELD,
    Campaign,
    CampaignCreate,
    CampaignData,
    CampaignDetail,
    CampaignSummary,
    CanonicalField,
)
from campaignvault.models.mapping import MappingPreview

_LOGGER = get_logger(__name__)

_CSV_SUFFIX = re.compile(r"\.csv$")

PREVIEW_SAMPLE_ROWS = 5


def campaign_name(original_filename: str) -> str:
    """Campaign name is the uploaded filename without a trailing ``.csv``."""
    return _CSV_SUFFIX.sub("", original_filename)


def validate_mapping(field_mapping: FieldMapping) -> None:
    """Reject unknown keys, then missing required fields."""
    unknown = [k for k in field_mapping if k not in CANONICAL_FIELDS]
    if unknown:
        raise InvalidFieldMappingError(unknown)
    missing = missing_required(field_mapping)
    if missing:
        raise MissingRequiredFieldError(missing)


def normalize_row(raw_row: RawRow, field_mapping: FieldMapping) -> NormalizedRow:
    """Resolve each mapped canonical field against one raw row and append Time Zone."""
    row: NormalizedRow = {
        canonical_field: raw_row.get(raw_header, "")
        for canonical_field, raw_header in field_mapping.items()
    }
    row[TIME_ZONE_FIELD] = derive_timezone(
        row.get(CanonicalField.STATE.value, ""),
        row.get(CanonicalField.COUNTRY.value, ""),
    )
    return row


def build_campaign_data(parsed: ParsedCsv, field_mapping: FieldMapping) -> CampaignData:
    """Build the payload from a parsed file; headers follow canonical order."""
    rows = [normalize_row(raw_row, field_mapping) for raw_row in parsed.rows]
    mapped = [f for f in CANONICAL_FIELDS if f in field_mapping]
    return CampaignData(
        headers=[*mapped, TIME_ZONE_FIELD],
        rows=rows,
        field_mappings={**{f: field_mapping[f] for f in mapped}, TIME_ZONE_FIELD: TIME_ZONE_FIELD},
    )


class CampaignPipeline:
    """Ingests CSV uploads into encrypted campaigns and reads them back.

    The cipher and store are injected; settings default to ``AppSettings()``.
    """

    def __init__(
        self,
        *,
        cipher: ICipher,
        store: ICampaignStore,
        settings: AppSettings | None = None,
    ) -> None:
        self._cipher = cipher
        self._store = store
        self._settings = settings or AppSettings()

    # ---- write path ----

    def _check_size(self, raw_csv_text: str) -> None:
        size = len(raw_csv_text.encode("utf-8"))
        limit = self._settings.max_upload_bytes
        if size > limit:
            raise UploadTooLargeError(size, limit)

    def _prepare(
        self,
        raw_csv_text: str,
        field_mapping: FieldMapping,
        original_filename: str,
    ) -> CampaignCreate:
        """Validate, normalize and encrypt one upload. Writes nothing."""
        log = _LOGGER.bind(filename=original_filename)
        try:
            validate_mapping(field_mapping)
            self._check_size(raw_csv_text)
            parsed = parse_csv(raw_csv_text)
            if not parsed.headers:
                raise EmptyFileError(original_filename)
        except (InvalidFieldMappingError, MissingRequiredFieldError,
                UploadTooLargeError, EmptyFileError) as exc:
            log.warning("campaign_ingest_rejected", error=type(exc).__name__, detail=str(exc))
            raise

        log.info("campaign_ingest_started", record_count=len(parsed.rows))
        data = build_campaign_data(parsed, field_mapping)
        return CampaignCreate(
            name=campaign_name(original_filename),
            encrypted_data=self._cipher.encrypt(data.to_json()),
            field_mappings=dict(data.field_mappings),
            record_count=len(data.rows),
        )

    def _persist(self, pending: CampaignCreate, original_filename: str) -> CampaignSummary:
        campaign = self._store.create_campaign(pending)
        _LOGGER.info(
            "campaign_persisted",
            filename=original_filename,
            campaign_id=campaign.id,
            record_count=campaign.record_count,
            mapped_fields=len(campaign.field_mappings) - 1,
        )
        return CampaignSummary.from_campaign(campaign)

    def _auto_mapping(self, raw_csv_text: str, original_filename: str) -> FieldMapping:
        lines = split_lines(raw_csv_text)
        if not lines:
            raise EmptyFileError(original_filename)
        return auto_map(CANONICAL_FIELDS, parse_line(lines[0])).mapping

    def ingest(
        self,
        raw_csv_text: str,
        field_mapping: FieldMapping,
        original_filename: str,
    ) -> CampaignSummary:
        """Normalize, encrypt and persist one CSV upload under ``field_mapping``."""
        pending = self._prepare(raw_csv_text, field_mapping, original_filename)
        return self._persist(pending, original_filename)

    def auto_ingest(self, raw_csv_text: str, original_filename: str) -> CampaignSummary:
        """Ingest using the auto-detected mapping, without human review."""
        mapping = self._auto_mapping(raw_csv_text, original_filename)
        return self.ingest(raw_csv_text, mapping, original_filename)

    def ingest_batch(
        self,
        uploads: Sequence[tuple[str, str]],
        field_mapping: FieldMapping | None = None,
    ) -> list[CampaignSummary]:
        """Ingest several ``(raw_csv_text, filename)`` uploads in one go.

        Blank files are skipped. Every remaining file is validated and
        encrypted before the first one is stored, so a rejected file leaves
        the store untouched. Without ``field_mapping`` each file is
        auto-mapped on its own headers. Raises EmptyFileError when every
        file is blank.
        """
        prepared: list[tuple[CampaignCreate, str]] = []
        for raw_csv_text, filename in uploads:
            if not split_lines(raw_csv_text):
                _LOGGER.info("campaign_ingest_skipped", filename=filename, reason="empty")
                continue
            mapping = field_mapping
            if mapping is None:
                mapping = self._auto_mapping(raw_csv_text, filename)
            prepared.append((self._prepare(raw_csv_text, mapping, filename), filename))
        if not prepared:
            raise EmptyFileError(uploads[0][1] if uploads else "")
        return [self._persist(pending, filename) for pending, filename in prepared]

    def preview(self, raw_csv_text: str, original_filename: str = "") -> MappingPreview:
        """Auto-map the headers of an upload without persisting anything."""
        self._check_size(raw_csv_text)
        parsed = parse_csv(raw_csv_text)
        if not parsed.headers:
            raise EmptyFileError(original_filename)
        result = auto_map(CANONICAL_FIELDS, parsed.headers)
        return MappingPreview(
            filename=original_filename,
            raw_headers=parsed.headers,
            mapping=result.mapping,
            detected_count=result.detected_count,
            skipped_count=len(CANONICAL_FIELDS) - result.detected_count,
            missing_required=missing_required(result.mapping),
            sample_rows=parsed.rows[:PREVIEW_SAMPLE_ROWS],
            record_count=len(parsed.rows),
        )

    # ---- read path ----

    def _fetch(self, campaign_id: int) -> Campaign:
        campaign = self._store.get_campaign(campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        return campaign

    def _decrypt(self, campaign: Campaign) -> CampaignData:
        try:
            plaintext = self._cipher.decrypt(campaign.encrypted_data)
            return CampaignData.model_validate_json(plaintext)
        except (DecryptionError, ValidationError, ValueError) as exc:
            _LOGGER.error(
                "campaign_decrypt_failed",
                campaign_id=campaign.id,
                error=type(exc).__name__,
            )
            raise CorruptedCampaignError(campaign.id, type(exc).__name__) from exc

    def get_campaign_data(self, campaign_id: int) -> CampaignData:
        """Decrypt and parse one campaign's payload."""
        return self._decrypt(self._fetch(campaign_id))

    def get_campaign(self, campaign_id: int) -> CampaignDetail:
        campaign = self._fetch(campaign_id)
        return CampaignDetail(
            id=campaign.id,
            name=campaign.name,
            data=self._decrypt(campaign),
            created_at=campaign.created_at,
        )

    def list_campaigns(self) -> list[CampaignSummary]:
        return [CampaignSummary.from_campaign(c) for c in self._store.get_campaigns()]

    def health(self) -> dict[str, Any]:
        return {
            "pipeline": self.__class__.__name__,
            "status": "healthy",
            "environment": self._settings.environment,
            "storage_backend": self._settings.storage_backend,
        }
