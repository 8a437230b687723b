"""Tests for CampaignPipeline ingest and decrypt-on-read."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from cryptography.fernet import Fernet

from campaignvault.core.config import AppSettings
from campaignvault.core.exceptions import (
    CampaignNotFoundError,
    CorruptedCampaignError,
    EmptyFileError,
    InvalidFieldMappingError,
    MissingRequiredFieldError,
    StorageError,
    UploadTooLargeError,
)
from campaignvault.crypto.fernet_cipher import FernetCipher
from campaignvault.ingest.pipeline import CampaignPipeline, campaign_name, normalize_row
from campaignvault.models.campaign import Campaign, CampaignSummary
from tests.fakes import CountingCipher, FailingCampaignStore

JANE_CSV = "Full Name,Email Address,State,Country\nJane Doe,jane@x.com,CA,USA\n"

BASE_MAPPING = {
    "First Name": "Full Name",
    "Email": "Email Address",
    "State": "State",
    "Country": "Country",
}

FULL_MAPPING = {**BASE_MAPPING, "Last Name": "Full Name"}

CONTACTS_CSV = (
    "First,Last,E-mail,Region,Nation\n"
    "Ann,Lee,ann@x.com,tx,USA\n"
    "\n"
    "   \n"
    "Bob,Ng,bob@x.com,,Germany\n"
    "Cy,Oz,cy@x.com\n"
)

CONTACTS_MAPPING = {
    "First Name": "First",
    "Last Name": "Last",
    "Email": "E-mail",
    "State": "Region",
    "Country": "Nation",
}


class TestEndToEnd:
    def test_missing_last_name_rejects_upload(self, pipeline, store):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            pipeline.ingest(JANE_CSV, BASE_MAPPING, "leads.csv")
        assert exc_info.value.missing == ["Last Name"]
        assert store.create_calls == 0
        assert store.get_campaigns() == []

    def test_corrected_mapping_succeeds(self, pipeline):
        summary = pipeline.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        data = pipeline.get_campaign_data(summary.id)
        assert data.rows == [{
            "First Name": "Jane Doe",
            "Last Name": "Jane Doe",
            "Email": "jane@x.com",
            "State": "CA",
            "Country": "USA",
            "Time Zone": "PST",
        }]
        assert data.headers == ["First Name", "Last Name", "Email", "State", "Country", "Time Zone"]
        assert data.field_mappings == {**FULL_MAPPING, "Time Zone": "Time Zone"}


class TestIngest:
    def test_returns_summary_without_row_data(self, pipeline):
        summary = pipeline.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        assert isinstance(summary, CampaignSummary)
        assert summary.name == "leads"
        assert summary.record_count == 1
        assert summary.field_mappings["Time Zone"] == "Time Zone"
        assert "jane@x.com" not in summary.model_dump_json()

    def test_payload_is_encrypted_at_rest(self, pipeline, store):
        summary = pipeline.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        stored = store.get_campaign(summary.id)
        assert "jane@x.com" not in stored.encrypted_data
        assert stored.field_mappings == {**FULL_MAPPING, "Time Zone": "Time Zone"}

    def test_record_count_skips_blank_lines(self, pipeline, store):
        summary = pipeline.ingest(CONTACTS_CSV, CONTACTS_MAPPING, "contacts.csv")
        data = pipeline.get_campaign_data(summary.id)
        assert summary.record_count == 3
        assert len(data.rows) == 3
        assert store.get_campaign(summary.id).record_count == 3

    def test_rows_keep_source_order_and_derive_timezone(self, pipeline):
        summary = pipeline.ingest(CONTACTS_CSV, CONTACTS_MAPPING, "contacts.csv")
        rows = pipeline.get_campaign_data(summary.id).rows
        assert [r["First Name"] for r in rows] == ["Ann", "Bob", "Cy"]
        assert [r["Time Zone"] for r in rows] == ["CST", "CET", "NA"]

    def test_short_row_values_default_to_empty(self, pipeline):
        summary = pipeline.ingest(CONTACTS_CSV, CONTACTS_MAPPING, "contacts.csv")
        last = pipeline.get_campaign_data(summary.id).rows[-1]
        assert last["State"] == ""
        assert last["Country"] == ""

    def test_unmapped_fields_are_absent(self, pipeline):
        mapping = {"First Name": "First", "Last Name": "Last", "Email": "E-mail"}
        summary = pipeline.ingest(CONTACTS_CSV, mapping, "contacts.csv")
        data = pipeline.get_campaign_data(summary.id)
        assert data.rows[0] == {
            "First Name": "Ann", "Last Name": "Lee", "Email": "ann@x.com", "Time Zone": "NA",
        }
        assert len(data.headers) == len(data.field_mappings) == 4

    def test_mapping_to_header_missing_from_file_gives_empty(self, pipeline):
        mapping = {**CONTACTS_MAPPING, "Title": "Job Title"}
        summary = pipeline.ingest(CONTACTS_CSV, mapping, "contacts.csv")
        assert pipeline.get_campaign_data(summary.id).rows[0]["Title"] == ""

    def test_headers_follow_canonical_order(self, pipeline):
        mapping = {"Email": "E-mail", "Country": "Nation", "Last Name": "Last", "First Name": "First"}
        summary = pipeline.ingest(CONTACTS_CSV, mapping, "contacts.csv")
        data = pipeline.get_campaign_data(summary.id)
        assert data.headers == ["First Name", "Last Name", "Email", "Country", "Time Zone"]

    def test_empty_file_rejected(self, pipeline, store):
        with pytest.raises(EmptyFileError):
            pipeline.ingest("\n   \n\n", FULL_MAPPING, "empty.csv")
        assert store.create_calls == 0

    def test_header_only_file_creates_empty_campaign(self, pipeline):
        summary = pipeline.ingest("Full Name,Email Address\n", FULL_MAPPING, "blank.csv")
        assert summary.record_count == 0
        assert pipeline.get_campaign_data(summary.id).rows == []

    def test_unknown_mapping_key_rejected(self, pipeline, store):
        with pytest.raises(InvalidFieldMappingError) as exc_info:
            pipeline.ingest(JANE_CSV, {**FULL_MAPPING, "Time Zone": "State"}, "leads.csv")
        assert exc_info.value.unknown == ["Time Zone"]
        assert store.create_calls == 0

    def test_oversized_upload_rejected_before_encryption(self, cipher, store):
        counting = CountingCipher(cipher)
        small = CampaignPipeline(
            cipher=counting, store=store, settings=AppSettings(max_upload_bytes=10),
        )
        with pytest.raises(UploadTooLargeError):
            small.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        assert counting.encrypt_calls == 0
        assert store.create_calls == 0

    def test_storage_failure_propagates(self, cipher):
        failing = CampaignPipeline(cipher=cipher, store=FailingCampaignStore())
        with pytest.raises(StorageError):
            failing.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")

    def test_each_upload_creates_new_campaign(self, pipeline):
        first = pipeline.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        second = pipeline.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        assert first.id != second.id
        assert len(pipeline.list_campaigns()) == 2


class TestAutoIngest:
    def test_auto_maps_standard_headers(self, pipeline):
        csv_text = "First Name,Last Name,Email Address,State\nAnn,Lee,ann@x.com,WA\n"
        summary = pipeline.auto_ingest(csv_text, "auto.csv")
        data = pipeline.get_campaign_data(summary.id)
        assert data.rows[0]["Email"] == "ann@x.com"
        assert data.rows[0]["Time Zone"] == "PST"

    def test_auto_map_without_required_fields_rejected(self, pipeline):
        with pytest.raises(MissingRequiredFieldError):
            pipeline.auto_ingest("Phone,City\n1,Austin\n", "auto.csv")

    def test_empty_file_rejected(self, pipeline):
        with pytest.raises(EmptyFileError):
            pipeline.auto_ingest("", "auto.csv")


class TestIngestBatch:
    def test_blank_files_are_skipped(self, pipeline, store):
        summaries = pipeline.ingest_batch(
            [(JANE_CSV, "a.csv"), ("\n \n", "b.csv"), (JANE_CSV, "c.csv")], FULL_MAPPING,
        )
        assert [s.name for s in summaries] == ["a", "c"]
        assert store.create_calls == 2

    def test_late_rejection_writes_nothing(self, pipeline, store):
        with pytest.raises(MissingRequiredFieldError):
            pipeline.ingest_batch([
                ("First Name,Last Name,Email\nAnn,Lee,ann@x.com\n", "good.csv"),
                ("Phone,City\n1,Austin\n", "bad.csv"),
            ])
        assert store.create_calls == 0

    def test_all_blank_rejected(self, pipeline, store):
        with pytest.raises(EmptyFileError):
            pipeline.ingest_batch([("", "a.csv"), ("\n", "b.csv")], FULL_MAPPING)
        assert store.create_calls == 0

    def test_each_file_auto_mapped_on_its_own_headers(self, pipeline):
        first, second = pipeline.ingest_batch([
            ("First Name,Last Name,Email\nAnn,Lee,ann@x.com\n", "a.csv"),
            ("Email Address,Last Name,First Name,State\nbo@x.com,Ng,Bo,NY\n", "b.csv"),
        ])
        row = pipeline.get_campaign_data(second.id).rows[0]
        assert row["Email"] == "bo@x.com"
        assert row["Time Zone"] == "EST"
        assert first.record_count == 1


class TestPreview:
    def test_preview_samples_at_most_five_rows(self, pipeline):
        csv_text = "First Name,Email\n" + "".join(f"N{i},n{i}@x.com\n" for i in range(8))
        preview = pipeline.preview(csv_text, "many.csv")
        assert len(preview.sample_rows) == 5
        assert preview.sample_rows[0] == {"First Name": "N0", "Email": "n0@x.com"}
        assert preview.record_count == 8

    def test_preview_reports_mapping_and_gaps(self, pipeline, store):
        preview = pipeline.preview(JANE_CSV, "leads.csv")
        assert preview.raw_headers == ["Full Name", "Email Address", "State", "Country"]
        assert preview.mapping == {"Email": "Email Address", "State": "State", "Country": "Country"}
        assert preview.detected_count == 3
        assert preview.skipped_count == 10
        assert preview.missing_required == ["First Name", "Last Name"]
        assert preview.sample_rows == [
            {"Full Name": "Jane Doe", "Email Address": "jane@x.com", "State": "CA", "Country": "USA"},
        ]
        assert preview.record_count == 1
        assert store.create_calls == 0


class TestRead:
    def test_missing_campaign(self, pipeline):
        with pytest.raises(CampaignNotFoundError):
            pipeline.get_campaign_data(404)

    def test_garbage_ciphertext_is_corrupted(self, pipeline, store):
        store.put_raw(Campaign(
            id=7, name="bad", encrypted_data="not-a-token",
            created_at=datetime.now(timezone.utc),
        ))
        with pytest.raises(CorruptedCampaignError) as exc_info:
            pipeline.get_campaign_data(7)
        assert exc_info.value.campaign_id == 7

    def test_wrong_key_is_corrupted(self, pipeline, store):
        summary = pipeline.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        other = CampaignPipeline(cipher=FernetCipher(Fernet.generate_key()), store=store)
        with pytest.raises(CorruptedCampaignError):
            other.get_campaign_data(summary.id)
        # other campaigns and the right key are unaffected
        assert pipeline.get_campaign_data(summary.id).rows[0]["Email"] == "jane@x.com"

    def test_non_json_plaintext_is_corrupted(self, pipeline, store, cipher):
        store.put_raw(Campaign(
            id=8, name="bad", encrypted_data=cipher.encrypt("{not json"),
            created_at=datetime.now(timezone.utc),
        ))
        with pytest.raises(CorruptedCampaignError):
            pipeline.get_campaign_data(8)

    def test_unknown_row_keys_are_corrupted(self, pipeline, store, cipher):
        payload = '{"headers": ["Nickname"], "rows": [], "fieldMappings": {"Nickname": "n"}}'
        store.put_raw(Campaign(
            id=9, name="bad", encrypted_data=cipher.encrypt(payload),
            created_at=datetime.now(timezone.utc),
        ))
        with pytest.raises(CorruptedCampaignError):
            pipeline.get_campaign_data(9)

    def test_get_campaign_detail(self, pipeline):
        summary = pipeline.ingest(JANE_CSV, FULL_MAPPING, "leads.csv")
        detail = pipeline.get_campaign(summary.id)
        assert detail.name == "leads"
        assert detail.data.rows[0]["Time Zone"] == "PST"

    def test_list_campaigns_does_not_decrypt(self, store):
        class ExplodingCipher:
            def encrypt(self, plaintext: str) -> str:
                return "x"

            def decrypt(self, ciphertext: str) -> str:
                raise AssertionError("listing must not decrypt")

        pl = CampaignPipeline(cipher=ExplodingCipher(), store=store)
        pl.ingest(JANE_CSV, FULL_MAPPING, "a.csv")
        pl.ingest(JANE_CSV, FULL_MAPPING, "b.csv")
        assert [c.name for c in pl.list_campaigns()] == ["a", "b"]


class TestHelpers:
    def test_campaign_name_strips_trailing_csv(self):
        assert campaign_name("q3-leads.csv") == "q3-leads"
        assert campaign_name("my.csv.backup") == "my.csv.backup"
        assert campaign_name("notes") == "notes"

    def test_normalize_row_allows_header_reuse(self):
        row = normalize_row({"Name": "Jo"}, {"First Name": "Name", "Last Name": "Name"})
        assert row == {"First Name": "Jo", "Last Name": "Jo", "Time Zone": "NA"}
