"""Campaign upload, listing, decrypted view and export endpoints."""

from __future__ import annotations

import json
from typing import Literal

from fastapi import APIRouter, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import Response

from campaignvault.export.campaign_export import (
    completeness_score,
    export_filename,
    filter_rows,
    select_rows,
    to_csv,
    to_tsv,
)
from campaignvault.ingest.pipeline import CampaignPipeline
from campaignvault.models.campaign import CampaignDetail, CampaignSummary
from campaignvault.models.mapping import MappingPreview

router = APIRouter(tags=["campaigns"])


def _pipeline(request: Request) -> CampaignPipeline:
    return request.app.state.pipeline


def _read_csv(upload: UploadFile) -> str:
    filename = upload.filename or ""
    if not (filename.endswith(".csv") or upload.content_type == "text/csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")
    raw = upload.file.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded") from exc


def _parse_mappings(field_mappings: str | None) -> dict[str, str] | None:
    if not field_mappings:
        return None
    try:
        parsed = json.loads(field_mappings)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="fieldMappings must be a JSON object") from exc
    if not isinstance(parsed, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in parsed.items()
    ):
        raise HTTPException(status_code=400, detail="fieldMappings must map strings to strings")
    return parsed


@router.post("/preview", response_model=MappingPreview)
def preview_campaign(request: Request, csv: UploadFile = File(...)) -> MappingPreview:
    """Propose a field mapping for an upload without storing it."""
    return _pipeline(request).preview(_read_csv(csv), csv.filename or "")


@router.post("/upload")
def upload_campaigns(
    request: Request,
    csv: list[UploadFile] = File(...),
    field_mappings: str | None = Form(default=None, alias="fieldMappings"),
) -> dict[str, list[CampaignSummary]]:
    """Ingest one or more CSV files; auto-maps when no mapping is supplied.

    Blank files are skipped. Any other rejected file fails the whole request
    and no campaign is stored.
    """
    mapping = _parse_mappings(field_mappings)
    uploads = [(_read_csv(upload), upload.filename or "campaign.csv") for upload in csv]
    return {"campaigns": _pipeline(request).ingest_batch(uploads, mapping)}


@router.get("", response_model=list[CampaignSummary])
def list_campaigns(request: Request) -> list[CampaignSummary]:
    return _pipeline(request).list_campaigns()


@router.get("/{campaign_id}", response_model=CampaignDetail)
def get_campaign(request: Request, campaign_id: int) -> CampaignDetail:
    return _pipeline(request).get_campaign(campaign_id)


@router.get("/{campaign_id}/stats")
def campaign_stats(request: Request, campaign_id: int) -> dict:
    detail = _pipeline(request).get_campaign(campaign_id)
    return {
        "id": detail.id,
        "record_count": len(detail.data.rows),
        "field_count": len(detail.data.headers),
        "completeness": completeness_score(detail.data),
    }


@router.get("/{campaign_id}/export")
def export_campaign(
    request: Request,
    campaign_id: int,
    format: Literal["csv", "tsv"] = "csv",
    search: str = "",
    rows: list[int] | None = Query(default=None),
) -> Response:
    """Download filtered (and optionally selected) rows as CSV or TSV."""
    detail = _pipeline(request).get_campaign(campaign_id)
    selected = select_rows(filter_rows(detail.data, search), rows)
    if format == "tsv":
        body, media_type = to_tsv(detail.data, selected), "text/tab-separated-values"
    else:
        body, media_type = to_csv(detail.data, selected), "text/csv"
    filename = export_filename(detail.name, format)
    return Response(
        content=body,
        media_type=f"{media_type}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
