"""Auto-mapping results and upload preview models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AutoMapResult(BaseModel):
    """Proposed canonical field -> raw header mapping."""

    mapping: dict[str, str] = Field(default_factory=dict)
    detected_count: int = 0


class MappingPreview(BaseModel):
    """What an upload would map to, returned before it is committed."""

    filename: str = ""
    raw_headers: list[str] = Field(default_factory=list)
    mapping: dict[str, str] = Field(default_factory=dict)
    detected_count: int = 0
    skipped_count: int = 0
    missing_required: list[str] = Field(default_factory=list)
    sample_rows: list[dict[str, str]] = Field(default_factory=list)
    record_count: int = 0
