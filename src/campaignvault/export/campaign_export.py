"""Campaign export: search filtering, row selection, CSV/TSV rendering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from campaignvault.core.types import NormalizedRow
from campaignvault.ingest.csv_parser import format_line, quote_field
from campaignvault.models.campaign import CampaignData


def filter_rows(data: CampaignData, search: str = "") -> list[NormalizedRow]:
    """Rows where any value contains ``search``, case-insensitively."""
    if not search:
        return list(data.rows)
    needle = search.lower()
    return [row for row in data.rows if any(needle in v.lower() for v in row.values())]


def select_rows(rows: Sequence[NormalizedRow], indices: Iterable[int] | None = None) -> list[NormalizedRow]:
    """Subset by position; no selection means every row."""
    wanted = set(indices or ())
    if not wanted:
        return list(rows)
    return [row for i, row in enumerate(rows) if i in wanted]


def to_csv(data: CampaignData, rows: Sequence[NormalizedRow] | None = None) -> str:
    rows = data.rows if rows is None else rows
    lines = [",".join(quote_field(h) for h in data.headers)]
    lines.extend(format_line([row.get(h, "") for h in data.headers]) for row in rows)
    return "\n".join(lines)


def to_tsv(data: CampaignData, rows: Sequence[NormalizedRow] | None = None) -> str:
    """Tab-separated rendering for pasting into a spreadsheet."""
    rows = data.rows if rows is None else rows
    lines = ["\t".join(data.headers)]
    lines.extend("\t".join(row.get(h, "") for h in data.headers) for row in rows)
    return "\n".join(lines)


def completeness_score(data: CampaignData) -> int:
    """Percentage of header cells across all rows holding non-blank values."""
    total = len(data.rows) * len(data.headers)
    if total == 0:
        return 0
    filled = sum(1 for row in data.rows for v in row.values() if v and v.strip())
    return round(filled / total * 100)


def export_filename(campaign_name: str, extension: str = "csv") -> str:
    return f"{campaign_name}-export.{extension}"
