"""Heuristic mapping of raw CSV headers onto canonical contact fields.

The result is a best-effort seed for human review: greedy, order-sensitive,
and free to map one header onto several canonical fields. Callers may
override any part of it before ingesting.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from campaignvault.core.types import FieldMapping
from campaignvault.models.campaign import CANONICAL_FIELDS, REQUIRED_FIELDS
from campaignvault.models.mapping import AutoMapResult

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_name(name: str) -> str:
    """Lowercase and drop every character outside ``[a-z0-9]``."""
    return _NON_ALNUM.sub("", name.lower())


def keyword_tokens(canonical_field: str) -> list[str]:
    """"Mobile Phone" -> ["mobile", "phone"]."""
    return [normalize_name(token) for token in canonical_field.lower().split(" ")]


def header_matches(canonical_field: str, header: str) -> bool:
    """Direct match on normalized names, else every keyword is a substring."""
    normalized_header = normalize_name(header)
    if normalized_header == normalize_name(canonical_field):
        return True
    return all(token in normalized_header for token in keyword_tokens(canonical_field))


def find_header(canonical_field: str, raw_headers: Sequence[str]) -> str | None:
    for header in raw_headers:
        if header_matches(canonical_field, header):
            return header
    return None


def auto_map(
    canonical_fields: Iterable[str] = CANONICAL_FIELDS,
    raw_headers: Sequence[str] = (),
) -> AutoMapResult:
    """Propose a mapping for each canonical field, in order."""
    mapping: FieldMapping = {}
    for canonical_field in canonical_fields:
        header = find_header(canonical_field, raw_headers)
        if header is not None:
            mapping[canonical_field] = header
    return AutoMapResult(mapping=mapping, detected_count=len(mapping))


def missing_required(mapping: FieldMapping) -> list[str]:
    return [f for f in REQUIRED_FIELDS if not mapping.get(f)]


def available_headers(
    mapping: FieldMapping,
    raw_headers: Sequence[str],
    current_field: str | None = None,
) -> list[str]:
    """Headers not already claimed by a canonical field.

    The header currently mapped to ``current_field`` stays available so a
    selector can show its own value, even when another field shares it.
    """
    own = mapping.get(current_field) if current_field is not None else None
    used = {header for header in mapping.values() if own is None or header != own}
    return [h for h in raw_headers if h not in used]
