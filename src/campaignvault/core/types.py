"""Type aliases used across CampaignVault."""

from __future__ import annotations

CampaignId = int
FieldMapping = dict[str, str]  # canonical field -> raw CSV header
RawRow = dict[str, str]  # raw CSV header -> value
NormalizedRow = dict[str, str]  # canonical field (or "Time Zone") -> value
