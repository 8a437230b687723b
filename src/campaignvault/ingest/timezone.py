"""Timezone code lookup from US state or country."""

from __future__ import annotations

NO_TIMEZONE = "NA"

STATE_TIMEZONES: dict[str, str] = {
    # Eastern
    "CT": "EST", "DE": "EST", "FL": "EST", "GA": "EST", "ME": "EST",
    "MD": "EST", "MA": "EST", "NH": "EST", "NJ": "EST", "NY": "EST",
    "NC": "EST", "OH": "EST", "PA": "EST", "RI": "EST", "SC": "EST",
    "VT": "EST", "VA": "EST", "WV": "EST",
    # Central
    "AL": "CST", "AR": "CST", "IL": "CST", "IA": "CST", "KS": "CST",
    "KY": "CST", "LA": "CST", "MN": "CST", "MS": "CST", "MO": "CST",
    "NE": "CST", "ND": "CST", "OK": "CST", "SD": "CST", "TN": "CST",
    "TX": "CST", "WI": "CST",
    # Mountain
    "AZ": "MST", "CO": "MST", "ID": "MST", "MT": "MST", "NV": "MST",
    "NM": "MST", "UT": "MST", "WY": "MST",
    # Pacific
    "CA": "PST", "OR": "PST", "WA": "PST",
    # Alaska / Hawaii
    "AK": "AKST",
    "HI": "HST",
}

# Case-sensitive; "CA" here is Canada but only reached when no state matched.
COUNTRY_TIMEZONES: dict[str, str] = {
    "US": "EST",
    "USA": "EST",
    "United States": "EST",
    "Canada": "EST",
    "CA": "EST",
    "Mexico": "CST",
    "MX": "CST",
    "UK": "GMT",
    "United Kingdom": "GMT",
    "GB": "GMT",
    "Germany": "CET",
    "DE": "CET",
    "France": "CET",
    "FR": "CET",
    "Japan": "JST",
    "JP": "JST",
    "Australia": "AEST",
    "AU": "AEST",
    "India": "IST",
    "IN": "IST",
    "China": "CST",
    "CN": "CST",
}


def derive_timezone(state: str | None = None, country: str | None = None) -> str:
    """Return the timezone code for a contact; state takes priority over country."""
    if state:
        code = STATE_TIMEZONES.get(state.upper().strip())
        if code:
            return code
    if country:
        code = COUNTRY_TIMEZONES.get(country.strip())
        if code:
            return code
    return NO_TIMEZONE
