"""Permissive single-line CSV tokenizer and file splitting.

Real-world contact exports are frequently malformed, so nothing here raises:
unbalanced quotes keep whatever quote state the scan ended in, and ragged rows
are padded with empty strings when zipped against the header row.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from campaignvault.core.types import RawRow


@dataclass
class ParsedCsv:
    """Header row plus data rows zipped against it."""

    headers: list[str] = field(default_factory=list)
    rows: list[RawRow] = field(default_factory=list)


def parse_line(line: str) -> list[str]:
    """Split one CSV line into trimmed fields, honoring ``"`` quoting and ``""`` escapes."""
    fields: list[str] = []
    buf: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                buf.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
        i += 1
    fields.append("".join(buf).strip())
    return fields


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and drop lines that are empty or whitespace-only."""
    return [line for line in text.split("\n") if line.strip()]


def zip_row(headers: list[str], values: list[str]) -> RawRow:
    """Pair values with headers by position; missing values become ``""``."""
    return {header: values[i] if i < len(values) else "" for i, header in enumerate(headers)}


def parse_csv(text: str) -> ParsedCsv:
    """Parse a whole file: first non-blank line is the header row."""
    lines = split_lines(text)
    if not lines:
        return ParsedCsv()
    headers = parse_line(lines[0])
    rows = [zip_row(headers, parse_line(line)) for line in lines[1:]]
    return ParsedCsv(headers=headers, rows=rows)


def quote_field(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def format_line(values: list[str]) -> str:
    """Serialize values as one CSV line, quoting every field."""
    return ",".join(quote_field(v) for v in values)
