"""Markdown codec for notes.

A note is stored as a Markdown body preceded by a small ``key: value``
header delimited by ``---`` lines::

    ---
    id: 123e4567-e89b-12d3-a456-426614174000
    title: My note
    createdAt: 2024-01-15T10:30:00.000000Z
    modifiedAt: 2024-01-15T15:45:00.000000Z
    ---

    Body text...

The header is YAML-like but deliberately not parsed as YAML: only the four
keys above are recognized and unknown keys are ignored.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import UTC, datetime, timedelta, timezone

from .models import Note, as_utc

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"
REQUIRED_FIELDS = ("id", "title", "createdAt", "modifiedAt")
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d{1,9})"
    r"(Z|[+-]\d{2}:\d{2})$",
)
_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "r": "\r", '"': '"', "\\": "\\"}
_QUOTE_TRIGGERS = (":", '"', "\n", "\r")
_MICROSECOND_DIGITS = 6


class InvalidFrontmatterError(ValueError):
    """Raised when a stored note lacks a complete, parseable header."""

    def __init__(self, missing_fields: tuple[str, ...]) -> None:
        """Record which required header fields could not be resolved."""
        self.missing_fields = missing_fields
        super().__init__(
            "Incomplete or invalid frontmatter; missing fields: "
            + ", ".join(missing_fields),
        )


def format_timestamp(value: datetime) -> str:
    """Format ``value`` as RFC 3339 UTC with microsecond precision."""
    return as_utc(value).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp with fractional seconds.

    Returns ``None`` for anything that does not match the format, including
    timestamps without a fractional part or without a timezone designator, and
    for values that match but name an impossible date, offset or instant.
    """
    match = _TIMESTAMP_RE.match(value)
    if not match:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    microsecond = int(fraction[:_MICROSECOND_DIGITS].ljust(_MICROSECOND_DIGITS, "0"))
    try:
        if zone == "Z":
            tzinfo = UTC
        else:
            sign = -1 if zone[0] == "-" else 1
            offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
            tzinfo = timezone(sign * offset)
        parsed = datetime(
            int(year),
            int(month),
            int(day),
            int(hour),
            int(minute),
            int(second),
            microsecond,
            tzinfo=tzinfo,
        ).astimezone(UTC)
    except (ValueError, OverflowError):
        return None
    return parsed


def escape_title(title: str) -> str:
    """Escape a title for a single header line.

    Titles that are empty, padded with whitespace, or contain ``:``, ``"`` or
    line breaks are double-quoted with backslash escapes. Others are written
    verbatim.
    """
    needs_quotes = (
        not title
        or title != title.strip()
        or any(char in title for char in _QUOTE_TRIGGERS)
    )
    if not needs_quotes:
        return title
    escaped = (
        title.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def unescape_title(value: str) -> str:
    """Reverse :func:`escape_title`."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):  # noqa: PLR2004
        return _ESCAPE_RE.sub(
            lambda m: _ESCAPES.get(m.group(1), m.group(0)),
            value[1:-1],
        )
    return value.replace('\\"', '"')


def split_frontmatter(text: str) -> tuple[str, str]:
    """Split ``text`` into ``(header, body)``.

    When the first line is not a delimiter, or the closing delimiter is
    missing, the header is empty and the whole input is returned as body.
    """
    lines = text.split("\n")
    if lines[0].strip() != FRONTMATTER_DELIMITER:
        return "", text

    for index in range(1, len(lines)):
        if lines[index].strip() == FRONTMATTER_DELIMITER:
            header = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1 :]).strip()
            return header, body

    return "", text


def _parse_header(header: str) -> dict[str, object]:
    fields: dict[str, object] = {}
    for raw_line in header.split("\n"):
        key, sep, raw_value = raw_line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = raw_value.strip()
        if key == "id":
            try:
                fields["id"] = uuid.UUID(value)
            except ValueError:
                fields.pop("id", None)
        elif key == "title":
            fields["title"] = unescape_title(value)
        elif key in ("createdAt", "modifiedAt"):
            parsed = parse_timestamp(value)
            if parsed is None:
                fields.pop(key, None)
            else:
                fields[key] = parsed
    return fields


def serialize(note: Note) -> str:
    """Render ``note`` as Markdown with a metadata header."""
    return (
        f"{FRONTMATTER_DELIMITER}\n"
        f"id: {note.id}\n"
        f"title: {escape_title(note.title)}\n"
        f"createdAt: {format_timestamp(note.created_at)}\n"
        f"modifiedAt: {format_timestamp(note.updated_at)}\n"
        f"{FRONTMATTER_DELIMITER}\n"
        "\n"
        f"{note.content}"
    )


def deserialize(text: str) -> Note:
    """Parse a serialized note.

    Args:
        text: Full file contents.

    Returns:
        The reconstructed note. Timestamps and id come from the header.

    Raises:
        InvalidFrontmatterError: If any required header field is missing or
            unparseable, including when the input has no header at all.

    """
    header, body = split_frontmatter(text)
    fields = _parse_header(header)

    missing = tuple(name for name in REQUIRED_FIELDS if name not in fields)
    if missing:
        raise InvalidFrontmatterError(missing)

    return Note(
        id=fields["id"],
        title=fields["title"],
        content=body,
        created_at=fields["createdAt"],
        updated_at=fields["modifiedAt"],
    )


def is_valid_markdown(text: str) -> bool:
    """Return True if ``text`` deserializes into a note."""
    try:
        deserialize(text)
    except InvalidFrontmatterError as exc:
        logger.debug("Rejected note text: %s", exc)
        return False
    return True


def extract_content(text: str) -> str:
    """Return only the body of a serialized note."""
    return split_frontmatter(text)[1]


def extract_frontmatter(text: str) -> str:
    """Return only the raw header lines of a serialized note."""
    return split_frontmatter(text)[0]
