"""Tests for the Markdown note codec."""

import uuid
from datetime import UTC, datetime

import pytest

from writelink.codec import (
    InvalidFrontmatterError,
    deserialize,
    escape_title,
    extract_content,
    extract_frontmatter,
    format_timestamp,
    is_valid_markdown,
    parse_timestamp,
    serialize,
    unescape_title,
)
from writelink.models import Note

NOTE_ID = uuid.UUID("123e4567-e89b-12d3-a456-426614174000")
CREATED = datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=UTC)
MODIFIED = datetime(2024, 1, 15, 15, 45, 0, 500000, tzinfo=UTC)

VALID_TEXT = """---
id: 123e4567-e89b-12d3-a456-426614174000
title: Mi Nota
createdAt: 2024-01-15T10:30:00.123456Z
modifiedAt: 2024-01-15T15:45:00.500000Z
---

Contenido de la nota"""


def _note(title: str = "Mi Nota", content: str = "Contenido de la nota") -> Note:
    return Note(
        id=NOTE_ID,
        title=title,
        content=content,
        created_at=CREATED,
        updated_at=MODIFIED,
    )


def test_serialize_fixed_layout() -> None:
    assert serialize(_note()) == VALID_TEXT


def test_deserialize_valid_text() -> None:
    assert deserialize(VALID_TEXT) == _note()


@pytest.mark.parametrize(
    "title",
    [
        "plain",
        "Meeting: Q3 Plan",
        'He said "hi"',
        "two\nlines",
        "carriage\r\nreturn",
        "",
        "  padded  ",
        "C:\\Users\\notes",
        'ends with backslash: \\',
        '"fully quoted"',
        "Café ☕ ünïcode",
        "---",
    ],
)
def test_round_trip_titles(title: str) -> None:
    note = _note(title=title)
    assert deserialize(serialize(note)) == note


@pytest.mark.parametrize(
    "content",
    [
        "",
        "single line",
        "# Heading\n\nkey: value\n\"quoted\"\n- [[link]]",
        "before\n---\nid: 00000000-0000-0000-0000-000000000000\n---\nafter",
        "tabs\tand\r\nwindows lines",
    ],
)
def test_round_trip_content(content: str) -> None:
    note = _note(content=content)
    assert deserialize(serialize(note)) == note


def test_title_with_colon_is_quoted() -> None:
    text = serialize(_note(title="Meeting: Q3 Plan"))

    assert 'title: "Meeting: Q3 Plan"' in text.splitlines()
    assert deserialize(text).title == "Meeting: Q3 Plan"


def test_escape_and_unescape_quotes() -> None:
    assert escape_title('say "hi"') == '"say \\"hi\\""'
    assert unescape_title('"say \\"hi\\""') == 'say "hi"'
    assert escape_title("simple") == "simple"
    assert unescape_title("simple") == "simple"


def test_unquoted_value_still_unescapes_quotes() -> None:
    assert unescape_title('say \\"hi\\"') == 'say "hi"'


def test_newline_in_title_never_breaks_header() -> None:
    text = serialize(_note(title="a\n---\nb"))

    assert extract_frontmatter(text).count("\n") == 3  # noqa: PLR2004


def test_missing_field_is_reported() -> None:
    text = VALID_TEXT.replace("title: Mi Nota\n", "")

    with pytest.raises(InvalidFrontmatterError) as excinfo:
        deserialize(text)

    assert excinfo.value.missing_fields == ("title",)
    assert "title" in str(excinfo.value)


def test_headerless_text_is_rejected() -> None:
    with pytest.raises(InvalidFrontmatterError) as excinfo:
        deserialize("# Just markdown\n\nNo header here.")

    assert excinfo.value.missing_fields == ("id", "title", "createdAt", "modifiedAt")


def test_unclosed_header_is_rejected() -> None:
    text = VALID_TEXT.replace("---\n\nContenido", "\nContenido")

    with pytest.raises(InvalidFrontmatterError):
        deserialize(text)


def test_empty_input_is_rejected() -> None:
    with pytest.raises(InvalidFrontmatterError):
        deserialize("")


def test_unknown_keys_are_ignored() -> None:
    text = VALID_TEXT.replace("title: Mi Nota\n", "title: Mi Nota\ntags: a, b\nnoise\n")

    assert deserialize(text) == _note()


def test_later_duplicate_keys_win() -> None:
    text = VALID_TEXT.replace("title: Mi Nota\n", "title: First\ntitle: Mi Nota\n")

    assert deserialize(text).title == "Mi Nota"


def test_timestamp_in_other_format_counts_as_missing() -> None:
    text = VALID_TEXT.replace("2024-01-15T10:30:00.123456Z", "2024-01-15 10:30:00")

    with pytest.raises(InvalidFrontmatterError) as excinfo:
        deserialize(text)

    assert excinfo.value.missing_fields == ("createdAt",)


@pytest.mark.parametrize(
    "value",
    [
        "2024-01-15T10:30:00.000+24:00",
        "2024-01-15T10:30:00.000-99:59",
        "2024-01-15T10:30:00.000+23:60",
        "0001-01-01T00:00:00.000+01:00",
        "9999-12-31T23:59:59.999-01:00",
    ],
)
def test_impossible_offset_or_instant_counts_as_missing(value: str) -> None:
    assert parse_timestamp(value) is None
    text = VALID_TEXT.replace("2024-01-15T15:45:00.500000Z", value)

    with pytest.raises(InvalidFrontmatterError) as excinfo:
        deserialize(text)

    assert excinfo.value.missing_fields == ("modifiedAt",)
    assert not is_valid_markdown(text)


def test_extreme_in_range_instants_parse() -> None:
    earliest = parse_timestamp("0001-01-01T01:00:00.000+01:00")
    latest = parse_timestamp("9999-12-31T22:59:59.999-01:00")

    assert earliest == datetime(1, 1, 1, tzinfo=UTC)
    assert latest == datetime(9999, 12, 31, 23, 59, 59, 999000, tzinfo=UTC)


def test_invalid_uuid_counts_as_missing() -> None:
    text = VALID_TEXT.replace("123e4567-e89b-12d3-a456-426614174000", "not-a-uuid")

    with pytest.raises(InvalidFrontmatterError) as excinfo:
        deserialize(text)

    assert excinfo.value.missing_fields == ("id",)


def test_uppercase_uuid_and_millisecond_timestamps_parse() -> None:
    text = (
        "---\n"
        "id: 123E4567-E89B-12D3-A456-426614174000\n"
        "title: Legacy\n"
        "createdAt: 2024-01-15T10:30:00.123Z\n"
        "modifiedAt: 2024-01-15T12:30:00.000+02:00\n"
        "---\n\nbody"
    )

    note = deserialize(text)

    assert note.id == NOTE_ID
    assert note.created_at == datetime(2024, 1, 15, 10, 30, 0, 123000, tzinfo=UTC)
    assert note.updated_at == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


def test_body_is_trimmed_and_crlf_tolerated() -> None:
    text = VALID_TEXT.replace("\n", "\r\n") + "\r\n\r\n"

    note = deserialize(text)

    assert note.title == "Mi Nota"
    assert note.content == "Contenido de la nota"


def test_timestamp_helpers() -> None:
    assert format_timestamp(CREATED) == "2024-01-15T10:30:00.123456Z"
    assert parse_timestamp("2024-01-15T10:30:00.123456Z") == CREATED
    assert parse_timestamp("2024-01-15T10:30:00.123456789Z") == CREATED
    assert parse_timestamp("2024-01-15T10:30:00Z") is None
    assert parse_timestamp("2024-13-15T10:30:00.1Z") is None
    assert parse_timestamp("garbage") is None


def test_helpers_split_text() -> None:
    assert is_valid_markdown(VALID_TEXT)
    assert not is_valid_markdown("no header")
    assert extract_content(VALID_TEXT) == "Contenido de la nota"
    assert extract_frontmatter(VALID_TEXT).splitlines()[1] == "title: Mi Nota"
    assert extract_content("no header") == "no header"
    assert extract_frontmatter("no header") == ""
