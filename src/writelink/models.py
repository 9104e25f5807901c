"""Domain model for notes."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalize ``value`` to UTC, treating naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Note(BaseModel):
    """A single note: identity, title, Markdown body and timestamps.

    Instances are immutable. Mutations return copies with ``updated_at``
    replaced; ``id`` and ``created_at`` never change.
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    content: str = ""
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)

    @classmethod
    def new(
        cls,
        title: str,
        content: str = "",
        *,
        now: datetime | None = None,
    ) -> Note:
        """Create a brand new note with a fresh id and both timestamps set.

        Args:
            title: Initial title.
            content: Initial Markdown body.
            now: Creation time; defaults to the current UTC time.

        Returns:
            The new note.

        """
        timestamp = now or utc_now()
        return cls(
            id=uuid.uuid4(),
            title=title,
            content=content,
            created_at=timestamp,
            updated_at=timestamp,
        )

    @property
    def is_empty(self) -> bool:
        """True when both title and content are blank."""
        return not self.title.strip() and not self.content.strip()

    @property
    def content_size_in_bytes(self) -> int:
        """Size of the UTF-8 encoded content."""
        return len(self.content.encode("utf-8"))

    def updating_content(self, content: str, at: datetime | None = None) -> Note:
        """Return a copy with new content and a refreshed ``updated_at``."""
        return self._touched(at, content=content)

    def updating_title(self, title: str, at: datetime | None = None) -> Note:
        """Return a copy with a new title and a refreshed ``updated_at``."""
        return self._touched(at, title=title)

    def updating(
        self,
        *,
        title: str,
        content: str,
        at: datetime | None = None,
    ) -> Note:
        """Return a copy with both title and content replaced."""
        return self._touched(at, title=title, content=content)

    def _touched(self, at: datetime | None, **changes: str) -> Note:
        updated_at = as_utc(at) if at is not None else utc_now()
        return self.model_copy(update={**changes, "updated_at": updated_at})
