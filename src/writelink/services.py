"""Note editing rules on top of the note store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from .errors import NoteNotFoundError
from .models import Note, as_utc, utc_now
from .repository import NoteIdLike, coerce_note_id

if TYPE_CHECKING:
    from datetime import datetime

    from .repository import FileNoteRepository

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when user input breaks a note rule, e.g. a blank title."""


def _clean_title(title: str) -> str:
    trimmed = title.strip()
    if not trimmed:
        msg = "Title must not be empty"
        raise InvalidInputError(msg)
    return trimmed


class NoteService:
    """Create, edit and delete notes through a repository.

    Edits are skipped when nothing changed, and ``updated_at`` never moves
    backwards even if the clock does.
    """

    def __init__(
        self,
        repository: FileNoteRepository,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        """Bind the service to a repository and a clock."""
        self.repository = repository
        self._now = now

    def _require(self, note_id: NoteIdLike) -> Note:
        note_uuid = coerce_note_id(note_id)
        note = self.repository.read(note_uuid)
        if note is None:
            raise NoteNotFoundError(note_uuid)
        return note

    def _next_timestamp(self, current: Note) -> datetime:
        return max(as_utc(self._now()), current.updated_at)

    def create_note(self, title: str, content: str = "") -> Note:
        """Create and persist a new note.

        Raises:
            InvalidInputError: If the title is blank.

        """
        note = Note.new(_clean_title(title), content, now=self._now())
        return self.repository.create(note)

    def get_note(self, note_id: NoteIdLike) -> Note | None:
        """Return a note or ``None``."""
        return self.repository.read(note_id)

    def list_notes(self) -> list[Note]:
        """Return all notes, most recently modified first."""
        return self.repository.list_all()

    def search_notes(self, query: str) -> list[Note]:
        """Case-insensitive search over titles and content."""
        return self.repository.search(query)

    def notes_modified_since(self, timestamp: datetime) -> list[Note]:
        """Return notes modified strictly after ``timestamp``."""
        return self.repository.list_modified_since(timestamp)

    def edit_content(self, note_id: NoteIdLike, content: str) -> Note:
        """Replace a note's body.

        Raises:
            NoteNotFoundError: If the note does not exist.

        """
        current = self._require(note_id)
        if current.content == content:
            return current
        updated = current.updating_content(content, at=self._next_timestamp(current))
        return self.repository.update(updated)

    def edit_title(self, note_id: NoteIdLike, title: str) -> Note:
        """Rename a note.

        Raises:
            NoteNotFoundError: If the note does not exist.
            InvalidInputError: If the title is blank.

        """
        current = self._require(note_id)
        cleaned = _clean_title(title)
        if current.title == cleaned:
            return current
        updated = current.updating_title(cleaned, at=self._next_timestamp(current))
        return self.repository.update(updated)

    def edit(self, note_id: NoteIdLike, title: str, content: str) -> Note:
        """Replace title and body together."""
        current = self._require(note_id)
        cleaned = _clean_title(title)
        if current.title == cleaned and current.content == content:
            return current
        updated = current.updating(
            title=cleaned,
            content=content,
            at=self._next_timestamp(current),
        )
        return self.repository.update(updated)

    def replace(self, note: Note) -> Note:
        """Overwrite a stored note with ``note`` as-is.

        Used for sync; timestamps are taken from ``note`` and may move
        backwards.

        Raises:
            NoteNotFoundError: If the note does not exist.

        """
        self._require(note.id)
        return self.repository.update(note)

    def delete_note(self, note_id: NoteIdLike) -> None:
        """Delete a note.

        Raises:
            NoteNotFoundError: If the note does not exist.

        """
        self.repository.delete(note_id)
        logger.debug("Note %s removed via service", note_id)
