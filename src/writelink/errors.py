"""Exceptions raised by the note store."""

from __future__ import annotations

import uuid


class RepositoryError(Exception):
    """Base class for note store failures."""


class NoteNotFoundError(RepositoryError):
    """Raised when an operation addresses a note that is not stored."""

    def __init__(self, note_id: uuid.UUID) -> None:
        """Remember the missing note id."""
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found")


class NoteAlreadyExistsError(RepositoryError):
    """Raised when attempting to create a note that already exists."""

    def __init__(self, note_id: uuid.UUID) -> None:
        """Remember the colliding note id."""
        self.note_id = note_id
        super().__init__(f"Note {note_id} already exists")


class DecodingError(RepositoryError):
    """Raised when a stored file cannot be parsed into a note.

    The underlying parse error is chained as ``__cause__``.
    """

    def __init__(self, path: str, reason: Exception) -> None:
        """Record the offending file and the parse failure."""
        self.path = path
        self.reason = reason
        super().__init__(f"Could not decode note at {path}: {reason}")


class EncodingError(RepositoryError):
    """Reserved for serialization failures; serialization is currently total."""


class FileSystemError(RepositoryError):
    """Raised for I/O, permission, or directory structure failures."""

    def __init__(self, path: str, reason: OSError | str) -> None:
        """Record the path involved and the underlying OS error."""
        self.path = path
        self.reason = reason
        super().__init__(f"File system error at {path}: {reason}")
