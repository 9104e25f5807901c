"""File-backed note store.

Each note lives in its own ``<uuid>.md`` file inside a base directory. Writes
go through a temporary file and a rename so a crash never leaves a half
written note behind, and bulk reads skip files that fail to parse instead of
failing the whole listing.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

import fsspec
from fsspec.implementations.local import LocalFileSystem

from .codec import InvalidFrontmatterError, deserialize, serialize
from .config import NOTE_FILE_EXTENSION, get_notes_dir
from .errors import (
    DecodingError,
    FileSystemError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
)
from .fileio import atomic_write_text, fs_basename, fs_join, read_text
from .models import as_utc

if TYPE_CHECKING:
    from datetime import datetime

    from .models import Note

logger = logging.getLogger(__name__)

NoteIdLike = uuid.UUID | str


def coerce_note_id(note_id: NoteIdLike) -> uuid.UUID:
    """Return ``note_id`` as a UUID.

    Raises:
        ValueError: If a string id is not a valid UUID.

    """
    if isinstance(note_id, uuid.UUID):
        return note_id
    try:
        return uuid.UUID(str(note_id))
    except ValueError as e:
        msg = f"Invalid note_id: {note_id}. Must be a valid UUID."
        raise ValueError(msg) from e


class FileNoteRepository:
    """CRUD and query operations over a directory of Markdown note files.

    All public operations hold a per-instance re-entrant lock, so calls made
    from several threads are serialized. There is no in-memory cache; every
    read goes to the filesystem.
    """

    def __init__(
        self,
        base_dir: str | Path | None = None,
        *,
        extension: str = NOTE_FILE_EXTENSION,
        fs: fsspec.AbstractFileSystem | None = None,
    ) -> None:
        """Open (and create if needed) the note directory.

        Args:
            base_dir: Directory holding the notes. Defaults to the configured
                notes directory.
            extension: File extension used for note files, without the dot.
            fs: Optional fsspec filesystem; the local filesystem by default.

        Raises:
            FileSystemError: If the directory cannot be created or the path
                exists but is not a directory.

        """
        self._fs = fs or fsspec.filesystem("file")
        raw_dir = str(base_dir) if base_dir is not None else str(get_notes_dir())
        if isinstance(self._fs, LocalFileSystem):
            raw_dir = Path(raw_dir).expanduser().absolute().as_posix()
        self.base_dir = raw_dir.rstrip("/") or "/"
        self.extension = extension.lstrip(".")
        self._lock = threading.RLock()
        self._ensure_base_dir()

    @property
    def fs(self) -> fsspec.AbstractFileSystem:
        """The filesystem backing this store."""
        return self._fs

    def _ensure_base_dir(self) -> None:
        try:
            if self._fs.exists(self.base_dir):
                if not self._fs.isdir(self.base_dir):
                    raise FileSystemError(
                        self.base_dir,
                        "path exists but is not a directory",
                    )
                return
            self._fs.makedirs(self.base_dir, exist_ok=True)
        except OSError as exc:
            logger.exception("Failed to create notes directory: %s", self.base_dir)
            raise FileSystemError(self.base_dir, exc) from exc

    def path_for(self, note_id: NoteIdLike) -> str:
        """Return the file path that stores ``note_id``."""
        return fs_join(self.base_dir, f"{coerce_note_id(note_id)}.{self.extension}")

    def _is_note_file(self, path: str) -> bool:
        name = fs_basename(path)
        return not name.startswith(".") and name.endswith(f".{self.extension}")

    def _read_note(self, path: str) -> Note:
        try:
            text = read_text(self._fs, path)
        except UnicodeDecodeError as exc:
            raise DecodingError(path, exc) from exc
        except OSError as exc:
            raise FileSystemError(path, exc) from exc

        try:
            return deserialize(text)
        except InvalidFrontmatterError as exc:
            raise DecodingError(path, exc) from exc

    def _write_note(self, note: Note, path: str) -> None:
        try:
            atomic_write_text(self._fs, path, serialize(note))
        except OSError as exc:
            logger.exception("Failed to write note %s", note.id)
            raise FileSystemError(path, exc) from exc

    def create(self, note: Note) -> Note:
        """Persist a new note.

        Raises:
            NoteAlreadyExistsError: If a file for ``note.id`` already exists.
            FileSystemError: If the write fails.

        """
        with self._lock:
            path = self.path_for(note.id)
            if self._fs.exists(path):
                raise NoteAlreadyExistsError(note.id)
            self._write_note(note, path)
            logger.info("Created note %s", note.id)
            return note

    def read(self, note_id: NoteIdLike) -> Note | None:
        """Load a note, or return ``None`` if it is not stored.

        Raises:
            DecodingError: If the file exists but cannot be parsed.
            FileSystemError: If the file cannot be read.

        """
        with self._lock:
            path = self.path_for(note_id)
            if not self._fs.exists(path):
                logger.debug("Note %s not present", note_id)
                return None
            return self._read_note(path)

    def update(self, note: Note) -> Note:
        """Overwrite an existing note.

        Raises:
            NoteNotFoundError: If no file exists for ``note.id``.
            FileSystemError: If the write fails.

        """
        with self._lock:
            path = self.path_for(note.id)
            if not self._fs.exists(path):
                raise NoteNotFoundError(note.id)
            self._write_note(note, path)
            logger.info("Updated note %s", note.id)
            return note

    def delete(self, note_id: NoteIdLike) -> None:
        """Remove a note's file.

        Raises:
            NoteNotFoundError: If no file exists for ``note_id``.
            FileSystemError: If the file cannot be removed.

        """
        with self._lock:
            note_uuid = coerce_note_id(note_id)
            path = self.path_for(note_uuid)
            if not self._fs.exists(path):
                raise NoteNotFoundError(note_uuid)
            try:
                self._fs.rm(path)
            except OSError as exc:
                logger.exception("Failed to delete note %s", note_uuid)
                raise FileSystemError(path, exc) from exc
            logger.info("Deleted note %s", note_uuid)

    def list_all(self) -> list[Note]:
        """Return every readable note, most recently modified first.

        Files that cannot be read or parsed are logged and skipped. Notes with
        equal ``updated_at`` keep file-name order.

        Raises:
            FileSystemError: If the directory itself cannot be listed.

        """
        with self._lock:
            try:
                entries = self._fs.ls(self.base_dir, detail=True)
            except OSError as exc:
                logger.exception("Failed to list notes in %s", self.base_dir)
                raise FileSystemError(self.base_dir, exc) from exc

            paths = sorted(
                (
                    entry["name"]
                    for entry in entries
                    if entry.get("type") == "file"
                    and self._is_note_file(entry["name"])
                ),
                key=fs_basename,
            )

            notes: list[Note] = []
            for path in paths:
                try:
                    notes.append(self._read_note(path))
                except (DecodingError, FileSystemError) as exc:
                    logger.warning("Skipping unreadable note file %s: %s", path, exc)

            notes.sort(key=lambda note: note.updated_at, reverse=True)
            return notes

    def search(self, query: str) -> list[Note]:
        """Return notes whose title or content contains ``query``.

        Matching is a case-insensitive substring test. An empty query returns
        every note.
        """
        with self._lock:
            notes = self.list_all()
            if not query:
                return notes
            needle = query.casefold()
            return [
                note
                for note in notes
                if needle in note.title.casefold() or needle in note.content.casefold()
            ]

    def list_modified_since(self, timestamp: datetime) -> list[Note]:
        """Return notes whose ``updated_at`` is strictly after ``timestamp``."""
        since = as_utc(timestamp)
        with self._lock:
            return [note for note in self.list_all() if note.updated_at > since]
