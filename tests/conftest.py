"""Test configuration and fixtures."""

import uuid
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path

import fsspec
import pytest

from writelink.models import Note
from writelink.repository import FileNoteRepository

BASE_TIME = datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=UTC)


@pytest.fixture(params=["file", "memory"])
def fs_impl(
    request: pytest.FixtureRequest,
    tmp_path: Path,
) -> Generator[tuple[fsspec.AbstractFileSystem, str]]:
    """Fixture to provide different fsspec filesystem implementations."""
    protocol = request.param
    if protocol == "file":
        fs = fsspec.filesystem("file")
        root = str(tmp_path / "notes")
        yield fs, root
        # Cleanup handled by tmp_path
    else:
        fs = fsspec.filesystem("memory")
        root = f"/writelink-{uuid.uuid4().hex}"
        yield fs, root
        if fs.exists(root):
            fs.rm(root, recursive=True)


@pytest.fixture
def repository(fs_impl: tuple[fsspec.AbstractFileSystem, str]) -> FileNoteRepository:
    """A note store on each filesystem implementation."""
    fs, root = fs_impl
    return FileNoteRepository(root, fs=fs)


@pytest.fixture
def local_repository(tmp_path: Path) -> FileNoteRepository:
    """A note store on the local filesystem only."""
    return FileNoteRepository(tmp_path / "notes")


@pytest.fixture
def make_note() -> Callable[..., Note]:
    """Factory for notes with deterministic timestamps."""

    def _make(
        title: str = "Untitled",
        content: str = "Body",
        *,
        created_at: datetime = BASE_TIME,
        updated_at: datetime | None = None,
        note_id: uuid.UUID | None = None,
    ) -> Note:
        return Note(
            id=note_id or uuid.uuid4(),
            title=title,
            content=content,
            created_at=created_at,
            updated_at=updated_at or created_at,
        )

    return _make
