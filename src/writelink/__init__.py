"""WriteLink note persistence package."""

from .codec import (
    InvalidFrontmatterError,
    deserialize,
    extract_content,
    extract_frontmatter,
    is_valid_markdown,
    serialize,
)
from .errors import (
    DecodingError,
    EncodingError,
    FileSystemError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
    RepositoryError,
)
from .models import Note
from .repository import FileNoteRepository
from .services import InvalidInputError, NoteService

__all__ = [
    "DecodingError",
    "EncodingError",
    "FileNoteRepository",
    "FileSystemError",
    "InvalidFrontmatterError",
    "InvalidInputError",
    "Note",
    "NoteAlreadyExistsError",
    "NoteNotFoundError",
    "NoteService",
    "RepositoryError",
    "deserialize",
    "extract_content",
    "extract_frontmatter",
    "is_valid_markdown",
    "serialize",
]
