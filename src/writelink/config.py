"""Configuration settings."""

import os
from pathlib import Path

APP_NAME = "WriteLink"
NOTES_DIR_ENV = "WRITELINK_NOTES_DIR"
NOTE_FILE_EXTENSION = "md"


def default_notes_dir() -> Path:
    """Application folder inside the user's documents directory."""
    return Path.home() / "Documents" / APP_NAME


def get_notes_dir() -> Path:
    """Get the directory where notes are stored."""
    configured = os.environ.get(NOTES_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return default_notes_dir()
