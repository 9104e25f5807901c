"""Crash-safe file helpers on top of fsspec."""

from __future__ import annotations

import contextlib
import os
import uuid

import fsspec
from fsspec.implementations.local import LocalFileSystem

TEMP_SUFFIX = "tmp"


def fs_join(base: str, *parts: str) -> str:
    """Join fsspec path components with forward slashes."""
    return "/".join([base.rstrip("/"), *parts])


def fs_basename(path: str) -> str:
    """Return the final component of an fsspec path."""
    return path.rstrip("/").rsplit("/", 1)[-1]


def temp_path_for(path: str) -> str:
    """Return a unique hidden sibling path used while writing ``path``."""
    parent, _, name = path.rstrip("/").rpartition("/")
    return f"{parent}/.{name}.{uuid.uuid4().hex}.{TEMP_SUFFIX}"


def read_text(fs: fsspec.AbstractFileSystem, path: str) -> str:
    """Read a UTF-8 text file in full, keeping line endings as stored."""
    with fs.open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()


def atomic_write_text(fs: fsspec.AbstractFileSystem, path: str, text: str) -> None:
    """Write ``text`` to ``path`` without ever exposing a partial file.

    The data goes to a temporary sibling first and is then renamed over the
    destination. On the local filesystem the temporary file is fsynced and the
    rename is ``os.replace``; other filesystems use ``fs.mv``. The temporary
    file is removed if anything fails.

    Args:
        fs: Filesystem holding ``path``.
        path: Destination file.
        text: Full file contents.

    """
    tmp_path = temp_path_for(path)
    try:
        if isinstance(fs, LocalFileSystem):
            with open(tmp_path, "w", encoding="utf-8", newline="") as handle:  # noqa: PTH123
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        else:
            with fs.open(tmp_path, "w", encoding="utf-8", newline="") as handle:
                handle.write(text)
            fs.mv(tmp_path, path)
    finally:
        if fs.exists(tmp_path):
            with contextlib.suppress(OSError):
                fs.rm(tmp_path)
