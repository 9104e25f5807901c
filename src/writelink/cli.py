"""CLI entry point using Typer."""

import logging
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Annotated, Any

import typer

from writelink.codec import format_timestamp, serialize
from writelink.config import NOTES_DIR_ENV
from writelink.errors import NoteNotFoundError, RepositoryError
from writelink.logging_utils import setup_logging
from writelink.models import Note
from writelink.repository import FileNoteRepository, coerce_note_id
from writelink.services import InvalidInputError, NoteService

app = typer.Typer(help="WriteLink CLI - Markdown note storage")
logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_EXIT_CODE = 2


def handle_cli_errors[R](func: Callable[..., R]) -> Callable[..., R]:
    """Handle common CLI errors.

    Store errors and invalid input exit with code 1. Anything else is logged
    with its traceback and exits with code 2.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> R:  # noqa: ANN401
        try:
            return func(*args, **kwargs)
        except (RepositoryError, ValueError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e
        except Exception as e:
            logger.exception("Unexpected error in %s", func.__name__)
            typer.echo(f"Unexpected error: {e}", err=True)
            raise typer.Exit(code=UNEXPECTED_ERROR_EXIT_CODE) from e

    return wrapper


def _service(ctx: typer.Context) -> NoteService:
    return NoteService(FileNoteRepository(ctx.obj))


def _echo_notes(notes: list[Note]) -> None:
    if not notes:
        typer.echo("No notes found.")
        return
    for note in notes:
        typer.echo(f"- {note.id}  {format_timestamp(note.updated_at)}  {note.title}")


@app.callback()
def main_callback(
    ctx: typer.Context,
    notes_dir: Annotated[
        Path | None,
        typer.Option(
            "--notes-dir",
            envvar=NOTES_DIR_ENV,
            help="Directory holding the note files",
        ),
    ] = None,
) -> None:
    """Manage WriteLink notes stored as Markdown files."""
    setup_logging()
    ctx.obj = notes_dir


@app.command("new")
@handle_cli_errors
def cmd_new(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Title of the new note")],
    content: Annotated[str, typer.Option(help="Markdown body of the note")] = "",
) -> None:
    """Create a new note."""
    note = _service(ctx).create_note(title, content)
    typer.echo(f"Note '{note.id}' created successfully.")


@app.command("show")
@handle_cli_errors
def cmd_show(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note")],
) -> None:
    """Print a note in its stored format."""
    note_uuid = coerce_note_id(note_id)
    note = _service(ctx).get_note(note_uuid)
    if note is None:
        raise NoteNotFoundError(note_uuid)
    typer.echo(serialize(note))


@app.command("list")
@handle_cli_errors
def cmd_list(ctx: typer.Context) -> None:
    """List notes, most recently modified first."""
    _echo_notes(_service(ctx).list_notes())


@app.command("search")
@handle_cli_errors
def cmd_search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Text to look for")],
) -> None:
    """Search titles and content, ignoring case."""
    _echo_notes(_service(ctx).search_notes(query))


@app.command("modified-since")
@handle_cli_errors
def cmd_modified_since(
    ctx: typer.Context,
    timestamp: Annotated[
        str,
        typer.Argument(help="ISO 8601 timestamp; naive values are UTC"),
    ],
) -> None:
    """List notes modified after a point in time."""
    since = datetime.fromisoformat(timestamp)
    _echo_notes(_service(ctx).notes_modified_since(since))


@app.command("edit")
@handle_cli_errors
def cmd_edit(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note")],
    title: Annotated[str | None, typer.Option(help="New title")] = None,
    content: Annotated[str | None, typer.Option(help="New Markdown body")] = None,
) -> None:
    """Change a note's title, content, or both."""
    service = _service(ctx)
    if title is not None and content is not None:
        note = service.edit(note_id, title, content)
    elif title is not None:
        note = service.edit_title(note_id, title)
    elif content is not None:
        note = service.edit_content(note_id, content)
    else:
        msg = "Nothing to edit: pass --title and/or --content"
        raise InvalidInputError(msg)
    typer.echo(f"Note '{note.id}' saved.")


@app.command("delete")
@handle_cli_errors
def cmd_delete(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note")],
) -> None:
    """Delete a note permanently."""
    _service(ctx).delete_note(note_id)
    typer.echo(f"Note '{note_id}' deleted.")


def main() -> None:
    """Entry point for the WriteLink CLI."""
    app()


if __name__ == "__main__":
    main()
