#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/api.py
"""High-level conversion API.

These functions connect the parser and the note renderer to the file
system: they read ``.eml`` files, store attachments in an attachments
folder, write one Markdown note per email and keep, delete or move the
source file.

Examples
--------
Convert one file next to its source:

    >>> from eml2md import convert_eml_file
    >>> result = convert_eml_file("inbox/invoice.eml")
    >>> result.note_path
    PosixPath('inbox/invoice.md')

Render a note without touching the file system:

    >>> markdown = convert_eml_to_markdown(raw_bytes)

"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from eml2md.constants import EML_EXTENSION, NOTE_EXTENSION
from eml2md.exceptions import Eml2MdError, FileError, FileNotFoundError, MalformedFileError, OutputWriteError
from eml2md.models import ParsedEmail
from eml2md.options.eml import EmlOptions
from eml2md.options.note import NoteOptions
from eml2md.parsers.eml import parse_eml
from eml2md.renderers.note import SavedAttachment, render_note
from eml2md.utils.attachments import ensure_unique_path, sanitize_attachment_filename
from eml2md.utils.decorators import debug_timer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one ``.eml`` file.

    Parameters
    ----------
    source_path : Path
        The input file
    note_path : Path or None
        The written note, None when the file was skipped
    attachments : tuple of Path
        Attachment files referenced by the note
    moved_eml_path : Path or None
        New location of the source when it was moved
    skipped : bool
        Whether the file was left alone
    skip_reason : str
        Why the file was skipped
    email : ParsedEmail or None
        The parsed email, None when skipped

    """

    source_path: Path
    note_path: Path | None = None
    attachments: tuple[Path, ...] = ()
    moved_eml_path: Path | None = None
    skipped: bool = False
    skip_reason: str = ""
    email: ParsedEmail | None = field(default=None, repr=False)


def _relative_target(path: Path, note_dir: Path) -> str:
    """Return ``path`` relative to the note folder with ``/`` separators."""
    return os.path.relpath(path, note_dir).replace(os.sep, "/")


def attachment_dir_for(note_dir: Path, options: NoteOptions) -> Path:
    """Return the attachments folder used for notes written to ``note_dir``."""
    return note_dir / options.attachment_dir


def is_in_attachment_dir(path: Path, options: NoteOptions, output_dir: Path | None = None) -> bool:
    """Whether ``path`` lives in an attachments folder.

    Source files moved there by a previous conversion must not be converted
    again. With an ``output_dir`` only its attachments folder counts. Without
    one, notes sit next to their sources, so any folder whose path ends with
    ``options.attachment_dir`` counts.
    """
    folder = path.parent.resolve()
    attachment_dir = Path(options.attachment_dir)
    if output_dir is not None or attachment_dir.is_absolute():
        note_dir = Path(output_dir) if output_dir is not None else path.parent
        return folder == attachment_dir_for(note_dir, options).resolve()
    return folder.parts[-len(attachment_dir.parts) :] == attachment_dir.parts


def read_email(path: Path, parse_options: EmlOptions | None = None) -> ParsedEmail:
    """Read and parse an ``.eml`` file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    FileError
        If the file cannot be read
    MalformedFileError
        If the multipart structure exceeds the parser limits

    """
    if not path.is_file():
        raise FileNotFoundError(str(path))
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FileError(f"Cannot read file: {path}", file_path=str(path), original_error=e) from e

    try:
        with debug_timer(logger, f"Parsing {path.name}"):
            email = parse_eml(raw, parse_options)
    except MalformedFileError as e:
        raise MalformedFileError(e.message, file_path=str(path), original_error=e) from e

    for diagnostic in email.diagnostics:
        location = f" (part {diagnostic.part_path})" if diagnostic.part_path else ""
        logger.info(f"{path.name}{location}: {diagnostic.message}")
    return email


def save_attachments(
    email: ParsedEmail,
    source_path: Path,
    note_dir: Path,
    options: NoteOptions,
) -> list[tuple[SavedAttachment, Path]]:
    """Write the attachments of ``email`` to the attachments folder.

    Files are named ``<source stem>_<sanitized filename>``. An existing file
    with that name is reused rather than overwritten. Attachments larger than
    ``options.max_attachment_size_bytes`` are skipped with a warning.

    Returns
    -------
    list of (SavedAttachment, Path)
        Stored attachments and their file paths, in email order

    Raises
    ------
    OutputWriteError
        If an attachment cannot be written

    """
    saved: list[tuple[SavedAttachment, Path]] = []
    if not email.attachments:
        return saved

    attachment_dir = attachment_dir_for(note_dir, options)
    for attachment in email.attachments:
        if attachment.size > options.max_attachment_size_bytes:
            logger.warning(
                f"Skipping attachment {attachment.filename!r}: {attachment.size} bytes exceeds "
                f"the limit of {options.max_attachment_size_bytes} bytes"
            )
            continue

        target = attachment_dir / f"{source_path.stem}_{sanitize_attachment_filename(attachment.filename)}"
        if target.exists():
            logger.debug(f"Attachment already exists, reusing {target}")
        else:
            try:
                attachment_dir.mkdir(parents=True, exist_ok=True)
                target.write_bytes(attachment.content)
            except OSError as e:
                raise OutputWriteError(str(target), original_error=e) from e
            logger.debug(f"Saved attachment {target} ({attachment.size} bytes)")

        saved.append(
            (
                SavedAttachment(
                    original_name=attachment.filename,
                    target=_relative_target(target, note_dir),
                    content_id=attachment.content_id,
                ),
                target,
            )
        )
    return saved


def _move_source(source_path: Path, destination: Path) -> None:
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source_path), str(destination))
    except OSError as e:
        raise OutputWriteError(str(destination), f"Failed to move {source_path} to {destination}", e) from e
    logger.debug(f"Moved {source_path} -> {destination}")


def _remove_note(note_path: Path) -> None:
    """Delete the note of a source that could not be moved."""
    try:
        note_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove {note_path} after a failed move: {e}")


def convert_eml_file(
    path: str | Path,
    output_dir: str | Path | None = None,
    options: NoteOptions | None = None,
    parse_options: EmlOptions | None = None,
) -> ConversionResult:
    """Convert one ``.eml`` file into a Markdown note.

    The note is written to ``<output_dir>/<stem>.md`` (``output_dir``
    defaults to the source folder). Conversion is skipped when the note
    already exists or when the source lives in the attachments folder.

    Parameters
    ----------
    path : str or Path
        Source ``.eml`` file
    output_dir : str, Path or None
        Folder receiving the note and the attachments folder
    options : NoteOptions or None
        Note and file handling options
    parse_options : EmlOptions or None
        Parser options

    Returns
    -------
    ConversionResult
        What was written, moved or skipped

    Raises
    ------
    FileNotFoundError
        If the source does not exist
    MalformedFileError
        If the email structure exceeds parser limits
    OutputWriteError
        If the note or an attachment cannot be written

    """
    options = options or NoteOptions()
    source_path = Path(path)
    output_path = Path(output_dir) if output_dir is not None else None
    note_dir = output_path or source_path.parent
    note_path = note_dir / f"{source_path.stem}{NOTE_EXTENSION}"

    if is_in_attachment_dir(source_path, options, output_path):
        logger.debug(f"Skipping {source_path}: file is in the attachments folder")
        return ConversionResult(source_path, skipped=True, skip_reason="source is in the attachments folder")
    if note_path.exists():
        logger.info(f"Skipping {source_path.name}: {note_path.name} already exists")
        return ConversionResult(source_path, skipped=True, skip_reason=f"{note_path} already exists")

    email = read_email(source_path, parse_options)
    saved = save_attachments(email, source_path, note_dir, options)

    moved_eml_path: Path | None = None
    moved_target: str | None = None
    if options.eml_handling == "move-to-attachments":
        moved_eml_path = ensure_unique_path(attachment_dir_for(note_dir, options) / source_path.name)
        moved_target = _relative_target(moved_eml_path, note_dir)

    # The source moves only after the note is written
    note = render_note(email, [item for item, _ in saved], options, moved_target)
    try:
        note_dir.mkdir(parents=True, exist_ok=True)
        note_path.write_text(note, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(str(note_path), original_error=e) from e

    if moved_eml_path is not None:
        try:
            _move_source(source_path, moved_eml_path)
        except OutputWriteError:
            _remove_note(note_path)
            raise

    if options.eml_handling == "delete":
        try:
            source_path.unlink()
        except OSError as e:
            raise FileError(f"Failed to delete {source_path}", file_path=str(source_path), original_error=e) from e
        logger.debug(f"Deleted {source_path}")

    logger.info(f"Converted {source_path.name} -> {note_path}")
    return ConversionResult(
        source_path=source_path,
        note_path=note_path,
        attachments=tuple(target for _, target in saved),
        moved_eml_path=moved_eml_path,
        email=email,
    )


def convert_eml_to_markdown(
    content: str | bytes,
    options: NoteOptions | None = None,
    parse_options: EmlOptions | None = None,
) -> str:
    """Render a raw email as a note without touching the file system.

    Attachments are not stored, so the note has no attachment list and
    ``cid:`` image references are left as they are.
    """
    email = parse_eml(content, parse_options)
    return render_note(email, (), options)


def find_eml_files(paths: Iterable[str | Path], recursive: bool = False) -> list[Path]:
    """Expand input paths into ``.eml`` files.

    Files are taken as given; folders contribute their ``.eml`` files
    (case-insensitive), descending into subfolders when ``recursive``.

    Raises
    ------
    FileNotFoundError
        If an input path does not exist

    """
    found: list[Path] = []
    seen: set[Path] = set()
    for item in paths:
        path = Path(item)
        if path.is_file():
            candidates = [path]
        elif path.is_dir():
            iterator = path.rglob("*") if recursive else path.glob("*")
            candidates = sorted(p for p in iterator if p.is_file() and p.suffix.lower() == EML_EXTENSION)
        else:
            raise FileNotFoundError(str(path))

        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                found.append(candidate)
    return found


def convert_paths(
    paths: Iterable[str | Path],
    recursive: bool = False,
    output_dir: str | Path | None = None,
    options: NoteOptions | None = None,
    parse_options: EmlOptions | None = None,
) -> tuple[list[ConversionResult], list[tuple[Path, Eml2MdError]]]:
    """Convert every ``.eml`` file found under ``paths``.

    A failing file does not stop the batch; its error is collected.

    Returns
    -------
    tuple
        ``(results, failures)`` where failures pairs each failed source
        with its error

    """
    results: list[ConversionResult] = []
    failures: list[tuple[Path, Eml2MdError]] = []
    for source in find_eml_files(paths, recursive=recursive):
        try:
            results.append(convert_eml_file(source, output_dir, options, parse_options))
        except Eml2MdError as e:
            logger.error(f"Failed to convert {source}: {e}")
            failures.append((source, e))
    return results, failures
