#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/utils/attachments.py
"""Filename handling for attachments written next to generated notes."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from eml2md.constants import IMAGE_EXTENSIONS, MAX_ATTACHMENT_FILENAME_LENGTH
from eml2md.exceptions import OutputWriteError

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_WHITESPACE = re.compile(r"\s+")
_REPEATED_UNDERSCORES = re.compile(r"_+")


def sanitize_attachment_filename(filename: str, max_length: int = MAX_ATTACHMENT_FILENAME_LENGTH) -> str:
    """Make an attachment filename safe for the file system.

    Path separators, characters reserved on Windows and control characters
    become ``_``, runs of whitespace become ``_``, repeated underscores are
    squeezed and the result is cut to ``max_length`` characters.

    Parameters
    ----------
    filename : str
        Filename declared by the email
    max_length : int, default 200
        Maximum length of the result

    Returns
    -------
    str
        Sanitized filename, never empty

    Examples
    --------
    >>> sanitize_attachment_filename('Q3 report: "final".pdf')
    'Q3_report_final_.pdf'
    >>> sanitize_attachment_filename("../../etc/passwd")
    '.._.._etc_passwd'

    """
    sanitized = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    sanitized = _WHITESPACE.sub("_", sanitized)
    sanitized = _REPEATED_UNDERSCORES.sub("_", sanitized)
    sanitized = sanitized[:max_length]
    if not sanitized.strip("._"):
        sanitized = "attachment"
    return sanitized


def is_image_filename(filename: str) -> bool:
    """Whether the extension of ``filename`` is one embedded as an image in notes."""
    return Path(filename).suffix.lower().lstrip(".") in IMAGE_EXTENSIONS


def ensure_unique_path(base_path: Path, max_attempts: int = 1000) -> Path:
    """Return ``base_path`` or the first free ``<stem>_<n><suffix>`` sibling.

    Uses plain existence checks, so it is meant for single-process use.

    Parameters
    ----------
    base_path : Path
        Desired path
    max_attempts : int, default 1000
        Maximum number of suffixes to try

    Returns
    -------
    Path
        A path that does not exist yet

    Raises
    ------
    OutputWriteError
        If no free path was found within max_attempts

    Examples
    --------
    >>> # If report.eml exists, returns report_1.eml
    >>> ensure_unique_path(Path("./attachments/report.eml"))
    Path('./attachments/report_1.eml')

    """
    if not base_path.exists():
        return base_path

    for counter in range(1, max_attempts + 1):
        candidate = base_path.with_name(f"{base_path.stem}_{counter}{base_path.suffix}")
        if not candidate.exists():
            logger.debug(f"Resolved path collision: {base_path.name} -> {candidate.name}")
            return candidate

    raise OutputWriteError(
        str(base_path), f"Could not find a free path for {base_path} after {max_attempts} attempts"
    )
