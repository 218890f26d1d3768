#  Copyright (c) 2025 Tom Villani, Ph.D.
"""eml2md - convert raw email documents into Markdown notes.

The package has three layers:

- :func:`parse_eml` turns an RFC 5322 / MIME document into an immutable
  :class:`ParsedEmail` without raising on malformed content.
- :func:`html_to_markdown` and :func:`html_to_plain_text` convert untrusted
  email HTML, keeping only allow-listed link and image URLs.
- :func:`convert_eml_file` writes a Markdown note plus attachments for an
  ``.eml`` file on disk.

Examples
--------
    >>> from eml2md import parse_eml, html_to_markdown
    >>> email = parse_eml(raw_message)
    >>> email.subject
    'Quarterly report'
    >>> html_to_markdown(email.html_body)
    '# Results\\n\\nSee the **attached** file.'

"""

from __future__ import annotations

__version__ = "1.0.0"

from eml2md.api import ConversionResult, convert_eml_file, convert_eml_to_markdown, convert_paths, find_eml_files
from eml2md.converters.html2markdown import html_to_markdown, html_to_plain_text
from eml2md.exceptions import (
    DependencyError,
    Eml2MdError,
    FileError,
    FileNotFoundError,
    MalformedFileError,
    OutputWriteError,
    ValidationError,
)
from eml2md.mime.addresses import format_address, format_addresses
from eml2md.models import Attachment, EmailAddress, ParsedEmail, ParseDiagnostic
from eml2md.options import EmlOptions, NoteOptions
from eml2md.parsers.eml import EmlParser, parse_eml
from eml2md.renderers.note import NoteRenderer, SavedAttachment, render_note
from eml2md.utils.html_sanitizer import is_url_safe, sanitize_url

__all__ = [
    "__version__",
    # Parsing
    "parse_eml",
    "EmlParser",
    "EmlOptions",
    # Data model
    "Attachment",
    "EmailAddress",
    "ParsedEmail",
    "ParseDiagnostic",
    "format_address",
    "format_addresses",
    # HTML conversion
    "html_to_markdown",
    "html_to_plain_text",
    "is_url_safe",
    "sanitize_url",
    # Notes and files
    "NoteOptions",
    "NoteRenderer",
    "SavedAttachment",
    "render_note",
    "ConversionResult",
    "convert_eml_file",
    "convert_eml_to_markdown",
    "convert_paths",
    "find_eml_files",
    # Exceptions
    "Eml2MdError",
    "ValidationError",
    "FileError",
    "FileNotFoundError",
    "MalformedFileError",
    "OutputWriteError",
    "DependencyError",
]
