#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/mime/content_type.py
"""Extraction of content metadata from part headers."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import unquote

from eml2md.constants import DEFAULT_CHARSET, DEFAULT_CONTENT_TYPE, DEFAULT_TRANSFER_ENCODING
from eml2md.mime.encoded_words import decode_mime_words

_BOUNDARY_PATTERN = re.compile(r"""boundary\s*=\s*"?([^";]+)"?""", re.IGNORECASE)
_CHARSET_PATTERN = re.compile(r"""charset\s*=\s*"?([^";]+)"?""", re.IGNORECASE)
_FILENAME_PATTERN = re.compile(
    r"""filename\*?\s*=\s*(?:[\w!#$%&+^`{}~-]*'[\w-]*')?["']?([^"';\r\n]+)["']?""",
    re.IGNORECASE,
)
_NAME_PATTERN = re.compile(r"""(?:^|[;\s])name\s*=\s*"?([^";]+)"?""", re.IGNORECASE)
_ANGLE_BRACKETS = re.compile(r"[<>]")


@dataclass(frozen=True)
class ContentInfo:
    """Content metadata of a single MIME part.

    Parameters
    ----------
    mime_type : str
        Lower-cased media type without parameters (``text/plain`` by default)
    boundary : str or None
        Multipart boundary token
    charset : str
        Declared charset; informational only, bodies are decoded as UTF-8
    transfer_encoding : str
        Lower-cased Content-Transfer-Encoding (``7bit`` by default)
    disposition : str
        Raw Content-Disposition value
    filename : str or None
        Decoded filename from Content-Disposition or Content-Type ``name``
    content_id : str or None
        Content-ID with angle brackets removed

    """

    mime_type: str = DEFAULT_CONTENT_TYPE
    boundary: str | None = None
    charset: str = DEFAULT_CHARSET
    transfer_encoding: str = DEFAULT_TRANSFER_ENCODING
    disposition: str = ""
    filename: str | None = None
    content_id: str | None = None

    @property
    def is_multipart(self) -> bool:
        return self.mime_type.startswith("multipart/")

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    @property
    def is_attachment(self) -> bool:
        """Whether the part counts as an attachment.

        True when the part declares a filename, its disposition mentions
        ``attachment``, or its type is neither ``text/*`` nor ``multipart/*``.
        """
        if self.filename:
            return True
        if "attachment" in self.disposition.lower():
            return True
        return not self.is_text and not self.is_multipart


def get_mime_type(content_type: str) -> str:
    """Return the media type of a Content-Type value, lower-cased."""
    mime_type = content_type.split(";", 1)[0].strip().lower()
    return mime_type or DEFAULT_CONTENT_TYPE


def extract_boundary(content_type: str) -> str | None:
    """Return the ``boundary`` parameter of a Content-Type value."""
    match = _BOUNDARY_PATTERN.search(content_type)
    if match is None:
        return None
    return match.group(1).strip() or None


def extract_charset(content_type: str) -> str:
    """Return the ``charset`` parameter of a Content-Type value, ``utf-8`` if absent."""
    match = _CHARSET_PATTERN.search(content_type)
    if match is None:
        return DEFAULT_CHARSET
    return match.group(1).strip().lower() or DEFAULT_CHARSET


def extract_filename(headers: Mapping[str, str]) -> str | None:
    """Return the part filename.

    ``Content-Disposition``'s ``filename``/``filename*`` parameter is tried
    first; an RFC 2231 ``charset'lang'`` prefix is skipped and the value is
    percent-decoded, then MIME-word decoded. The fallback is the ``name``
    parameter of ``Content-Type``.
    """
    match = _FILENAME_PATTERN.search(headers.get("content-disposition", ""))
    if match is not None:
        filename = decode_mime_words(unquote(match.group(1).strip())).strip()
        if filename:
            return filename

    match = _NAME_PATTERN.search(headers.get("content-type", ""))
    if match is not None:
        name = match.group(1).strip()
        if name:
            return name
    return None


def strip_angle_brackets(value: str) -> str:
    """Remove every ``<`` and ``>`` from an identifier header value."""
    return _ANGLE_BRACKETS.sub("", value).strip()


def inspect_content(headers: Mapping[str, str]) -> ContentInfo:
    """Collect the content metadata of a part from its headers.

    Parameters
    ----------
    headers : Mapping[str, str]
        Lower-cased header names to decoded values

    Returns
    -------
    ContentInfo
        Metadata with defaults applied

    """
    content_type = headers.get("content-type", "")
    encoding = headers.get("content-transfer-encoding", "").strip().lower()
    content_id = strip_angle_brackets(headers.get("content-id", "")) or None

    return ContentInfo(
        mime_type=get_mime_type(content_type),
        boundary=extract_boundary(content_type),
        charset=extract_charset(content_type),
        transfer_encoding=encoding or DEFAULT_TRANSFER_ENCODING,
        disposition=headers.get("content-disposition", ""),
        filename=extract_filename(headers),
        content_id=content_id,
    )
