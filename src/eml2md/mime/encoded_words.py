#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/mime/encoded_words.py
"""Decoding of RFC 2047 encoded words and ``=XX`` hex escapes.

Header text may carry non-ASCII content as encoded words of the form
``=?charset?B?payload?=`` (base64) or ``=?charset?Q?payload?=`` (quoted
word). The declared charset is accepted but decoding is always UTF-8.

The ``=XX`` expansion is shared with the quoted-printable transfer decoder.
Escapes are collected into a byte buffer before any text interpretation so
that multi-byte UTF-8 sequences split across consecutive escapes decode
correctly.

"""

from __future__ import annotations

import base64
import binascii
import logging
import re

from eml2md.constants import DIAG_MIME_WORD_FAILED
from eml2md.models import ParseDiagnostic

logger = logging.getLogger(__name__)

ENCODED_WORD_PATTERN = re.compile(r"=\?([^?\s]+)\?([BbQq])\?([^?]*)\?=")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_BASE64_BODY = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")


def expand_hex_escapes(text: str) -> bytes:
    """Expand ``=XX`` escapes in ``text`` into a byte sequence.

    Characters that are not part of a valid escape are copied through:
    ASCII characters as single bytes, anything else as its UTF-8 encoding.
    An ``=`` that is not followed by two hex digits is kept literally.

    Parameters
    ----------
    text : str
        Text containing ``=XX`` escapes

    Returns
    -------
    bytes
        The accumulated bytes

    Examples
    --------
        >>> expand_hex_escapes("caf=C3=A9")
        b'caf\\xc3\\xa9'

    """
    buffer = bytearray()
    length = len(text)
    i = 0
    while i < length:
        char = text[i]
        if char == "=" and i + 2 < length and _is_hex_pair(text, i + 1):
            buffer.append(int(text[i + 1 : i + 3], 16))
            i += 3
            continue
        code = ord(char)
        if code < 0x80:
            buffer.append(code)
        else:
            buffer.extend(char.encode("utf-8", errors="surrogatepass"))
        i += 1
    return bytes(buffer)


def _is_hex_pair(text: str, start: int) -> bool:
    return text[start] in _HEX_DIGITS and text[start + 1] in _HEX_DIGITS


def _decode_word_payload(encoding: str, payload: str) -> bytes:
    """Return the raw bytes carried by one encoded word.

    Raises
    ------
    ValueError
        If a base64 payload is not valid base64.

    """
    if encoding.upper() == "B":
        cleaned = payload.strip()
        if not _BASE64_BODY.match(cleaned) or len(cleaned.rstrip("=")) % 4 == 1:
            raise ValueError(f"invalid base64 payload: {payload!r}")
        cleaned = cleaned.rstrip("=")
        cleaned += "=" * (-len(cleaned) % 4)
        try:
            return base64.b64decode(cleaned, validate=True)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 payload: {payload!r}") from e
    return expand_hex_escapes(payload.replace("_", " "))


def decode_mime_words(
    text: str,
    diagnostics: list[ParseDiagnostic] | None = None,
    part_path: str = "",
) -> str:
    """Decode every RFC 2047 encoded word found in ``text``.

    Whitespace between two adjacent encoded words is removed, and the bytes
    of adjacent words are decoded together so that a character split across
    words survives. A word that cannot be decoded is left exactly as it
    appeared in the input.

    Parameters
    ----------
    text : str
        Header text that may contain encoded words
    diagnostics : list of ParseDiagnostic, optional
        Receives a ``mime-word-decode-failed`` entry per undecodable word
    part_path : str, default ""
        Part path recorded on diagnostics

    Returns
    -------
    str
        Decoded text

    Examples
    --------
        >>> decode_mime_words("=?UTF-8?B?SGVsbG8=?=")
        'Hello'
        >>> decode_mime_words("=?utf-8?Q?caf=C3=A9_au_lait?=")
        'café au lait'

    """
    if "=?" not in text:
        return text

    pieces: list[str] = []
    pending = bytearray()
    position = 0
    previous_decoded = False

    for match in ENCODED_WORD_PATTERN.finditer(text):
        gap = text[position : match.start()]
        try:
            raw = _decode_word_payload(match.group(2), match.group(3))
        except ValueError as e:
            logger.debug(f"Leaving undecodable MIME word {match.group(0)!r} as is: {e}")
            if diagnostics is not None:
                diagnostics.append(
                    ParseDiagnostic(DIAG_MIME_WORD_FAILED, f"Could not decode MIME word {match.group(0)!r}", part_path)
                )
            _flush(pieces, pending)
            pieces.append(gap)
            pieces.append(match.group(0))
            previous_decoded = False
        else:
            if not (previous_decoded and not gap.strip()):
                _flush(pieces, pending)
                pieces.append(gap)
            pending.extend(raw)
            previous_decoded = True
        position = match.end()

    _flush(pieces, pending)
    pieces.append(text[position:])
    return "".join(pieces)


def _flush(pieces: list[str], pending: bytearray) -> None:
    if pending:
        pieces.append(pending.decode("utf-8", errors="replace"))
        pending.clear()
