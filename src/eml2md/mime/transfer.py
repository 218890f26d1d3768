#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/mime/transfer.py
"""Content-Transfer-Encoding decoding.

Each encoding has a text mode, used for message bodies, and a binary mode,
used for attachments. Both modes share the same byte-level decoding and only
differ in whether the bytes are finally interpreted as UTF-8.

"""

from __future__ import annotations

import base64
import logging
import re

from eml2md.constants import DIAG_TRANSFER_DECODE_FAILED
from eml2md.mime.encoded_words import expand_hex_escapes
from eml2md.models import ParseDiagnostic

logger = logging.getLogger(__name__)

BASE64 = "base64"
QUOTED_PRINTABLE = "quoted-printable"

_WHITESPACE = re.compile(r"\s+")
_NON_BASE64 = re.compile(r"[^A-Za-z0-9+/]")
_STRICT_BASE64 = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_SOFT_LINE_BREAK = re.compile(r"=\r?\n")


def decode_base64_bytes(payload: str) -> bytes:
    """Decode base64 leniently, ignoring characters outside the alphabet."""
    cleaned = _NON_BASE64.sub("", payload)
    remainder = len(cleaned) % 4
    if remainder == 1:
        # A single trailing sextet cannot carry a whole byte
        cleaned = cleaned[:-1]
    elif remainder:
        cleaned += "=" * (4 - remainder)
    return base64.b64decode(cleaned)


def decode_quoted_printable_bytes(payload: str) -> bytes:
    """Remove soft line breaks and expand ``=XX`` escapes into bytes."""
    return expand_hex_escapes(_SOFT_LINE_BREAK.sub("", payload))


def identity_bytes(payload: str) -> bytes:
    """Convert text to bytes one byte per character (the legacy ``binary`` mapping)."""
    try:
        return payload.encode("latin-1")
    except UnicodeEncodeError:
        return bytes(ord(char) & 0xFF for char in payload)


def decode_bytes(payload: str, encoding: str) -> bytes:
    """Decode a part body into raw bytes.

    Parameters
    ----------
    payload : str
        Encoded body text
    encoding : str
        Content-Transfer-Encoding; anything other than ``base64`` or
        ``quoted-printable`` is treated as identity

    Returns
    -------
    bytes
        Decoded bytes

    """
    encoding = encoding.strip().lower()
    if encoding == BASE64:
        return decode_base64_bytes(payload)
    if encoding == QUOTED_PRINTABLE:
        return decode_quoted_printable_bytes(payload)
    return identity_bytes(payload)


def decode_text(
    payload: str,
    encoding: str,
    diagnostics: list[ParseDiagnostic] | None = None,
    part_path: str = "",
) -> str:
    """Decode a part body into text.

    Decoded bytes are interpreted as UTF-8 with replacement characters for
    invalid sequences. Malformed base64 leaves the payload unchanged and
    records a ``transfer-decode-failed`` diagnostic.

    Parameters
    ----------
    payload : str
        Encoded body text
    encoding : str
        Content-Transfer-Encoding
    diagnostics : list of ParseDiagnostic, optional
        Receives decode anomalies
    part_path : str, default ""
        Part path recorded on diagnostics

    Returns
    -------
    str
        Decoded text

    """
    encoding = encoding.strip().lower()
    if encoding == BASE64:
        cleaned = _WHITESPACE.sub("", payload)
        if not _STRICT_BASE64.match(cleaned) or len(cleaned.rstrip("=")) % 4 == 1:
            logger.debug("Base64 body at part %r is malformed, keeping it undecoded", part_path or "<top>")
            if diagnostics is not None:
                diagnostics.append(
                    ParseDiagnostic(DIAG_TRANSFER_DECODE_FAILED, "Malformed base64 body left undecoded", part_path)
                )
            return payload
        return decode_base64_bytes(cleaned).decode("utf-8", errors="replace")
    if encoding == QUOTED_PRINTABLE:
        return decode_quoted_printable_bytes(payload).decode("utf-8", errors="replace")
    return payload
