#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/utils/html_sanitizer.py
"""Sanitization utilities for untrusted email HTML.

Links and images extracted from email HTML are only kept when their URL
starts with an allow-listed prefix. Everything else (``javascript:``,
``data:``, ``file:``, relative paths) is rejected.
"""

from __future__ import annotations

import logging

from eml2md.constants import INVISIBLE_CHARACTERS, SAFE_URL_PREFIXES

logger = logging.getLogger(__name__)

_INVISIBLE_TRANSLATION = {ord(char): None for char in INVISIBLE_CHARACTERS}


def is_url_safe(url: str | None) -> bool:
    """Check whether a URL uses an allow-listed prefix.

    The check is a case-insensitive prefix match after trimming surrounding
    whitespace. Allowed prefixes are ``http://``, ``https://``, ``mailto:``
    and ``cid:``.

    Parameters
    ----------
    url : str or None
        URL to validate

    Returns
    -------
    bool
        True if the URL may be emitted

    Examples
    --------
    >>> is_url_safe("https://example.com")
    True

    >>> is_url_safe("cid:img1")
    True

    >>> is_url_safe("javascript:alert(1)")
    False

    >>> is_url_safe("data:text/html,<script>alert('xss')</script>")
    False

    """
    if not url:
        return False
    return url.strip().lower().startswith(SAFE_URL_PREFIXES)


def sanitize_url(url: str | None) -> str:
    """Return the trimmed URL if it is safe, otherwise an empty string.

    Examples
    --------
    >>> sanitize_url("  mailto:a@b.com ")
    'mailto:a@b.com'

    >>> sanitize_url("file:///etc/passwd")
    ''

    """
    if not is_url_safe(url):
        if url:
            logger.debug(f"Dropping URL with a disallowed scheme: {url!r:.80}")
        return ""
    return url.strip()  # type: ignore[union-attr]


def sanitize_null_bytes(content: str) -> str:
    r"""Remove null bytes and zero-width characters.

    These characters can hide markup from later processing steps, so they
    are removed before HTML is tokenised.

    Removed characters:
    - \\x00 (NULL byte)
    - \\ufeff (BOM/Zero Width No-Break Space)
    - \\u200b (Zero Width Space)
    - \\u200c (Zero Width Non-Joiner)
    - \\u200d (Zero Width Joiner)
    - \\u2060 (Word Joiner)

    Examples
    --------
    >>> sanitize_null_bytes("Hello\\x00World")
    'HelloWorld'

    """
    return content.translate(_INVISIBLE_TRANSLATION)
