#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/mime/headers.py
"""Header block splitting, unfolding and lookup."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping

from eml2md.mime.encoded_words import decode_mime_words
from eml2md.models import ParseDiagnostic

HEADER_SEPARATOR_PATTERN = re.compile(r"\r?\n\r?\n")
_FOLD_PATTERN = re.compile(r"\r?\n[\t ]+")
_LINE_PATTERN = re.compile(r"\r?\n")


class HeaderMap(Mapping[str, str]):
    """Ordered, case-insensitive, multi-value header mapping.

    Mapping access (``headers["Subject"]``, ``headers.get("subject")``)
    returns the LAST value seen for a name, so a repeated header overrides
    earlier occurrences. Every value is still kept and can be read in source
    order with :meth:`get_all`.

    Parameters
    ----------
    items : iterable of (str, str), optional
        Initial ``(name, value)`` pairs in source order

    Examples
    --------
        >>> headers = HeaderMap([("Received", "a"), ("received", "b")])
        >>> headers["RECEIVED"]
        'b'
        >>> headers.get_all("Received")
        ['a', 'b']

    """

    def __init__(self, items: Iterable[tuple[str, str]] = ()):
        self._values: dict[str, list[str]] = {}
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        """Append a value for ``name`` (case-insensitive)."""
        self._values.setdefault(name.strip().lower(), []).append(value)

    def __getitem__(self, name: str) -> str:
        return self._values[name.lower()][-1]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get_all(self, name: str) -> list[str]:
        """Return every value for ``name`` in source order (empty if absent)."""
        return list(self._values.get(name.lower(), ()))

    def __repr__(self) -> str:
        return f"HeaderMap({[(name, value) for name, values in self._values.items() for value in values]!r})"


def split_header_block(text: str) -> tuple[str, str] | None:
    """Split a document or part into its header block and body.

    The split happens at the first blank line, with ``\\n`` or ``\\r\\n``
    line endings.

    Returns
    -------
    tuple of (str, str) or None
        ``(header_block, body)``, or None when there is no blank line

    """
    match = HEADER_SEPARATOR_PATTERN.search(text)
    if match is None:
        return None
    return text[: match.start()], text[match.end() :]


def unfold_headers(header_block: str) -> str:
    """Join continuation lines onto the previous line with a single space."""
    return _FOLD_PATTERN.sub(" ", header_block)


def parse_headers(
    header_block: str,
    diagnostics: list[ParseDiagnostic] | None = None,
    part_path: str = "",
) -> HeaderMap:
    """Parse a raw header block into a :class:`HeaderMap`.

    Each logical line is split at its first colon. Names are trimmed and
    lower-cased; values are trimmed and MIME-word decoded. Lines without a
    colon, or starting with one, are ignored.

    Parameters
    ----------
    header_block : str
        Header text up to (not including) the blank separator line
    diagnostics : list of ParseDiagnostic, optional
        Receives decode anomalies
    part_path : str, default ""
        Part path recorded on diagnostics

    Returns
    -------
    HeaderMap
        Parsed headers

    """
    headers = HeaderMap()
    for line in _LINE_PATTERN.split(unfold_headers(header_block)):
        colon = line.find(":")
        if colon <= 0:
            continue
        name = line[:colon].strip().lower()
        if not name:
            continue
        value = decode_mime_words(line[colon + 1 :].strip(), diagnostics, part_path)
        headers.add(name, value)
    return headers
