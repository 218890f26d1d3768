#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/mime/addresses.py
"""Parsing and formatting of address headers (From, To, Cc, Bcc)."""

from __future__ import annotations

import re
from collections.abc import Iterable

from eml2md.models import EmailAddress

_NAME_ADDR_PATTERN = re.compile(
    r"""^(?:"(?P<quoted>(?:[^"\\]|\\.)*)"|(?P<bare>[^"<]*?))\s*<(?P<address>[^>]+)>$""",
    re.DOTALL,
)
_QUOTED_PAIR_PATTERN = re.compile(r"\\(.)", re.DOTALL)


def split_address_list(value: str) -> list[str]:
    """Split an address header value at top-level commas.

    A comma separates addresses only outside double quotes and outside
    angle brackets. A quote preceded by a backslash does not toggle the
    quoted state. Empty segments are dropped.

    Examples
    --------
        >>> split_address_list('"Doe, John" <john@x.com>, jane@y.com')
        ['"Doe, John" <john@x.com>', 'jane@y.com']

    """
    segments: list[str] = []
    current: list[str] = []
    in_quotes = False
    in_brackets = False
    previous = ""

    for char in value:
        if char == '"' and previous != "\\":
            in_quotes = not in_quotes
        elif char == "<" and not in_quotes:
            in_brackets = True
        elif char == ">" and not in_quotes:
            in_brackets = False
        elif char == "," and not in_quotes and not in_brackets:
            segment = "".join(current).strip()
            if segment:
                segments.append(segment)
            current = []
            previous = char
            continue
        current.append(char)
        # An escaped backslash must not escape the following quote
        previous = "" if char == "\\" and previous == "\\" else char

    segment = "".join(current).strip()
    if segment:
        segments.append(segment)
    return segments


def parse_address(text: str) -> EmailAddress:
    """Parse a single ``Name <address>`` or bare ``address`` string.

    Examples
    --------
        >>> parse_address('"Doe, John" <john@x.com>')
        EmailAddress(name='Doe, John', address='john@x.com')
        >>> parse_address("jane@y.com")
        EmailAddress(name='', address='jane@y.com')

    """
    text = text.strip()
    match = _NAME_ADDR_PATTERN.match(text)
    if match is None:
        return EmailAddress(name="", address=text)

    quoted = match.group("quoted")
    if quoted is not None:
        name = _QUOTED_PAIR_PATTERN.sub(r"\1", quoted).strip()
    else:
        name = match.group("bare").strip()
    return EmailAddress(name=name, address=match.group("address").strip())


def parse_address_list(value: str | None) -> tuple[EmailAddress, ...]:
    """Parse an address header value into addresses in source order."""
    if not value:
        return ()
    return tuple(parse_address(segment) for segment in split_address_list(value))


def format_address(address: EmailAddress) -> str:
    """Format an address as ``Name <address>``, or just the address without a name."""
    if address.name:
        return f"{address.name} <{address.address}>"
    return address.address


def format_addresses(addresses: Iterable[EmailAddress]) -> str:
    """Format several addresses joined by ``", "``."""
    return ", ".join(format_address(address) for address in addresses)
