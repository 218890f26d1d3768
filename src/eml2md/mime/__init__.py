#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Low-level MIME building blocks used by the email parser."""

from __future__ import annotations

from eml2md.mime.addresses import (
    format_address,
    format_addresses,
    parse_address,
    parse_address_list,
    split_address_list,
)
from eml2md.mime.content_type import ContentInfo, inspect_content
from eml2md.mime.encoded_words import decode_mime_words, expand_hex_escapes
from eml2md.mime.headers import HeaderMap, parse_headers, split_header_block
from eml2md.mime.transfer import decode_bytes, decode_text

__all__ = [
    "ContentInfo",
    "HeaderMap",
    "decode_bytes",
    "decode_mime_words",
    "decode_text",
    "expand_hex_escapes",
    "format_address",
    "format_addresses",
    "inspect_content",
    "parse_address",
    "parse_address_list",
    "parse_headers",
    "split_address_list",
    "split_header_block",
]
