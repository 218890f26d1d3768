#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/parsers/eml.py
"""Raw email (EML) parser.

This module turns an RFC 5322 / MIME document into a :class:`ParsedEmail`.
Parsing is best effort: malformed input never raises, it yields a structure
with partial or empty fields and, when enabled, diagnostics describing what
was skipped. The only exceptions are a wrong input type and a multipart tree
nested deeper than ``EmlOptions.max_multipart_depth``.

"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field
from email.utils import parsedate_to_datetime

from eml2md.constants import (
    DIAG_INVALID_DATE,
    DIAG_MISSING_BOUNDARY,
    DIAG_MISSING_SEPARATOR,
    DIAG_PART_DROPPED,
    DIAG_PART_WITHOUT_HEADERS,
    FALLBACK_ATTACHMENT_NAME,
)
from eml2md.exceptions import MalformedFileError, ValidationError
from eml2md.mime.addresses import parse_address_list
from eml2md.mime.content_type import ContentInfo, inspect_content, strip_angle_brackets
from eml2md.mime.headers import parse_headers, split_header_block
from eml2md.mime.transfer import decode_bytes, decode_text
from eml2md.models import Attachment, ParsedEmail, ParseDiagnostic
from eml2md.options.eml import EmlOptions
from eml2md.utils.decorators import debug_timer

logger = logging.getLogger(__name__)


def _parse_date_safely(date_str: str | None) -> datetime.datetime | None:
    """Safely parse a date string, returning None if parsing fails.

    RFC 2822 dates are tried first, then ISO 8601.

    Parameters
    ----------
    date_str : str | None
        Date string to parse.

    Returns
    -------
    datetime.datetime | None
        Parsed datetime in UTC, or None if parsing fails.

    """
    if not date_str:
        return None

    try:
        parsed = parsedate_to_datetime(date_str)
    except (ValueError, TypeError, IndexError, OverflowError):
        try:
            parsed = datetime.datetime.fromisoformat(date_str.strip())
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=datetime.timezone.utc)
    try:
        return parsed.astimezone(datetime.timezone.utc)
    except OverflowError:
        return None


def _boundary_pattern(boundary: str) -> re.Pattern[str]:
    """Match a ``--boundary`` delimiter line, capturing the closing ``--``."""
    return re.compile(rf"^--{re.escape(boundary)}(--)?[ \t]*\r?$", re.MULTILINE)


def split_multipart_body(body: str, boundary: str) -> list[str]:
    """Split a multipart body into its raw part segments.

    The preamble before the first delimiter and the epilogue after the
    closing ``--boundary--`` delimiter are discarded. When the closing
    delimiter is missing the text after the last delimiter is kept as a part.

    Parameters
    ----------
    body : str
        Body of the multipart entity
    boundary : str
        Boundary token declared in its Content-Type

    Returns
    -------
    list[str]
        Segments in source order, untrimmed

    """
    delimiters = list(_boundary_pattern(boundary).finditer(body))
    segments: list[str] = []
    for index, delimiter in enumerate(delimiters):
        if delimiter.group(1):
            break
        end = delimiters[index + 1].start() if index + 1 < len(delimiters) else len(body)
        segments.append(body[delimiter.end() : end])
    return segments


@dataclass
class _ParseState:
    """Mutable accumulator used while walking one document."""

    text_body: str | None = None
    html_body: str | None = None
    attachments: list[Attachment] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] | None = field(default_factory=list)

    def note(self, code: str, message: str, part_path: str = "") -> None:
        if self.diagnostics is not None:
            self.diagnostics.append(ParseDiagnostic(code, message, part_path))


class EmlParser:
    """Parse raw email documents into :class:`ParsedEmail` objects.

    The parser holds no state between calls; one instance can be reused for
    any number of documents, from any number of threads.

    Parameters
    ----------
    options : EmlOptions or None
        Parsing options

    """

    def __init__(self, options: EmlOptions | None = None):
        """Initialize the EML parser with options."""
        if options is not None and not isinstance(options, EmlOptions):
            raise ValidationError(
                f"EmlParser expected options of type 'EmlOptions' but received '{type(options).__name__}'",
                parameter_name="options",
                parameter_value=type(options),
            )
        self.options: EmlOptions = options or EmlOptions()

    def parse(self, content: str | bytes) -> ParsedEmail:
        """Parse a raw email document.

        Parameters
        ----------
        content : str or bytes
            The complete document. Bytes are decoded as UTF-8, with
            replacement characters for invalid sequences.

        Returns
        -------
        ParsedEmail
            The structured email. A document without a blank line between
            headers and body yields an all-default result.

        Raises
        ------
        ValidationError
            If content is neither str nor bytes
        MalformedFileError
            If multipart nesting exceeds ``max_multipart_depth``

        """
        if isinstance(content, (bytes, bytearray)):
            content = bytes(content).decode("utf-8", errors="replace")
        elif not isinstance(content, str):
            raise ValidationError(
                f"Email content must be str or bytes, got {type(content).__name__}",
                parameter_name="content",
                parameter_value=type(content),
            )

        with debug_timer(logger, "Parsing email"):
            return self._parse_document(content)

    def _parse_document(self, content: str) -> ParsedEmail:
        state = _ParseState(diagnostics=[] if self.options.collect_diagnostics else None)

        split = split_header_block(content)
        if split is None:
            logger.debug("No blank line between headers and body, returning an empty email")
            state.note(DIAG_MISSING_SEPARATOR, "No blank line separates the headers from the body")
            return ParsedEmail(diagnostics=tuple(state.diagnostics or ()))

        header_block, body = split
        headers = parse_headers(header_block, state.diagnostics)

        date_header = headers.get("date")
        date = _parse_date_safely(date_header)
        if date is None and date_header:
            logger.debug(f"Could not parse Date header {date_header!r}")
            state.note(DIAG_INVALID_DATE, f"Unparseable Date header: {date_header!r}")

        info = inspect_content(headers)
        if info.is_multipart:
            self._walk_multipart(body, info, "", 1, state)
        else:
            self._consume_leaf(body, info, "", state, top_level=True)

        return ParsedEmail(
            from_=parse_address_list(headers.get("from")),
            to=parse_address_list(headers.get("to")),
            cc=parse_address_list(headers.get("cc")),
            bcc=parse_address_list(headers.get("bcc")),
            subject=headers.get("subject", ""),
            date=date,
            message_id=strip_angle_brackets(headers.get("message-id", "")),
            text_body=state.text_body or "",
            html_body=state.html_body or "",
            attachments=tuple(state.attachments),
            diagnostics=tuple(state.diagnostics or ()),
        )

    def _walk_multipart(self, body: str, info: ContentInfo, path: str, depth: int, state: _ParseState) -> None:
        if depth > self.options.max_multipart_depth:
            raise MalformedFileError(
                f"Multipart nesting exceeds the maximum depth of {self.options.max_multipart_depth}"
            )
        if not info.boundary:
            logger.debug(f"{info.mime_type} part {path or '<top>'} has no boundary, skipping its body")
            state.note(DIAG_MISSING_BOUNDARY, f"{info.mime_type} without a boundary parameter", path)
            return

        index = 0
        for segment in split_multipart_body(body, info.boundary):
            segment = segment.strip()
            if not segment or segment == "--":
                continue
            index += 1
            self._parse_part(segment, f"{path}.{index}" if path else str(index), depth, state)

    def _parse_part(self, text: str, path: str, depth: int, state: _ParseState) -> None:
        split = split_header_block(text)
        if split is None:
            logger.debug(f"Part {path} has no header block, skipping it")
            state.note(DIAG_PART_WITHOUT_HEADERS, "Part has no blank line after its headers", path)
            return

        header_block, body = split
        headers = parse_headers(header_block, state.diagnostics, path)
        info = inspect_content(headers)

        if info.is_multipart:
            self._walk_multipart(body, info, path, depth + 1, state)
        else:
            self._consume_leaf(body, info, path, state)

    def _consume_leaf(
        self, body: str, info: ContentInfo, path: str, state: _ParseState, top_level: bool = False
    ) -> None:
        """Route a non-multipart body into the text body, HTML body or attachments."""
        declared_attachment = bool(info.filename) or "attachment" in info.disposition.lower()

        if info.mime_type in ("text/plain", "text/html") and (top_level or not declared_attachment):
            decoded = decode_text(body, info.transfer_encoding, state.diagnostics, path)
            if info.mime_type == "text/plain":
                if state.text_body is None:
                    state.text_body = decoded
                else:
                    logger.debug(f"Ignoring additional text/plain part {path}")
            elif state.html_body is None:
                state.html_body = decoded
            else:
                logger.debug(f"Ignoring additional text/html part {path}")
            return

        if top_level and not self.options.capture_top_level_attachment:
            logger.debug(f"Dropping top-level {info.mime_type} body")
            state.note(DIAG_PART_DROPPED, f"Top-level {info.mime_type} body is not captured", path)
            return

        if not info.is_attachment:
            logger.debug(f"Dropping {info.mime_type} part {path} that is neither a body nor an attachment")
            state.note(DIAG_PART_DROPPED, f"{info.mime_type} part is neither a body nor an attachment", path)
            return

        filename = info.filename or FALLBACK_ATTACHMENT_NAME.format(index=len(state.attachments) + 1)
        state.attachments.append(
            Attachment(
                filename=filename,
                content_type=info.mime_type,
                content=decode_bytes(body, info.transfer_encoding),
                content_id=info.content_id,
            )
        )
        logger.debug(f"Collected attachment {filename!r} ({info.mime_type}) from part {path or '<top>'}")


def parse_eml(content: str | bytes, options: EmlOptions | None = None) -> ParsedEmail:
    """Parse a raw email document into a :class:`ParsedEmail`.

    Parameters
    ----------
    content : str or bytes
        The complete email document
    options : EmlOptions or None
        Parsing options

    Returns
    -------
    ParsedEmail
        The structured email

    Examples
    --------
        >>> email = parse_eml("Subject: =?UTF-8?B?SGVsbG8=?=\\n\\nBody")
        >>> email.subject, email.text_body
        ('Hello', 'Body')

    """
    return EmlParser(options).parse(content)
