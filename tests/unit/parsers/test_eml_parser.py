#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/parsers/test_eml_parser.py
"""Unit tests for the raw email parser.

Tests cover:
- Header extraction (addresses, subject, date, Message-ID)
- Single-part and nested multipart bodies
- Attachment classification and Content-ID handling
- Boundary delimiter handling (preamble, epilogue, missing closing delimiter)
- Diagnostics for malformed input
- Input validation and nesting limits

"""

import datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st
from utils import MINIMAL_PNG_BYTES, build_mixed_email, build_nested_email, build_simple_email

from eml2md.constants import (
    DIAG_INVALID_DATE,
    DIAG_MISSING_BOUNDARY,
    DIAG_MISSING_SEPARATOR,
    DIAG_PART_DROPPED,
    DIAG_PART_WITHOUT_HEADERS,
)
from eml2md.exceptions import MalformedFileError, ValidationError
from eml2md.mime.headers import split_header_block
from eml2md.models import EmailAddress, ParsedEmail
from eml2md.options import EmlOptions
from eml2md.parsers.eml import EmlParser, parse_eml, split_multipart_body

UTC = datetime.timezone.utc


def _multipart(*parts: str, boundary: str = "b", preamble: str = "", closing: bool = True) -> str:
    """Assemble a multipart/mixed email from raw part texts."""
    lines = ["Subject: parts", f'Content-Type: multipart/mixed; boundary="{boundary}"', ""]
    if preamble:
        lines.append(preamble)
    for part in parts:
        lines.append(f"--{boundary}")
        lines.append(part)
    if closing:
        lines.append(f"--{boundary}--")
    return "\n".join(lines)


@pytest.mark.unit
class TestHeaders:
    """Tests for top-level header extraction."""

    def test_simple_email_fields(self, simple_email: str) -> None:
        email = parse_eml(simple_email)
        assert email.from_ == (EmailAddress("Alice Example", "alice@example.com"),)
        assert email.to == (EmailAddress("", "bob@example.com"),)
        assert email.cc == ()
        assert email.bcc == ()
        assert email.subject == "Test Subject"
        assert email.date == datetime.datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        assert email.message_id == "msg-001@example.com"
        assert email.text_body == "Hello there."
        assert email.html_body == ""
        assert email.attachments == ()
        assert email.diagnostics == ()

    def test_encoded_subject(self) -> None:
        email = parse_eml("Subject: =?UTF-8?B?SGVsbG8=?=\n\nBody")
        assert email.subject == "Hello"
        assert email.text_body == "Body"

    def test_repeated_header_last_wins(self) -> None:
        email = parse_eml("Subject: first\nSubject: second\n\nBody")
        assert email.subject == "second"

    def test_date_is_normalized_to_utc(self) -> None:
        email = parse_eml("Date: Tue, 16 Jan 2024 08:00:00 -0500\n\nBody")
        assert email.date == datetime.datetime(2024, 1, 16, 13, 0, tzinfo=UTC)

    def test_iso_date_fallback(self) -> None:
        email = parse_eml("Date: 2024-01-15T10:30:00\n\nBody")
        assert email.date == datetime.datetime(2024, 1, 15, 10, 30, tzinfo=UTC)

    def test_invalid_date(self) -> None:
        email = parse_eml("Date: not a date\n\nBody")
        assert email.date is None
        assert [d.code for d in email.diagnostics] == [DIAG_INVALID_DATE]

    def test_missing_date_has_no_diagnostic(self) -> None:
        email = parse_eml("Subject: x\n\nBody")
        assert email.date is None
        assert email.diagnostics == ()

    def test_missing_separator_yields_empty_email(self) -> None:
        email = parse_eml("Subject: x\nFrom: a@b.com")
        assert email.subject == ""
        assert email.from_ == ()
        assert email.text_body == ""
        assert [d.code for d in email.diagnostics] == [DIAG_MISSING_SEPARATOR]

    def test_diagnostics_can_be_disabled(self) -> None:
        email = parse_eml("Subject: x", EmlOptions(collect_diagnostics=False))
        assert email.diagnostics == ()


@pytest.mark.unit
class TestSinglePartBodies:
    """Tests for non-multipart documents."""

    def test_html_body(self) -> None:
        email = parse_eml(build_simple_email("<p>Hi</p>", content_type="text/html"))
        assert email.html_body == "<p>Hi</p>"
        assert email.text_body == ""

    def test_default_content_type_is_text_plain(self) -> None:
        email = parse_eml("Subject: x\n\nJust text")
        assert email.text_body == "Just text"

    def test_base64_body(self) -> None:
        email = parse_eml(build_simple_email("SGVsbG8gd29ybGQ=", encoding="base64"))
        assert email.text_body == "Hello world"

    def test_quoted_printable_body(self) -> None:
        email = parse_eml(build_simple_email("Caf=C3=A9 =\r\nmenu", encoding="quoted-printable"))
        assert email.text_body == "Café menu"

    def test_top_level_binary_is_dropped_by_default(self) -> None:
        email = parse_eml("Content-Type: application/pdf\n\n%PDF-1.4")
        assert email.attachments == ()
        assert [d.code for d in email.diagnostics] == [DIAG_PART_DROPPED]

    def test_top_level_binary_can_be_captured(self) -> None:
        email = parse_eml("Content-Type: application/pdf\n\n%PDF-1.4", EmlOptions(capture_top_level_attachment=True))
        assert len(email.attachments) == 1
        attachment = email.attachments[0]
        assert attachment.filename == "attachment_1"
        assert attachment.content_type == "application/pdf"
        assert attachment.content == b"%PDF-1.4"


@pytest.mark.unit
class TestMultipart:
    """Tests for multipart documents."""

    @pytest.mark.parametrize("newline", ["\r\n", "\n"])
    def test_mixed_email(self, newline: str) -> None:
        email = parse_eml(build_mixed_email(newline=newline))

        assert email.subject == "Hello world"
        assert email.from_ == (EmailAddress("Doe, John", "john@example.com"),)
        assert email.to == (EmailAddress("", "jane@example.com"), EmailAddress("Smith, Bob", "bob@example.com"))
        assert email.cc == (EmailAddress("", "carol@example.com"),)
        assert email.text_body == "Café menu is attached."
        assert email.html_body == '<p>Café menu is <b>attached</b>.</p><img src="cid:logo123" alt="Logo">'
        assert email.diagnostics == ()

        assert len(email.attachments) == 1
        attachment = email.attachments[0]
        assert attachment.filename == "logo.png"
        assert attachment.content_type == "image/png"
        assert attachment.content_id == "logo123"
        assert attachment.content == MINIMAL_PNG_BYTES
        assert email.find_attachment_by_content_id("logo123") is attachment
        assert email.find_attachment_by_content_id("missing") is None

    def test_first_text_part_wins(self) -> None:
        email = parse_eml(
            _multipart(
                "Content-Type: text/plain\n\nfirst",
                "Content-Type: text/plain\n\nsecond",
                "Content-Type: text/html\n\n<p>one</p>",
                "Content-Type: text/html\n\n<p>two</p>",
            )
        )
        assert email.text_body == "first"
        assert email.html_body == "<p>one</p>"

    def test_preamble_and_epilogue_are_ignored(self) -> None:
        raw = _multipart("Content-Type: text/plain\n\nbody", preamble="This is a MIME message.")
        raw += "\n--b\nContent-Type: text/html\n\n<p>after closing</p>"
        email = parse_eml(raw)
        assert email.text_body == "body"
        assert email.html_body == ""

    def test_missing_closing_delimiter_keeps_last_part(self) -> None:
        email = parse_eml(_multipart("Content-Type: text/plain\n\nbody text", closing=False))
        assert email.text_body == "body text"

    def test_boundary_prefix_is_not_a_delimiter(self) -> None:
        raw = _multipart("Content-Type: text/plain\n\nline\n--bb not a delimiter\nmore")
        assert parse_eml(raw).text_body == "line\n--bb not a delimiter\nmore"

    def test_nested_text_with_filename_is_an_attachment(self) -> None:
        email = parse_eml(
            _multipart(
                "Content-Type: text/plain\n\nbody",
                'Content-Type: text/plain; name="notes.txt"\nContent-Disposition: attachment; filename="notes.txt"\n\nhello',
            )
        )
        assert email.text_body == "body"
        assert [(a.filename, a.content) for a in email.attachments] == [("notes.txt", b"hello")]

    def test_unnamed_attachment_gets_fallback_name(self) -> None:
        email = parse_eml(
            _multipart(
                "Content-Type: application/octet-stream\nContent-Transfer-Encoding: base64\n\nAAEC",
                "Content-Type: application/octet-stream\n\nraw",
            )
        )
        assert [a.filename for a in email.attachments] == ["attachment_1", "attachment_2"]
        assert email.attachments[0].content == b"\x00\x01\x02"

    def test_other_text_part_is_dropped(self) -> None:
        email = parse_eml(_multipart("Content-Type: text/calendar\n\nBEGIN:VCALENDAR"))
        assert email.attachments == ()
        assert [(d.code, d.part_path) for d in email.diagnostics] == [(DIAG_PART_DROPPED, "1")]

    def test_part_without_headers(self) -> None:
        email = parse_eml(_multipart("Just text without headers", "Content-Type: text/plain\n\nok"))
        assert email.text_body == "ok"
        assert [(d.code, d.part_path) for d in email.diagnostics] == [(DIAG_PART_WITHOUT_HEADERS, "1")]

    def test_multipart_without_boundary(self) -> None:
        email = parse_eml(_multipart("Content-Type: text/plain\n\nok", "Content-Type: multipart/alternative\n\nstuff"))
        assert email.text_body == "ok"
        assert [(d.code, d.part_path) for d in email.diagnostics] == [(DIAG_MISSING_BOUNDARY, "2")]

    def test_top_level_multipart_without_boundary(self) -> None:
        email = parse_eml("Content-Type: multipart/mixed\n\n--x\nContent-Type: text/plain\n\nhi\n--x--")
        assert email.text_body == ""
        assert [d.code for d in email.diagnostics] == [DIAG_MISSING_BOUNDARY]


@pytest.mark.unit
class TestNestingLimit:
    """Tests for the multipart depth limit."""

    def test_nested_within_limit(self) -> None:
        email = parse_eml(build_nested_email(3), EmlOptions(max_multipart_depth=3))
        assert email.text_body == "deep body"

    def test_nested_beyond_limit(self) -> None:
        with pytest.raises(MalformedFileError):
            parse_eml(build_nested_email(3), EmlOptions(max_multipart_depth=2))

    def test_default_limit(self) -> None:
        assert parse_eml(build_nested_email(32)).text_body == "deep body"
        with pytest.raises(MalformedFileError):
            parse_eml(build_nested_email(40))

    def test_invalid_limit(self) -> None:
        with pytest.raises(ValueError):
            EmlOptions(max_multipart_depth=0)


@pytest.mark.unit
class TestInputHandling:
    """Tests for input types and parser construction."""

    def test_bytes_input(self, simple_email: str) -> None:
        assert parse_eml(simple_email.encode("utf-8")) == parse_eml(simple_email)

    def test_invalid_utf8_bytes_are_replaced(self) -> None:
        email = parse_eml(b"Subject: x\n\ncaf\xe9")
        assert email.text_body == "caf\ufffd"

    def test_rejects_other_types(self) -> None:
        with pytest.raises(ValidationError):
            parse_eml(12345)

    def test_rejects_wrong_options_type(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            EmlParser({"max_multipart_depth": 3})
        assert exc_info.value.parameter_name == "options"

    def test_parser_is_reusable(self, simple_email: str, mixed_email: str) -> None:
        parser = EmlParser()
        first = parser.parse(simple_email)
        parser.parse(mixed_email)
        assert parser.parse(simple_email) == first


@pytest.mark.unit
class TestSplitMultipartBody:
    """Tests for split_multipart_body."""

    def test_segments(self) -> None:
        body = "preamble\n--b\none\n--b\ntwo\n--b--\nepilogue"
        assert split_multipart_body(body, "b") == ["\none\n", "\ntwo\n"]

    def test_trailing_whitespace_on_delimiter(self) -> None:
        body = "--b  \r\none\r\n--b-- \r\n"
        assert split_multipart_body(body, "b") == ["\none\r\n"]

    def test_boundary_with_regex_characters(self) -> None:
        body = "--a.b+c\none\n--a.b+c--"
        assert split_multipart_body(body, "a.b+c") == ["\none\n"]

    def test_no_delimiters(self) -> None:
        assert split_multipart_body("no parts here", "b") == []


@pytest.mark.unit
@pytest.mark.fuzzing
class TestParserProperties:
    """Property-based tests for the parser's no-throw contract."""

    @given(st.text().filter(lambda t: split_header_block(t) is None))
    def test_missing_separator_yields_empty_collections(self, content: str) -> None:
        email = parse_eml(content)
        assert email.from_ == email.to == email.cc == email.bcc == ()
        assert email.attachments == ()
        assert email.date is None

    @given(st.text(), st.sampled_from(["", "text/html", "multipart/mixed; boundary=x", "application/pdf"]))
    def test_arbitrary_bodies_never_raise(self, body: str, content_type: str) -> None:
        email = parse_eml(f"Content-Type: {content_type}\n\n{body}")
        assert isinstance(email, ParsedEmail)

    @given(st.binary())
    def test_arbitrary_bytes_never_raise(self, content: bytes) -> None:
        assert isinstance(parse_eml(content), ParsedEmail)
