"""Test utilities for the eml2md test suite.

This module provides builders for raw email documents and small binary
payloads shared by the unit and integration tests.
"""

import base64
from pathlib import Path

# Base64 encoded 1x1 pixel PNG for testing
MINIMAL_PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/w8AAn8B9FpQHLwAAAAASUVORK5CYII="
MINIMAL_PNG_BYTES = base64.b64decode(MINIMAL_PNG_B64)


def join_lines(*lines: str, newline: str = "\r\n") -> str:
    """Join lines with the given line ending."""
    return newline.join(lines)


def build_simple_email(
    body: str = "Hello there.",
    subject: str = "Test Subject",
    content_type: str = "text/plain; charset=utf-8",
    encoding: str | None = None,
    extra_headers: tuple[str, ...] = (),
    newline: str = "\r\n",
) -> str:
    """Build a single-part email document."""
    headers = [
        "From: Alice Example <alice@example.com>",
        "To: bob@example.com",
        f"Subject: {subject}",
        "Date: Mon, 15 Jan 2024 10:30:00 +0000",
        "Message-ID: <msg-001@example.com>",
        f"Content-Type: {content_type}",
    ]
    if encoding:
        headers.append(f"Content-Transfer-Encoding: {encoding}")
    headers.extend(extra_headers)
    return join_lines(*headers, "", body, newline=newline)


def build_mixed_email(newline: str = "\r\n") -> str:
    """Build multipart/mixed containing multipart/alternative and one PNG attachment."""
    return join_lines(
        "From: \"Doe, John\" <john@example.com>",
        "To: jane@example.com, \"Smith, Bob\" <bob@example.com>",
        "Cc: carol@example.com",
        "Subject: =?UTF-8?B?SGVsbG8=?= world",
        "Date: Tue, 16 Jan 2024 08:00:00 -0500",
        "Message-ID: <abc@example.com>",
        "MIME-Version: 1.0",
        'Content-Type: multipart/mixed; boundary="outer"',
        "",
        "This is the preamble.",
        "--outer",
        'Content-Type: multipart/alternative; boundary="inner"',
        "",
        "--inner",
        "Content-Type: text/plain; charset=utf-8",
        "Content-Transfer-Encoding: quoted-printable",
        "",
        "Caf=C3=A9 menu is =",
        "attached.",
        "--inner",
        "Content-Type: text/html; charset=utf-8",
        "",
        '<p>Café menu is <b>attached</b>.</p><img src="cid:logo123" alt="Logo">',
        "--inner--",
        "",
        "--outer",
        "Content-Type: image/png; name=\"logo.png\"",
        "Content-Transfer-Encoding: base64",
        "Content-Disposition: inline; filename=\"logo.png\"",
        "Content-ID: <logo123>",
        "",
        MINIMAL_PNG_B64[:40],
        MINIMAL_PNG_B64[40:],
        "--outer--",
        "This is the epilogue.",
        newline=newline,
    )


def build_nested_email(depth: int) -> str:
    """Build an email whose multipart bodies are nested ``depth`` levels deep."""
    lines = ["Subject: nested", 'Content-Type: multipart/mixed; boundary="b0"', ""]
    for level in range(1, depth):
        lines += [f"--b{level - 1}", f'Content-Type: multipart/mixed; boundary="b{level}"', ""]
    lines += [f"--b{depth - 1}", "Content-Type: text/plain", "", "deep body", f"--b{depth - 1}--"]
    for level in range(depth - 2, -1, -1):
        lines += [f"--b{level}--"]
    return "\n".join(lines)


def write_eml(directory: Path, name: str, content: str) -> Path:
    """Write an email document to ``directory/name`` and return its path."""
    path = directory / name
    path.write_text(content, encoding="utf-8", newline="")
    return path
