#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/models.py
"""Data model produced by the email parser.

All classes are frozen dataclasses. A ``ParsedEmail`` is built once per
input document and is read-only afterwards; collections are stored as tuples.

"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field


@dataclass(frozen=True)
class EmailAddress:
    """A single mailbox from an address header.

    Parameters
    ----------
    name : str
        Display name, empty when the header only carried an address
    address : str
        The mailbox address itself

    """

    name: str
    address: str


@dataclass(frozen=True)
class Attachment:
    """A MIME part that was classified as an attachment.

    Parameters
    ----------
    filename : str
        Declared filename, or a generated ``attachment_<n>`` name
    content_type : str
        Lower-cased MIME type of the part
    content : bytes
        Transfer-decoded payload
    content_id : str or None
        Content-ID with angle brackets stripped, used by ``cid:`` references

    """

    filename: str
    content_type: str
    content: bytes = field(repr=False)
    content_id: str | None = None

    @property
    def size(self) -> int:
        """Size of the decoded payload in bytes."""
        return len(self.content)


@dataclass(frozen=True)
class ParseDiagnostic:
    """A non-fatal anomaly noticed while parsing.

    Parameters
    ----------
    code : str
        Stable machine-readable code (see ``eml2md.constants.DIAG_*``)
    message : str
        Human-readable description
    part_path : str
        Dotted 1-based index path of the MIME part, empty for the top level

    """

    code: str
    message: str
    part_path: str = ""


@dataclass(frozen=True)
class ParsedEmail:
    """Structured representation of an email document."""

    from_: tuple[EmailAddress, ...] = ()
    to: tuple[EmailAddress, ...] = ()
    cc: tuple[EmailAddress, ...] = ()
    bcc: tuple[EmailAddress, ...] = ()
    subject: str = ""
    date: datetime.datetime | None = None
    message_id: str = ""
    text_body: str = ""
    html_body: str = ""
    attachments: tuple[Attachment, ...] = ()
    diagnostics: tuple[ParseDiagnostic, ...] = ()

    def find_attachment_by_content_id(self, content_id: str) -> Attachment | None:
        """Return the first attachment whose Content-ID matches ``content_id``."""
        for attachment in self.attachments:
            if attachment.content_id == content_id:
                return attachment
        return None
