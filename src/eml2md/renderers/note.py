#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/renderers/note.py
"""Markdown note rendering for parsed emails.

A note consists of, in order: optional YAML front matter, a title heading,
an optional header block, the attachment list (top, bottom or both) and the
message body. Inline images referenced from the HTML body as ``cid:<id>``
are pointed at the saved attachment carrying that Content-ID.

"""

from __future__ import annotations

import datetime
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import yaml

from eml2md.constants import NOTE_TYPE, UNTITLED_EMAIL_TITLE
from eml2md.converters.html2markdown import html_to_markdown
from eml2md.mime.addresses import format_addresses
from eml2md.models import ParsedEmail
from eml2md.options.note import NoteOptions
from eml2md.utils.attachments import is_image_filename

logger = logging.getLogger(__name__)

_CID_IMAGE_PATTERN = re.compile(r"!\[((?:[^\]\\]|\\.)*)\]\(cid:([^)\s]+)\)")


@dataclass(frozen=True)
class SavedAttachment:
    """An attachment as stored next to the note.

    Parameters
    ----------
    original_name : str
        Filename declared by the email
    target : str
        Path of the stored file relative to the note, with ``/`` separators
    content_id : str or None
        Content-ID of the attachment, for ``cid:`` references

    """

    original_name: str
    target: str
    content_id: str | None = None

    @property
    def is_image(self) -> bool:
        return is_image_filename(self.target)


def format_email_date(date: datetime.datetime | None, options: NoteOptions) -> str:
    """Format a date for the header block according to ``options``.

    Parameters
    ----------
    date : datetime.datetime | None
        Datetime to format.
    options : NoteOptions
        Note options selecting the date format.

    Returns
    -------
    str
        Formatted date string, or empty string if date is None.

    """
    if date is None:
        return ""

    if options.date_format_mode == "iso8601":
        return date.isoformat()
    elif options.date_format_mode == "locale":
        return date.strftime("%c")
    else:
        return date.strftime(options.date_strftime_pattern)


class NoteRenderer:
    """Render a :class:`ParsedEmail` as a Markdown note.

    Parameters
    ----------
    options : NoteOptions or None
        Note options

    """

    def __init__(self, options: NoteOptions | None = None):
        """Initialize the renderer with options."""
        self.options: NoteOptions = options or NoteOptions()

    def render(
        self,
        email: ParsedEmail,
        attachments: Sequence[SavedAttachment] = (),
        moved_eml_target: str | None = None,
    ) -> str:
        """Render the note text.

        Parameters
        ----------
        email : ParsedEmail
            Parsed email
        attachments : sequence of SavedAttachment
            Attachments that were stored, in email order
        moved_eml_target : str or None
            Note-relative path of the moved source file, if it was moved

        Returns
        -------
        str
            Complete note text

        """
        lines: list[str] = []

        if self.options.use_frontmatter:
            lines.append(self.render_frontmatter(email))

        lines.append(f"# {email.subject or UNTITLED_EMAIL_TITLE}")
        lines.append("")

        if self.options.show_headers_in_body:
            lines.extend(self._header_lines(email, moved_eml_target))

        position = self.options.attachment_list_position
        if attachments and position in ("top", "both"):
            lines.extend(self.render_attachment_list(attachments))
            lines.append("---")
            lines.append("")

        body = self.render_body(email, attachments)
        if body:
            lines.append(body)
            lines.append("")

        if attachments and position in ("bottom", "both"):
            lines.append("---")
            lines.append("")
            lines.extend(self.render_attachment_list(attachments))

        return "\n".join(lines)

    def render_frontmatter(self, email: ParsedEmail) -> str:
        """Return the YAML front matter block, delimiters included."""
        data: dict[str, Any] = {}
        for key, addresses in (("from", email.from_), ("to", email.to), ("cc", email.cc), ("bcc", email.bcc)):
            if addresses:
                data[key] = format_addresses(addresses)
        if email.date is not None:
            data["date"] = email.date.isoformat()
        if email.subject:
            data["subject"] = email.subject
        if email.message_id:
            data["message_id"] = email.message_id
        data["type"] = NOTE_TYPE

        yaml_content = yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
        return f"---\n{yaml_content}---\n"

    def _header_lines(self, email: ParsedEmail, moved_eml_target: str | None) -> list[str]:
        lines: list[str] = []
        if email.from_:
            lines.append(f"**From:** {format_addresses(email.from_)}")
        if email.to:
            lines.append(f"**To:** {format_addresses(email.to)}")
        if email.cc:
            lines.append(f"**CC:** {format_addresses(email.cc)}")
        if email.date is not None:
            lines.append(f"**Date:** {format_email_date(email.date, self.options)}")
        if moved_eml_target and self.options.link_moved_eml:
            lines.append(f"**Original:** {self._link(moved_eml_target)}")
        lines.extend(["", "---", ""])
        return lines

    def render_attachment_list(self, attachments: Sequence[SavedAttachment]) -> list[str]:
        """Return the lines of the ``### Attachments`` section."""
        if not attachments:
            return []
        lines = ["### Attachments", ""]
        for attachment in attachments:
            if attachment.is_image:
                lines.append(f"- {self._embed(attachment.target)}")
            else:
                lines.append(f"- {self._link(attachment.target)}")
        lines.append("")
        return lines

    def render_body(self, email: ParsedEmail, attachments: Sequence[SavedAttachment] = ()) -> str:
        """Return the note body: the text body, or the HTML body as Markdown."""
        use_html = bool(email.html_body) and (self.options.prefer_html_body or not email.text_body)
        if not use_html:
            return email.text_body.replace("\r\n", "\n").strip("\n")

        body = html_to_markdown(email.html_body)
        by_content_id = {a.content_id: a for a in attachments if a.content_id}
        if not by_content_id:
            return body

        def replace_cid(match: re.Match[str]) -> str:
            attachment = by_content_id.get(match.group(2))
            if attachment is None:
                logger.debug(f"No saved attachment for inline image cid:{match.group(2)}")
                return match.group(0)
            return self._embed(attachment.target, alt=match.group(1))

        return _CID_IMAGE_PATTERN.sub(replace_cid, body)

    def _link(self, target: str) -> str:
        if self.options.link_style == "wikilink":
            return f"[[{target}]]"
        name = target.rsplit("/", 1)[-1]
        return f"[{name}]({quote(target, safe='/')})"

    def _embed(self, target: str, alt: str = "") -> str:
        if self.options.link_style == "wikilink":
            return f"![[{target}]]"
        name = alt or target.rsplit("/", 1)[-1]
        return f"![{name}]({quote(target, safe='/')})"


def render_note(
    email: ParsedEmail,
    attachments: Sequence[SavedAttachment] = (),
    options: NoteOptions | None = None,
    moved_eml_target: str | None = None,
) -> str:
    """Render a parsed email as a Markdown note.

    See :meth:`NoteRenderer.render`.
    """
    return NoteRenderer(options).render(email, attachments, moved_eml_target)
