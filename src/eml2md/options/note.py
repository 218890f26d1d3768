#  Copyright (c) 2025 Tom Villani, Ph.D.

# eml2md/options/note.py
"""Configuration options for note generation and source file handling."""

from __future__ import annotations

from dataclasses import dataclass, field

from eml2md.constants import (
    DEFAULT_ATTACHMENT_DIR,
    DEFAULT_ATTACHMENT_LIST_POSITION,
    DEFAULT_DATE_FORMAT_MODE,
    DEFAULT_DATE_STRFTIME_PATTERN,
    DEFAULT_EML_HANDLING,
    DEFAULT_LINK_MOVED_EML,
    DEFAULT_LINK_STYLE,
    DEFAULT_MAX_ATTACHMENT_SIZE_BYTES,
    DEFAULT_PREFER_HTML_BODY,
    DEFAULT_SHOW_HEADERS_IN_BODY,
    DEFAULT_USE_FRONTMATTER,
    AttachmentListPosition,
    DateFormatMode,
    EmlHandlingMode,
    NoteLinkStyle,
)
from eml2md.options.base import CloneFrozenMixin

_ATTACHMENT_LIST_POSITIONS = ("top", "bottom", "both")
_DATE_FORMAT_MODES = ("iso8601", "locale", "strftime")
_LINK_STYLES = ("markdown", "wikilink")
_EML_HANDLING_MODES = ("keep", "delete", "move-to-attachments")


@dataclass(frozen=True)
class NoteOptions(CloneFrozenMixin):
    """Configuration options for the Markdown note written for each email.

    Parameters
    ----------
    use_frontmatter : bool, default True
        Whether to emit a YAML front matter block with the email metadata.
    show_headers_in_body : bool, default True
        Whether to render From/To/CC/Date lines below the title.
    attachment_list_position : {"top", "bottom", "both"}, default "both"
        Where the "Attachments" section is placed.
    date_format_mode : {"iso8601", "locale", "strftime"}, default "strftime"
        How the date is formatted in the header block:
        - "iso8601": ISO 8601 format (2023-01-01T10:00:00+00:00)
        - "locale": System locale-aware formatting
        - "strftime": Custom strftime pattern
    date_strftime_pattern : str, default "%Y-%m-%d %H:%M"
        Pattern used when date_format_mode is "strftime".
    link_style : {"markdown", "wikilink"}, default "markdown"
        Link syntax for attachments: ``[name](path)`` or ``[[path]]``.
    eml_handling : {"keep", "delete", "move-to-attachments"}, default "move-to-attachments"
        What happens to the source ``.eml`` file after conversion.
    link_moved_eml : bool, default True
        Whether the header block links to the moved source file.
    attachment_dir : str, default "attachments"
        Folder, relative to the note, that receives attachments.
    max_attachment_size_bytes : int, default 500 MiB
        Attachments larger than this are not written to disk.
    prefer_html_body : bool, default False
        Use the converted HTML body even when a plain text body exists.

    """

    use_frontmatter: bool = field(
        default=DEFAULT_USE_FRONTMATTER,
        metadata={"help": "Emit YAML front matter", "cli_name": "no-frontmatter", "importance": "core"},
    )
    show_headers_in_body: bool = field(
        default=DEFAULT_SHOW_HEADERS_IN_BODY,
        metadata={"help": "Show From/To/CC/Date in the note body", "cli_name": "no-headers", "importance": "core"},
    )
    attachment_list_position: AttachmentListPosition = field(
        default=DEFAULT_ATTACHMENT_LIST_POSITION,
        metadata={
            "help": "Where to place the attachment list",
            "choices": list(_ATTACHMENT_LIST_POSITIONS),
            "importance": "core",
        },
    )
    date_format_mode: DateFormatMode = field(
        default=DEFAULT_DATE_FORMAT_MODE,
        metadata={"help": "Date formatting mode: iso8601, locale, or strftime", "importance": "advanced"},
    )
    date_strftime_pattern: str = field(
        default=DEFAULT_DATE_STRFTIME_PATTERN,
        metadata={"help": "Custom strftime pattern for date formatting", "importance": "advanced"},
    )
    link_style: NoteLinkStyle = field(
        default=DEFAULT_LINK_STYLE,
        metadata={"help": "Attachment link syntax", "choices": list(_LINK_STYLES), "importance": "core"},
    )
    eml_handling: EmlHandlingMode = field(
        default=DEFAULT_EML_HANDLING,
        metadata={
            "help": "What to do with the source .eml file",
            "choices": list(_EML_HANDLING_MODES),
            "importance": "core",
        },
    )
    link_moved_eml: bool = field(
        default=DEFAULT_LINK_MOVED_EML,
        metadata={"help": "Link to the moved .eml file", "cli_name": "no-link-moved-eml", "importance": "advanced"},
    )
    attachment_dir: str = field(
        default=DEFAULT_ATTACHMENT_DIR,
        metadata={"help": "Attachment folder relative to the note", "importance": "core"},
    )
    max_attachment_size_bytes: int = field(
        default=DEFAULT_MAX_ATTACHMENT_SIZE_BYTES,
        metadata={"help": "Largest attachment written to disk", "type": int, "importance": "security"},
    )
    prefer_html_body: bool = field(
        default=DEFAULT_PREFER_HTML_BODY,
        metadata={"help": "Prefer the HTML body over the text body", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate enumerated values and numeric ranges.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.attachment_list_position not in _ATTACHMENT_LIST_POSITIONS:
            raise ValueError(
                f"attachment_list_position must be one of {_ATTACHMENT_LIST_POSITIONS}, "
                f"got {self.attachment_list_position!r}"
            )
        if self.date_format_mode not in _DATE_FORMAT_MODES:
            raise ValueError(f"date_format_mode must be one of {_DATE_FORMAT_MODES}, got {self.date_format_mode!r}")
        if self.link_style not in _LINK_STYLES:
            raise ValueError(f"link_style must be one of {_LINK_STYLES}, got {self.link_style!r}")
        if self.eml_handling not in _EML_HANDLING_MODES:
            raise ValueError(f"eml_handling must be one of {_EML_HANDLING_MODES}, got {self.eml_handling!r}")
        if self.max_attachment_size_bytes <= 0:
            raise ValueError(f"max_attachment_size_bytes must be positive, got {self.max_attachment_size_bytes}")
        if not self.attachment_dir.strip():
            raise ValueError("attachment_dir must not be empty")
