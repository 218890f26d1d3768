#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Renderers that turn parsed emails into output documents."""

from eml2md.renderers.note import NoteRenderer, SavedAttachment, format_email_date, render_note

__all__ = ["NoteRenderer", "SavedAttachment", "format_email_date", "render_note"]
