#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for eml2md.

Options are frozen dataclasses: ``EmlOptions`` controls the MIME parser and
``NoteOptions`` controls the generated Markdown note and file handling.
"""

from __future__ import annotations

from eml2md.options.base import CloneFrozenMixin
from eml2md.options.eml import EmlOptions
from eml2md.options.note import NoteOptions

__all__ = [
    "CloneFrozenMixin",
    "EmlOptions",
    "NoteOptions",
]
