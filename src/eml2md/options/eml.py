#  Copyright (c) 2025 Tom Villani, Ph.D.

# eml2md/options/eml.py
"""Configuration options for EML (email) parsing.

This module defines options for the MIME parser itself. Options that affect
the generated note live in :mod:`eml2md.options.note`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from eml2md.constants import (
    DEFAULT_CAPTURE_TOP_LEVEL_ATTACHMENT,
    DEFAULT_COLLECT_DIAGNOSTICS,
    DEFAULT_MAX_MULTIPART_DEPTH,
)
from eml2md.options.base import CloneFrozenMixin


@dataclass(frozen=True)
class EmlOptions(CloneFrozenMixin):
    """Configuration options for parsing raw email documents.

    Parameters
    ----------
    max_multipart_depth : int, default 32
        Maximum nesting depth of multipart bodies. Deeper documents raise
        ``MalformedFileError`` instead of exhausting the stack.
    capture_top_level_attachment : bool, default False
        Whether a non-multipart, non-text top-level body (for example a mail
        that is just a PDF) is captured as an attachment.
    collect_diagnostics : bool, default True
        Whether decode anomalies are recorded on ``ParsedEmail.diagnostics``.

    Examples
    --------
    Tighten the nesting limit for untrusted input:
        >>> options = EmlOptions(max_multipart_depth=8)

    """

    max_multipart_depth: int = field(
        default=DEFAULT_MAX_MULTIPART_DEPTH,
        metadata={"help": "Maximum multipart nesting depth", "type": int, "importance": "security"},
    )
    capture_top_level_attachment: bool = field(
        default=DEFAULT_CAPTURE_TOP_LEVEL_ATTACHMENT,
        metadata={"help": "Capture a non-text single-part body as an attachment", "importance": "advanced"},
    )
    collect_diagnostics: bool = field(
        default=DEFAULT_COLLECT_DIAGNOSTICS,
        metadata={"help": "Record decode anomalies on the parsed email", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges.

        Raises
        ------
        ValueError
            If max_multipart_depth is smaller than 1.

        """
        if self.max_multipart_depth < 1:
            raise ValueError(f"max_multipart_depth must be at least 1, got {self.max_multipart_depth}")
