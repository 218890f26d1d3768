#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the eml2md library.

This module centralizes hardcoded values, limits and default configuration
constants used across eml2md.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. MIME Parsing - Parser defaults and hardening limits
3. Security Constants - URL allow-list and sanitization settings
4. Note Output - Defaults for the generated Markdown notes
5. CLI - Exit codes and watch mode timing
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions - All Literal Types and Type Aliases
# =============================================================================

AttachmentListPosition = Literal["top", "bottom", "both"]
EmlHandlingMode = Literal["keep", "delete", "move-to-attachments"]
DateFormatMode = Literal["iso8601", "locale", "strftime"]
NoteLinkStyle = Literal["markdown", "wikilink"]

# =============================================================================
# MIME Parsing
# =============================================================================

DEFAULT_CONTENT_TYPE = "text/plain"
DEFAULT_TRANSFER_ENCODING = "7bit"
DEFAULT_CHARSET = "utf-8"

# Multipart nesting deeper than this is rejected as malformed
DEFAULT_MAX_MULTIPART_DEPTH = 32
DEFAULT_CAPTURE_TOP_LEVEL_ATTACHMENT = False
DEFAULT_COLLECT_DIAGNOSTICS = True

# Name given to attachments without a declared filename, numbered from 1
FALLBACK_ATTACHMENT_NAME = "attachment_{index}"

# Diagnostic codes reported on ParsedEmail.diagnostics
DIAG_MISSING_SEPARATOR = "missing-header-separator"
DIAG_INVALID_DATE = "invalid-date"
DIAG_MIME_WORD_FAILED = "mime-word-decode-failed"
DIAG_TRANSFER_DECODE_FAILED = "transfer-decode-failed"
DIAG_MISSING_BOUNDARY = "missing-boundary"
DIAG_PART_WITHOUT_HEADERS = "part-without-headers"
DIAG_PART_DROPPED = "part-dropped"

# =============================================================================
# Security Constants
# =============================================================================

# Only URLs starting with one of these prefixes survive HTML conversion
SAFE_URL_PREFIXES: tuple[str, ...] = ("http://", "https://", "mailto:", "cid:")

# Characters removed before HTML is tokenised
INVISIBLE_CHARACTERS: tuple[str, ...] = ("\x00", "\ufeff", "\u200b", "\u200c", "\u200d", "\u2060")

DEFAULT_MAX_ATTACHMENT_SIZE_BYTES = 500 * 1024 * 1024
MAX_ATTACHMENT_FILENAME_LENGTH = 200

# =============================================================================
# Note Output
# =============================================================================

DEFAULT_USE_FRONTMATTER = True
DEFAULT_SHOW_HEADERS_IN_BODY = True
DEFAULT_ATTACHMENT_LIST_POSITION: AttachmentListPosition = "both"
DEFAULT_DATE_FORMAT_MODE: DateFormatMode = "strftime"
DEFAULT_DATE_STRFTIME_PATTERN = "%Y-%m-%d %H:%M"
DEFAULT_LINK_STYLE: NoteLinkStyle = "markdown"
DEFAULT_EML_HANDLING: EmlHandlingMode = "move-to-attachments"
DEFAULT_LINK_MOVED_EML = True
DEFAULT_ATTACHMENT_DIR = "attachments"
DEFAULT_PREFER_HTML_BODY = False

UNTITLED_EMAIL_TITLE = "Untitled Email"
NOTE_TYPE = "email"
NOTE_EXTENSION = ".md"
EML_EXTENSION = ".eml"

IMAGE_EXTENSIONS: frozenset[str] = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg", "bmp"})

# =============================================================================
# CLI
# =============================================================================

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_DEPENDENCY_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4
EXIT_PARSING_ERROR = 6

DEFAULT_WATCH_DEBOUNCE_SECONDS = 0.5
CONFIG_ENV_VAR = "EML2MD_CONFIG"
