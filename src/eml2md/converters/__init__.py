#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Text converters for email HTML bodies."""

from eml2md.converters.html2markdown import (
    HtmlToMarkdownConverter,
    HtmlToPlainTextConverter,
    html_to_markdown,
    html_to_plain_text,
)

__all__ = ["HtmlToMarkdownConverter", "HtmlToPlainTextConverter", "html_to_markdown", "html_to_plain_text"]
