#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Parsers that turn raw documents into eml2md data structures."""

from eml2md.parsers.eml import EmlParser, parse_eml

__all__ = ["EmlParser", "parse_eml"]
