#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/eml2md/cli/output.py
"""Utility functions for cli output."""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from eml2md.exceptions import DependencyError


def check_rich_available() -> bool:
    """Check if Rich library is available.

    Returns
    -------
    bool
        True if Rich is available, False otherwise

    """
    try:
        import rich  # noqa: F401
    except ImportError:
        return False
    return True


def should_use_rich_output(args: argparse.Namespace, stream: TextIO | None = None) -> bool:
    """Determine if Rich output should be used based on TTY and args.

    Rich output is used when the ``--rich`` flag is set and the output stream
    is a TTY.

    Raises
    ------
    DependencyError
        If ``--rich`` was requested but rich is not installed

    """
    if not getattr(args, "rich", False):
        return False

    if not check_rich_available():
        raise DependencyError("rich output", ["rich"], extra="rich")

    target = stream or sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(callable(isatty) and isatty())


def print_note(markdown: str, use_rich: bool = False, stream: TextIO | None = None) -> None:
    """Write a note to the terminal, rendered with rich when requested."""
    target = stream or sys.stdout
    if use_rich:
        from rich.console import Console
        from rich.markdown import Markdown

        Console(file=target).print(Markdown(markdown))
    else:
        target.write(markdown)
        if not markdown.endswith("\n"):
            target.write("\n")
