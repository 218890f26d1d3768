#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/cli/__init__.py
"""Command-line interface for eml2md.

Examples
--------
Convert every ``.eml`` file in a folder, keeping the sources:

    $ eml2md ~/Mail/export --eml-handling keep

Print a note to the terminal without writing anything:

    $ eml2md message.eml --stdout --rich

Watch a folder and convert new emails as they arrive:

    $ eml2md ~/Vault/Inbox --watch

"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from eml2md import __version__
from eml2md.api import convert_eml_to_markdown, convert_paths, find_eml_files
from eml2md.cli.config import default_config_path, load_config_file, split_config
from eml2md.cli.output import print_note, should_use_rich_output
from eml2md.constants import (
    DEFAULT_WATCH_DEBOUNCE_SECONDS,
    EXIT_DEPENDENCY_ERROR,
    EXIT_ERROR,
    EXIT_FILE_ERROR,
    EXIT_PARSING_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
)
from eml2md.exceptions import DependencyError, FileError, MalformedFileError, ValidationError
from eml2md.logging_utils import configure_logging
from eml2md.options.eml import EmlOptions
from eml2md.options.note import NoteOptions

logger = logging.getLogger(__name__)

# CLI destination -> options field, for flags that override config values
_NOTE_FLAGS = {
    "no_frontmatter": ("use_frontmatter", False),
    "no_headers": ("show_headers_in_body", False),
    "no_link_moved_eml": ("link_moved_eml", False),
    "prefer_html": ("prefer_html_body", True),
}
_NOTE_VALUES = {
    "attachment_list": "attachment_list_position",
    "date_format_mode": "date_format_mode",
    "date_pattern": "date_strftime_pattern",
    "link_style": "link_style",
    "eml_handling": "eml_handling",
    "attachment_dir": "attachment_dir",
    "max_attachment_size": "max_attachment_size_bytes",
}
_EML_VALUES = {
    "max_depth": "max_multipart_depth",
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``eml2md`` command."""
    parser = argparse.ArgumentParser(
        prog="eml2md",
        description="Convert .eml email files into Markdown notes with their attachments.",
    )
    parser.add_argument("input", nargs="+", help="Email files or folders containing .eml files")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    io_group = parser.add_argument_group("input and output")
    io_group.add_argument("--output-dir", "-o", type=Path, help="Folder for notes (default: next to each email)")
    io_group.add_argument("--recursive", "-r", action="store_true", help="Search folders recursively")
    io_group.add_argument("--stdout", action="store_true", help="Print notes instead of writing files")
    io_group.add_argument("--rich", action="store_true", help="Render --stdout output with rich on a terminal")
    io_group.add_argument("--config", help="YAML or JSON configuration file (default: $EML2MD_CONFIG)")

    note_group = parser.add_argument_group("note options")
    note_group.add_argument("--no-frontmatter", action="store_true", help="Do not emit YAML front matter")
    note_group.add_argument("--no-headers", action="store_true", help="Do not show From/To/CC/Date in the body")
    note_group.add_argument(
        "--attachment-list", choices=["top", "bottom", "both"], help="Where to place the attachment list"
    )
    note_group.add_argument(
        "--date-format-mode", choices=["iso8601", "locale", "strftime"], help="How dates are formatted"
    )
    note_group.add_argument("--date-pattern", help="strftime pattern for --date-format-mode strftime")
    note_group.add_argument("--link-style", choices=["markdown", "wikilink"], help="Attachment link syntax")
    note_group.add_argument("--prefer-html", action="store_true", help="Use the HTML body even if text exists")

    file_group = parser.add_argument_group("file handling")
    file_group.add_argument(
        "--eml-handling",
        choices=["keep", "delete", "move-to-attachments"],
        help="What to do with the source .eml after conversion",
    )
    file_group.add_argument("--no-link-moved-eml", action="store_true", help="Do not link to the moved .eml file")
    file_group.add_argument("--attachment-dir", help="Attachment folder name, relative to the note")
    file_group.add_argument("--max-attachment-size", type=int, help="Largest attachment written, in bytes")
    file_group.add_argument("--max-depth", type=int, help="Maximum multipart nesting depth")

    watch_group = parser.add_argument_group("watch mode")
    watch_group.add_argument("--watch", action="store_true", help="Convert new .eml files as they appear")
    watch_group.add_argument(
        "--watch-debounce",
        type=float,
        default=DEFAULT_WATCH_DEBOUNCE_SECONDS,
        help="Seconds to wait before converting a new file (default: %(default)s)",
    )

    log_group = parser.add_argument_group("logging")
    log_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: %(default)s)",
    )
    log_group.add_argument("--verbose", "-v", action="store_true", help="Shortcut for --log-level DEBUG")
    log_group.add_argument("--trace", action="store_true", help="Debug logging with timestamps and logger names")
    log_group.add_argument("--log-file", help="Also write log output to this file")
    return parser


def _setup_logging_level(parsed_args: argparse.Namespace) -> None:
    """Set up logging level based on command-line arguments."""
    # --trace takes highest precedence, then --verbose, then --log-level
    if parsed_args.trace:
        log_level = logging.DEBUG
    elif parsed_args.verbose and parsed_args.log_level == "WARNING":
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, parsed_args.log_level.upper())

    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def build_options(parsed_args: argparse.Namespace) -> tuple[NoteOptions, EmlOptions]:
    """Build options from the configuration file and command-line flags.

    Flags given on the command line override configuration file values.

    Raises
    ------
    argparse.ArgumentTypeError
        If the configuration file is invalid or a value is out of range

    """
    note_kwargs: Dict[str, Any] = {}
    eml_kwargs: Dict[str, Any] = {}

    config_path = parsed_args.config or default_config_path()
    if config_path:
        note_kwargs, eml_kwargs = split_config(load_config_file(config_path))

    for dest, (field_name, value) in _NOTE_FLAGS.items():
        if getattr(parsed_args, dest, False):
            note_kwargs[field_name] = value
    for dest, field_name in _NOTE_VALUES.items():
        value = getattr(parsed_args, dest, None)
        if value is not None:
            note_kwargs[field_name] = value
    for dest, field_name in _EML_VALUES.items():
        value = getattr(parsed_args, dest, None)
        if value is not None:
            eml_kwargs[field_name] = value

    try:
        return NoteOptions(**note_kwargs), EmlOptions(**eml_kwargs)
    except (TypeError, ValueError) as e:
        raise argparse.ArgumentTypeError(f"Invalid option value: {e}") from e


def get_exit_code_for_exception(exception: Exception) -> int:
    """Map an exception to an appropriate CLI exit code."""
    if isinstance(exception, (DependencyError, ImportError)):
        return EXIT_DEPENDENCY_ERROR
    if isinstance(exception, (ValidationError, argparse.ArgumentTypeError)):
        return EXIT_VALIDATION_ERROR
    if isinstance(exception, MalformedFileError):
        return EXIT_PARSING_ERROR
    if isinstance(exception, FileError):
        return EXIT_FILE_ERROR
    return EXIT_ERROR


def _print_notes(parsed_args: argparse.Namespace, note_options: NoteOptions, eml_options: EmlOptions) -> int:
    """Render each input to stdout without writing files."""
    use_rich = should_use_rich_output(parsed_args)
    sources = find_eml_files(parsed_args.input, recursive=parsed_args.recursive)
    for index, source in enumerate(sources):
        try:
            raw = source.read_bytes()
        except OSError as e:
            raise FileError(f"Cannot read file: {source}", file_path=str(source), original_error=e) from e
        if index:
            print()
        print_note(convert_eml_to_markdown(raw, note_options, eml_options), use_rich=use_rich)
    return EXIT_SUCCESS


def _handle_watch_mode(parsed_args: argparse.Namespace, note_options: NoteOptions, eml_options: EmlOptions) -> int:
    try:
        from eml2md.cli.watch import run_watch_mode
    except ImportError as e:
        raise DependencyError("watch mode (--watch)", ["watchdog"], extra="watch", original_import_error=e) from e

    return run_watch_mode(
        [Path(p) for p in parsed_args.input],
        output_dir=parsed_args.output_dir,
        options=note_options,
        parse_options=eml_options,
        recursive=parsed_args.recursive,
        settle_seconds=parsed_args.watch_debounce,
    )


def _convert_inputs(parsed_args: argparse.Namespace, note_options: NoteOptions, eml_options: EmlOptions) -> int:
    results, failures = convert_paths(
        parsed_args.input,
        recursive=parsed_args.recursive,
        output_dir=parsed_args.output_dir,
        options=note_options,
        parse_options=eml_options,
    )
    converted = sum(1 for result in results if not result.skipped)
    skipped = len(results) - converted
    print(f"Converted {converted} file(s), skipped {skipped}, failed {len(failures)}.", file=sys.stderr)

    if not failures:
        return EXIT_SUCCESS
    return max(get_exit_code_for_exception(error) for _, error in failures)


def main(args: list[str] | None = None) -> int:
    """Execute the eml2md command line."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    _setup_logging_level(parsed_args)

    try:
        note_options, eml_options = build_options(parsed_args)
    except argparse.ArgumentTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        if parsed_args.watch:
            return _handle_watch_mode(parsed_args, note_options, eml_options)
        if parsed_args.stdout:
            return _print_notes(parsed_args, note_options, eml_options)
        return _convert_inputs(parsed_args, note_options, eml_options)
    except (DependencyError, ValidationError, FileError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return get_exit_code_for_exception(e)


if __name__ == "__main__":
    sys.exit(main())
