#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/cli/watch.py
"""Watch mode implementation for the eml2md CLI.

New ``.eml`` files appearing in the watched folders, either created there or
renamed to a ``.eml`` name, are converted automatically. Renaming a file that
already had a ``.eml`` name (including the move into the attachments folder
done by a conversion) does not trigger a conversion.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from eml2md.api import ConversionResult, convert_eml_file, is_in_attachment_dir
from eml2md.constants import DEFAULT_WATCH_DEBOUNCE_SECONDS, EML_EXTENSION, EXIT_SUCCESS
from eml2md.exceptions import Eml2MdError
from eml2md.options.eml import EmlOptions
from eml2md.options.note import NoteOptions

logger = logging.getLogger(__name__)


class EmlEventHandler(FileSystemEventHandler):
    """File system event handler that converts new ``.eml`` files.

    Parameters
    ----------
    output_dir : Path, optional
        Folder for notes; defaults to each source's own folder
    options : NoteOptions, optional
        Note options
    parse_options : EmlOptions, optional
        Parser options
    settle_seconds : float, default 0.5
        Delay before converting, giving the writer time to finish the file
    converter : callable, optional
        Conversion function, ``convert_eml_file`` by default

    """

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        options: Optional[NoteOptions] = None,
        parse_options: Optional[EmlOptions] = None,
        settle_seconds: float = DEFAULT_WATCH_DEBOUNCE_SECONDS,
        converter: Optional[Callable[..., ConversionResult]] = None,
    ) -> None:
        """Initialize the event handler with conversion settings."""
        self.output_dir = output_dir
        self.options = options or NoteOptions()
        self.parse_options = parse_options
        self.settle_seconds = settle_seconds
        self.converter = converter or convert_eml_file

        self._last_processed: Dict[str, float] = {}
        self._processing: Set[str] = set()

    def should_process(self, file_path: str) -> bool:
        """Check if a file should be converted.

        Parameters
        ----------
        file_path : str
            Path to the file

        Returns
        -------
        bool
            True if file should be processed

        """
        path = Path(file_path)

        if path.suffix.lower() != EML_EXTENSION:
            logger.debug(f"Skipping {file_path}: not an .eml file")
            return False

        if file_path in self._processing:
            logger.debug(f"Skipping {file_path}: already processing")
            return False

        if is_in_attachment_dir(path, self.options, self.output_dir):
            logger.debug(f"Skipping {file_path}: file is in the attachments folder")
            return False

        last_processed = self._last_processed.get(file_path, 0.0)
        if time.time() - last_processed < self.settle_seconds:
            logger.debug(f"Skipping {file_path}: debounce delay not met")
            return False

        return True

    def convert_file(self, file_path: str) -> None:
        """Convert a single file, logging instead of raising on failure.

        Parameters
        ----------
        file_path : str
            Path to the file to convert

        """
        self._processing.add(file_path)
        try:
            if self.settle_seconds > 0:
                time.sleep(self.settle_seconds)

            path = Path(file_path)
            if not path.exists():
                logger.warning(f"File does not exist: {file_path}")
                return

            result = self.converter(path, self.output_dir, self.options, self.parse_options)
            if result.skipped:
                logger.info(f"Skipped {file_path}: {result.skip_reason}")
            self._last_processed[file_path] = time.time()
        except Eml2MdError as e:
            logger.error(f"Conversion error for {file_path}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error converting {file_path}: {e}")
        finally:
            self._processing.discard(file_path)

    def on_created(self, event: Any) -> None:
        """Handle file creation events.

        Parameters
        ----------
        event : FileSystemEvent
            The file system event

        """
        if event.is_directory:
            return

        file_path = os.fsdecode(event.src_path)
        if self.should_process(file_path):
            self.convert_file(file_path)

    def on_moved(self, event: Any) -> None:
        """Handle file move events.

        Only renames that give a file its ``.eml`` name are converted.

        Parameters
        ----------
        event : FileSystemEvent
            The file system event

        """
        if event.is_directory:
            return

        if Path(os.fsdecode(event.src_path)).suffix.lower() == EML_EXTENSION:
            logger.debug(f"Ignoring move of existing .eml file {event.src_path}")
            return

        file_path = os.fsdecode(event.dest_path)
        if self.should_process(file_path):
            self.convert_file(file_path)


def run_watch_mode(
    paths: List[Path],
    output_dir: Optional[Path] = None,
    options: Optional[NoteOptions] = None,
    parse_options: Optional[EmlOptions] = None,
    recursive: bool = False,
    settle_seconds: float = DEFAULT_WATCH_DEBOUNCE_SECONDS,
) -> int:
    """Run watch mode until interrupted with Ctrl+C.

    Parameters
    ----------
    paths : List[Path]
        Folders to monitor; a file path watches its parent folder
    output_dir : Path, optional
        Folder for notes; defaults to each source's own folder
    options : NoteOptions, optional
        Note options
    parse_options : EmlOptions, optional
        Parser options
    recursive : bool, default False
        Whether to watch subfolders
    settle_seconds : float, default 0.5
        Delay before converting a new file

    Returns
    -------
    int
        Exit code (0 for success)

    """
    handler = EmlEventHandler(
        output_dir=output_dir,
        options=options,
        parse_options=parse_options,
        settle_seconds=settle_seconds,
    )

    observer = Observer()
    watched = 0
    for path in paths:
        if path.is_dir():
            observer.schedule(handler, str(path), recursive=recursive)
            logger.info(f"Watching directory: {path} (recursive: {recursive})")
            watched += 1
        elif path.is_file():
            observer.schedule(handler, str(path.parent), recursive=False)
            logger.info(f"Watching directory of file: {path}")
            watched += 1
        else:
            logger.warning(f"Path does not exist: {path}")

    observer.start()
    print(f"Watch mode active. Monitoring {watched} path(s). Press Ctrl+C to stop.")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping watch mode...")
        observer.stop()

    observer.join()
    logger.info("Watch mode stopped")
    return EXIT_SUCCESS
