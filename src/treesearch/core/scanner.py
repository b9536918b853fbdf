# src/treesearch/core/scanner.py
import logging
import threading
import re
from typing import Callable, Iterator, Optional

from treesearch import config
from treesearch.core.splitter import split_at_all_matches
from treesearch.models import Entry, ErrorEvent, ErrorKind, MatchEvent, SkipEvent, SkipReason

logger = logging.getLogger(__name__)


def _ignore(_event) -> None:
    pass


def leading_whitespace(line: str) -> int:
    """Number of whitespace characters before the first non-whitespace one."""
    return len(line) - len(line.lstrip())


class ContentScanner:
    """
    Searches one file at a time, line by line.

    Matching runs on the stripped line, but columns are reported in the coordinates
    of the original line. With `skip_binary` on, the first line holding a NUL byte
    ends the scan of the whole file.
    """

    def __init__(
        self,
        pattern: re.Pattern[str],
        skip_binary: bool = config.DEFAULT_SKIP_BINARY,
        on_error: Optional[Callable[[ErrorEvent], None]] = None,
        on_skip: Optional[Callable[[SkipEvent], None]] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.pattern = pattern
        self.skip_binary = skip_binary
        self.on_error = on_error or _ignore
        self.on_skip = on_skip or _ignore
        self.cancel_event = cancel_event
        # Whether the last scan() got as far as opening its file
        self.scanned = False

    def scan(self, entry: Entry) -> Iterator[MatchEvent]:
        self.scanned = False

        if entry.is_directory or entry.is_symlink:
            self.on_skip(SkipEvent(entry.path, entry.name, SkipReason.NOT_A_FILE))
            return

        try:
            handle = open(entry.path, "r", encoding="utf-8", errors="replace", newline="\n")
        except OSError as e:
            self.on_error(ErrorEvent(entry.path, str(e), ErrorKind.OPEN))
            return

        with handle:
            self.scanned = True
            line_number = 0
            try:
                for raw in handle:
                    if self.cancel_event is not None and self.cancel_event.is_set():
                        return
                    line_number += 1
                    # Only "\n" ends a line; a lone "\r" is part of the text
                    if raw.endswith("\n"):
                        raw = raw[:-1]
                        if raw.endswith("\r"):
                            raw = raw[:-1]

                    line = raw.strip()
                    if self.skip_binary and config.NUL in line:
                        logger.debug("NUL byte on line %d of %s, skipping the rest", line_number, entry.path)
                        self.on_skip(SkipEvent(entry.path, entry.name, SkipReason.BINARY))
                        return

                    yield from self._match_line(entry, line, line_number, leading_whitespace(raw))
            except OSError as e:
                self.on_error(ErrorEvent(entry.path, str(e), ErrorKind.READ))

    def _match_line(self, entry: Entry, line: str, line_number: int, leading_space: int) -> Iterator[MatchEvent]:
        for triple in split_at_all_matches(line, self.pattern):
            yield MatchEvent(
                path=entry.path,
                text=triple.match,
                line=line_number,
                column=len(triple.prefix) + leading_space,
                prefix=triple.prefix,
                suffix=triple.suffix,
            )


def match_name(entry: Entry, pattern: re.Pattern[str]) -> Iterator[MatchEvent]:
    """Matches against the entry's base name. Line and column are -1 for name matches."""
    for triple in split_at_all_matches(entry.name, pattern):
        yield MatchEvent(
            path=entry.path,
            text=triple.match,
            prefix=triple.prefix,
            suffix=triple.suffix,
            is_directory=entry.is_directory,
        )
