# src/treesearch/printer.py
import os
import sys
from dataclasses import dataclass
from typing import Optional, TextIO

from treesearch import config
from treesearch.core.search import SearchListener
from treesearch.models import ErrorEvent, MatchEvent, SearchCounters, SkipEvent, SkipReason


@dataclass(frozen=True)
class Palette:
    """ANSI codes used when printing. The plain palette turns coloring off."""
    reset: str = ""
    error: str = ""
    match: str = ""

    @classmethod
    def ansi(cls) -> "Palette":
        return cls(config.ANSI_RESET, config.ANSI_ERROR, config.ANSI_MATCH)

    @classmethod
    def plain(cls) -> "Palette":
        return cls()

    @classmethod
    def for_config(cls, color: bool) -> "Palette":
        return cls.ansi() if color else cls.plain()


class ConsolePrinter(SearchListener):
    """Prints search events the way the command line tool shows them."""

    def __init__(
        self,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        palette: Palette = Palette.plain(),
        quiet: bool = False,
        verbose: bool = False,
    ):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.palette = palette
        self.quiet = quiet
        self.verbose = verbose

    def format_match(self, event: MatchEvent) -> str:
        if self.quiet:
            return event.text

        p = self.palette
        highlighted = f"{event.prefix}{p.match}{event.text}{p.reset}{event.suffix}"
        if event.is_filename_match:
            directory, _ = os.path.split(event.path)
            dir_prefix = directory if not directory or directory.endswith(os.sep) else directory + os.sep
            separator = os.sep if event.is_directory else ""
            return f"{dir_prefix}{highlighted}{separator}"
        return f"{event.path}:{event.line}:{event.column}: {highlighted}"

    def on_match(self, event: MatchEvent) -> None:
        print(self.format_match(event), file=self.out)

    def on_error(self, event: ErrorEvent) -> None:
        if self.verbose:
            self.error(f"{event.path}: {event.message}")

    def on_skip(self, event: SkipEvent) -> None:
        if not self.verbose:
            return
        if event.reason is SkipReason.BINARY:
            self.error(f"Skipping {event.path} (binary)")
        elif event.reason is SkipReason.NOT_A_FILE:
            self.error(f"Skipping {event.path} (not a regular file)")
        elif event.reason is SkipReason.EXCLUDED:
            self.error(f"Skipping {event.path} (excluded)")
        else:
            self.error(f"Skipping {event.name}")

    def error(self, message: str) -> None:
        print(f"{self.palette.error}{message}{self.palette.reset}", file=self.err)

    def summary(self, counters: SearchCounters) -> None:
        print(counters.summary(), file=self.out)
