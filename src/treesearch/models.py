# src/treesearch/models.py
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from treesearch import config
from treesearch.errors import ConfigError, PatternError


@dataclass(frozen=True)
class Entry:
    """Immutable description of one discovered file or directory."""
    path: str
    name: str
    is_directory: bool
    is_symlink: bool
    size: int = 0
    mtime: float = 0.0
    permissions: int = 0
    depth: int = 0
    rel_path: str = ""


@dataclass(frozen=True)
class MatchTriple:
    """A match split into the text before it, the match and the text after it."""
    prefix: str
    match: str
    suffix: str

    def joined(self) -> str:
        return self.prefix + self.match + self.suffix


@dataclass(frozen=True)
class MatchEvent:
    path: str
    text: str
    line: int = -1
    column: int = -1
    prefix: str = ""
    suffix: str = ""
    is_directory: bool = False

    @property
    def is_filename_match(self) -> bool:
        return self.line == -1


class ErrorKind(Enum):
    STAT = "stat"
    READ_DIR = "read_dir"
    OPEN = "open"
    READ = "read"
    SYMLINK_LOOP = "symlink_loop"


class SkipReason(Enum):
    FILTERED = "filtered"
    BINARY = "binary"
    NOT_A_FILE = "not_a_file"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class ErrorEvent:
    path: str
    message: str
    kind: ErrorKind


@dataclass(frozen=True)
class SkipEvent:
    path: str
    name: str
    reason: SkipReason


class SearchState(Enum):
    VALIDATING = "validating"
    DISCOVERING = "discovering"
    FILENAME_MATCHING = "filename_matching"
    CONTENT_MATCHING = "content_matching"
    DONE = "done"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


@dataclass
class SearchCounters:
    """Per-run counters. Owned by a single orchestrator and only touched by its thread."""
    discovered: int = 0
    searched: int = 0
    matched: int = 0
    skipped: int = 0
    errors: int = 0

    def summary(self) -> str:
        return (
            f"{self.matched} matched, {self.searched} searched, "
            f"{self.discovered} discovered, {self.skipped} skipped."
        )


@dataclass(frozen=True)
class SearchConfig:
    """
    Immutable snapshot of everything a search needs.
    Call validate() (or compile(), which validates first) before using it.
    """
    pattern: str
    paths: Tuple[str, ...] = config.DEFAULT_PATHS
    filter_pattern: Optional[str] = None
    recursive: bool = config.DEFAULT_RECURSIVE
    ignore_case: bool = config.DEFAULT_IGNORE_CASE
    filenames_only: bool = config.DEFAULT_FILENAMES_ONLY
    quiet: bool = config.DEFAULT_QUIET
    verbose: bool = config.DEFAULT_VERBOSE
    skip_binary: bool = config.DEFAULT_SKIP_BINARY
    absolute_paths: bool = config.DEFAULT_ABSOLUTE_PATHS
    color: bool = config.DEFAULT_COLOR
    exclude: Tuple[str, ...] = field(default_factory=tuple)
    prefetch: bool = config.DEFAULT_PREFETCH
    buffer_size: int = config.DEFAULT_BUFFER_SIZE

    @property
    def has_filter(self) -> bool:
        return bool(self.filter_pattern)

    def validate(self) -> None:
        if self.quiet and self.verbose:
            raise ConfigError(config.MSG_QUIET_AND_VERBOSE)
        if self.has_filter and self.filenames_only:
            raise ConfigError(config.MSG_FILTER_WITH_NAMES)
        if self.buffer_size < 1:
            raise ConfigError(f"Buffer size must be positive, got {self.buffer_size}")

    def compile(self) -> Tuple[re.Pattern[str], Optional[re.Pattern[str]]]:
        """Validates the snapshot and returns the compiled (pattern, filter) pair."""
        self.validate()
        pattern = _compile("mandatory", self.pattern, self.ignore_case)
        name_filter = None
        if self.has_filter:
            name_filter = _compile("filter", self.filter_pattern, self.ignore_case)
        return pattern, name_filter


def _compile(which: str, source: str, ignore_case: bool) -> re.Pattern[str]:
    if ignore_case:
        source = config.IGNORE_CASE_FLAG + source
    try:
        return re.compile(source)
    except re.error as e:
        raise PatternError(which, source, e) from e
