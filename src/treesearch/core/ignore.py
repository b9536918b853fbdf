# src/treesearch/core/ignore.py
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import pathspec

from treesearch.errors import ConfigError

logger = logging.getLogger(__name__)


class ExcludeRules:
    """
    gitignore-style exclude patterns applied to paths relative to a search root.
    Directories are matched with a trailing slash so that "build/" only prunes directories.
    """

    def __init__(self, spec: pathspec.PathSpec, patterns: List[str]):
        self.spec = spec
        self.patterns = patterns

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def is_excluded(self, rel_path: str, is_directory: bool = False) -> bool:
        if not rel_path:
            return False
        candidate = rel_path.rstrip("/")
        if is_directory:
            candidate += "/"
        return self.spec.match_file(candidate)


def read_exclude_file(exclude_file: Path) -> List[str]:
    """Reads patterns from a .gitignore-style file. Blank lines and comments are left to pathspec."""
    try:
        with open(exclude_file, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except OSError as e:
        raise ConfigError(f"Could not read exclude file '{exclude_file}': {e}") from e


def load_exclude_rules(
    patterns: Optional[Iterable[str]] = None,
    exclude_file: Optional[Path] = None,
) -> ExcludeRules:
    """
    Builds the exclude rules from command line patterns and an optional exclude file.
    Patterns from the file come first so that patterns given on the command line
    (including "!pattern" re-inclusions) take precedence.
    """
    lines: List[str] = []

    if exclude_file is not None:
        lines.extend(read_exclude_file(exclude_file))

    if patterns:
        lines.extend(patterns)

    try:
        spec = pathspec.PathSpec.from_lines("gitwildmatch", lines)
    except Exception as e:
        raise ConfigError(f"Error parsing exclude patterns: {e}") from e

    active = [line for line in lines if line.strip() and not line.lstrip().startswith("#")]
    logger.debug("Loaded %d exclude pattern(s)", len(active))
    return ExcludeRules(spec, active)
