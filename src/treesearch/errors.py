# src/treesearch/errors.py
import re


class SearchError(Exception):
    """Base class for errors raised by treesearch."""


class ConfigError(SearchError):
    """The search configuration is invalid. Raised before any discovery happens."""


class PatternError(ConfigError):
    """One of the regular expressions failed to compile."""

    def __init__(self, which: str, source: str, error: re.error):
        self.which = which
        self.source = source
        self.error = error
        super().__init__(f"Bad {which} regex: {error}")
