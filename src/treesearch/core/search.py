# src/treesearch/core/search.py
import logging
import os
import threading
import re
from typing import Iterator, Optional

from treesearch.core.discovery import iter_entries
from treesearch.core.ignore import ExcludeRules, load_exclude_rules
from treesearch.core.scanner import ContentScanner, match_name
from treesearch.errors import ConfigError
from treesearch.models import (
    Entry,
    ErrorEvent,
    MatchEvent,
    SearchConfig,
    SearchCounters,
    SearchState,
    SkipEvent,
    SkipReason,
)

logger = logging.getLogger(__name__)


class SearchListener:
    """Receives search events in discovery order. Override the hooks you need."""

    def on_match(self, event: MatchEvent) -> None:
        pass

    def on_error(self, event: ErrorEvent) -> None:
        pass

    def on_skip(self, event: SkipEvent) -> None:
        pass


class SearchOrchestrator:
    """
    Runs one search: validates the configuration, pulls entries from discovery,
    applies the name filter and hands each entry to filename or content matching.

    Counters and listener calls only ever happen on the thread iterating the search,
    one event at a time, in discovery order.
    """

    def __init__(
        self,
        config: SearchConfig,
        listener: Optional[SearchListener] = None,
        cancel_event: Optional[threading.Event] = None,
        exclude: Optional[ExcludeRules] = None,
    ):
        self.config = config
        self.listener = listener or SearchListener()
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self.exclude = exclude
        self.counters = SearchCounters()
        self.state = SearchState.VALIDATING
        self._pattern: Optional[re.Pattern[str]] = None
        self._filter: Optional[re.Pattern[str]] = None

    @property
    def cancelled(self) -> bool:
        return self.state is SearchState.CANCELLED

    def cancel(self) -> None:
        self.cancel_event.set()

    def validate(self) -> None:
        """Compiles the patterns. Moves to ABORTED and re-raises on any configuration error."""
        self.state = SearchState.VALIDATING
        try:
            self._pattern, self._filter = self.config.compile()
            if self.exclude is None and self.config.exclude:
                self.exclude = load_exclude_rules(self.config.exclude)
        except ConfigError:
            self.state = SearchState.ABORTED
            raise

    def run(self) -> SearchCounters:
        for _ in self.iter_matches():
            pass
        return self.counters

    def iter_matches(self) -> Iterator[MatchEvent]:
        """Streams match events. The listener is notified of every event as well."""
        self.validate()
        self.state = SearchState.DISCOVERING

        entries = iter_entries(
            self._roots(),
            recursive=self.config.recursive,
            on_error=self._report_error,
            on_skip=self._report_skip,
            exclude=self.exclude,
            cancel_event=self.cancel_event,
            prefetch=self.config.prefetch,
            buffer_size=self.config.buffer_size,
        )
        scanner = ContentScanner(
            self._pattern,
            skip_binary=self.config.skip_binary,
            on_error=self._report_error,
            on_skip=self._report_skip,
            cancel_event=self.cancel_event,
        )

        try:
            for entry in entries:
                if self.cancel_event.is_set():
                    break
                self.counters.discovered += 1

                if self._filter is not None and not self._filter.search(entry.name):
                    self._report_skip(SkipEvent(entry.path, entry.name, SkipReason.FILTERED))
                    continue

                if self.config.filenames_only:
                    yield from self._match_filename(entry)
                else:
                    yield from self._match_content(entry, scanner)
                self.state = SearchState.DISCOVERING
        finally:
            close = getattr(entries, "close", None)
            if close is not None:
                close()

        if self.cancel_event.is_set():
            logger.debug("Search cancelled after %d entries", self.counters.discovered)
            self.state = SearchState.CANCELLED
        else:
            self.state = SearchState.DONE

    # --- per-entry dispatch ---

    def _match_filename(self, entry: Entry) -> Iterator[MatchEvent]:
        self.state = SearchState.FILENAME_MATCHING
        self.counters.searched += 1
        for event in match_name(entry, self._pattern):
            yield self._report_match(event)

    def _match_content(self, entry: Entry, scanner: ContentScanner) -> Iterator[MatchEvent]:
        self.state = SearchState.CONTENT_MATCHING
        for event in scanner.scan(entry):
            yield self._report_match(event)
        if scanner.scanned:
            self.counters.searched += 1

    def _roots(self):
        paths = self.config.paths or (".",)
        if self.config.absolute_paths:
            return [os.path.abspath(path) for path in paths]
        return list(paths)

    # --- event sinks ---

    def _report_match(self, event: MatchEvent) -> MatchEvent:
        self.counters.matched += 1
        self.listener.on_match(event)
        return event

    def _report_error(self, event: ErrorEvent) -> None:
        self.counters.errors += 1
        self.listener.on_error(event)

    def _report_skip(self, event: SkipEvent) -> None:
        self.counters.skipped += 1
        if event.reason is SkipReason.FILTERED:
            logger.debug("Skipping %s", event.name)
        self.listener.on_skip(event)


def search(
    config: SearchConfig,
    listener: Optional[SearchListener] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SearchCounters:
    """Runs a whole search and returns its counters."""
    return SearchOrchestrator(config, listener, cancel_event).run()
