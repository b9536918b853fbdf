# src/treesearch/core/discovery.py
import logging
import os
import queue
import stat
import threading
from typing import Callable, FrozenSet, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

from treesearch import config
from treesearch.core.ignore import ExcludeRules
from treesearch.models import Entry, ErrorEvent, ErrorKind, SkipEvent, SkipReason

logger = logging.getLogger(__name__)

OnError = Callable[[ErrorEvent], None]
OnSkip = Callable[[SkipEvent], None]

_POLL_SECONDS = 0.05
_JOIN_SECONDS = 1.0


Identity = Tuple[int, int]


class _Dir(NamedTuple):
    """A directory waiting to be listed, with its location relative to the user's root."""
    path: str
    rel_path: str
    depth: int
    # Identities of the directories above this one on the walked path
    ancestors: FrozenSet[Identity] = frozenset()


def _ignore(_event) -> None:
    pass


class EntryDiscoverer:
    """
    Turns root paths into a stream of Entry objects.

    Shallow discovery lists the immediate children of directory roots and passes
    file roots through as they are. Recursive discovery repeats shallow discovery
    level by level (breadth-first), so every entry of level N is produced before
    any entry of level N+1.

    Problems never stop the walk: they are handed to `on_error` and the offending
    path is skipped. Every directory remembers the (device, inode) identities of its
    ancestors, so a symlink pointing back at one of them is reported once instead of
    being walked forever. Links to directories elsewhere in the tree are walked.
    """

    def __init__(
        self,
        on_error: Optional[OnError] = None,
        on_skip: Optional[OnSkip] = None,
        exclude: Optional[ExcludeRules] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.on_error = on_error or _ignore
        self.on_skip = on_skip or _ignore
        self.exclude = exclude
        self.cancel_event = cancel_event

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def discover(self, paths: Sequence[str], recursive: bool = False) -> Iterator[Entry]:
        if recursive:
            return self.discover_recursive(paths)
        return self.discover_shallow(paths)

    def discover_shallow(self, paths: Sequence[str]) -> Iterator[Entry]:
        """Yields the children of every directory root and every file root itself."""
        for entry, _ in self._list_level(_roots(paths), seen_roots=set()):
            yield entry

    def discover_recursive(self, paths: Sequence[str]) -> Iterator[Entry]:
        """Breadth-first walk below every root."""
        frontier: List[_Dir] = _roots(paths)
        seen_roots: Optional[Set[Identity]] = set()
        level = 0

        while frontier and not self._cancelled():
            logger.debug("Discovery level %d: %d director(y/ies)", level, len(frontier))
            next_frontier: List[_Dir] = []
            for entry, lineage in self._list_level(frontier, seen_roots):
                yield entry
                child = self._descend_into(entry, lineage)
                if child is not None:
                    next_frontier.append(child)
            frontier = next_frontier
            # Only the user's roots are de-duplicated
            seen_roots = None
            level += 1

    # --- internals ---

    def _list_level(
        self,
        frontier: Iterable[_Dir],
        seen_roots: Optional[Set[Identity]],
    ) -> Iterator[Tuple[Entry, FrozenSet[Identity]]]:
        """Yields (entry, identities of the directories above the entry)."""
        for item in frontier:
            if self._cancelled():
                return

            # Follows symlinks: a link to a directory is listed like a directory
            try:
                info = os.stat(item.path)
            except OSError as e:
                self.on_error(ErrorEvent(item.path, _describe(e), ErrorKind.STAT))
                continue

            identity = (info.st_dev, info.st_ino)
            if seen_roots is not None:
                if identity in seen_roots:
                    logger.debug("Root %s given more than once", item.path)
                    continue
                seen_roots.add(identity)

            if not stat.S_ISDIR(info.st_mode):
                name = _base_name(item.path)
                yield _entry_from_stat(item.path, name, info, item.depth, item.rel_path or name), item.ancestors
                continue

            lineage = item.ancestors | {identity}
            for entry in self._list_children(item):
                yield entry, lineage

    def _list_children(self, parent: _Dir) -> Iterator[Entry]:
        try:
            with os.scandir(parent.path) as it:
                children = sorted(it, key=lambda d: d.name)
        except OSError as e:
            self.on_error(ErrorEvent(parent.path, _describe(e), ErrorKind.READ_DIR))
            return

        for child in children:
            if self._cancelled():
                return

            path = os.path.join(parent.path, child.name)
            rel_path = f"{parent.rel_path}/{child.name}" if parent.rel_path else child.name
            try:
                # Describes the link itself, not its target
                info = child.stat(follow_symlinks=False)
            except OSError as e:
                self.on_error(ErrorEvent(path, _describe(e), ErrorKind.STAT))
                continue

            is_directory = stat.S_ISDIR(info.st_mode)
            if self.exclude and self.exclude.is_excluded(rel_path, is_directory):
                logger.debug("Excluded %s", rel_path)
                self.on_skip(SkipEvent(path, child.name, SkipReason.EXCLUDED))
                continue

            yield _entry_from_stat(path, child.name, info, parent.depth, rel_path)

    def _descend_into(self, entry: Entry, lineage: FrozenSet[Identity]) -> Optional[_Dir]:
        """Decides whether `entry` goes into the next BFS level."""
        if not (entry.is_directory or entry.is_symlink):
            return None

        try:
            target = os.stat(entry.path)
        except OSError:
            # Dangling symlink, nothing to walk into
            return None
        if not stat.S_ISDIR(target.st_mode):
            return None

        if (target.st_dev, target.st_ino) in lineage:
            self.on_error(ErrorEvent(entry.path, config.SYMLINK_LOOP_MESSAGE, ErrorKind.SYMLINK_LOOP))
            return None

        return _Dir(entry.path, entry.rel_path, entry.depth + 1, lineage)


def _roots(paths: Sequence[str]) -> List[_Dir]:
    return [_Dir(path, "", 0) for path in paths]


def _entry_from_stat(path: str, name: str, info: os.stat_result, depth: int, rel_path: str) -> Entry:
    return Entry(
        path=path,
        name=name,
        is_directory=stat.S_ISDIR(info.st_mode),
        is_symlink=stat.S_ISLNK(info.st_mode),
        size=info.st_size,
        mtime=info.st_mtime,
        permissions=stat.S_IMODE(info.st_mode),
        depth=depth,
        rel_path=rel_path,
    )


def _base_name(path: str) -> str:
    return os.path.basename(os.path.normpath(path))


def _describe(error: OSError) -> str:
    if error.filename is not None:
        return f"{error.strerror or error}: {error.filename}"
    return str(error)


# --- Pipelined discovery ---

_ENTRY = "entry"
_ERROR = "error"
_SKIP = "skip"
_FAILED = "failed"
_DONE = "done"


def prefetch_entries(
    paths: Sequence[str],
    recursive: bool = False,
    on_error: Optional[OnError] = None,
    on_skip: Optional[OnSkip] = None,
    exclude: Optional[ExcludeRules] = None,
    cancel_event: Optional[threading.Event] = None,
    buffer_size: int = config.DEFAULT_BUFFER_SIZE,
) -> Iterator[Entry]:
    """
    Runs discovery on a background thread and yields its entries in the same order
    the synchronous discoverer would.

    Error and skip events travel through the same bounded queue as the entries and
    are dispatched here, on the consuming thread. Closing this generator (or setting
    `cancel_event`) stops the producer.
    """
    on_error = on_error or _ignore
    on_skip = on_skip or _ignore
    channel: "queue.Queue[Tuple[str, object]]" = queue.Queue(maxsize=buffer_size)
    stop = threading.Event()

    def stopped() -> bool:
        return stop.is_set() or (cancel_event is not None and cancel_event.is_set())

    def put(kind: str, payload: object) -> bool:
        while not stopped():
            try:
                channel.put((kind, payload), timeout=_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    discoverer = EntryDiscoverer(
        on_error=lambda event: put(_ERROR, event),
        on_skip=lambda event: put(_SKIP, event),
        exclude=exclude,
        cancel_event=stop,
    )

    def produce() -> None:
        try:
            for entry in discoverer.discover(paths, recursive):
                if not put(_ENTRY, entry):
                    logger.debug("Discovery producer stopped early")
                    return
        except Exception as e:
            put(_FAILED, e)
            return
        put(_DONE, None)

    producer = threading.Thread(target=produce, name="treesearch-discovery", daemon=True)
    producer.start()
    try:
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return
            try:
                kind, payload = channel.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                continue

            if kind == _ENTRY:
                yield payload
            elif kind == _ERROR:
                on_error(payload)
            elif kind == _SKIP:
                on_skip(payload)
            elif kind == _FAILED:
                raise payload
            else:
                return
    finally:
        stop.set()
        producer.join(timeout=_JOIN_SECONDS)


def iter_entries(
    paths: Sequence[str],
    recursive: bool = False,
    on_error: Optional[OnError] = None,
    on_skip: Optional[OnSkip] = None,
    exclude: Optional[ExcludeRules] = None,
    cancel_event: Optional[threading.Event] = None,
    prefetch: bool = config.DEFAULT_PREFETCH,
    buffer_size: int = config.DEFAULT_BUFFER_SIZE,
) -> Iterator[Entry]:
    """Entry stream for a search, either pipelined on a thread or synchronous."""
    if prefetch:
        return prefetch_entries(paths, recursive, on_error, on_skip, exclude, cancel_event, buffer_size)
    discoverer = EntryDiscoverer(on_error, on_skip, exclude, cancel_event)
    return discoverer.discover(paths, recursive)
