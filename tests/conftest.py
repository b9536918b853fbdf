# tests/conftest.py
from pathlib import Path

import pytest

from treesearch.core.search import SearchListener


def write_file(path: Path, contents: str) -> Path:
    """Writes contents to path, creating any missing directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    return path


@pytest.fixture
def testdir(tmp_path):
    """
    Small file structure shared by most tests:

    testdir/
    ├── dontsearch.exe
    ├── left/underleft.txt
    ├── right/rightleft/bottomleft.txt
    ├── right/rightright/bottomright.txt
    └── top.txt
    """
    root = tmp_path / "testdir"
    write_file(root / "top.txt", "firstline\n\n\n\n\n" + "middle\n\n\n\n\n" + "lastline")
    write_file(root / "left" / "underleft.txt", "something")
    write_file(root / "dontsearch.exe", "\0foo")
    write_file(root / "right" / "rightleft" / "bottomleft.txt", "bar")
    write_file(root / "right" / "rightright" / "bottomright.txt", "bar")
    return root


class RecordingListener(SearchListener):
    def __init__(self):
        self.matches = []
        self.errors = []
        self.skips = []

    def on_match(self, event):
        self.matches.append(event)

    def on_error(self, event):
        self.errors.append(event)

    def on_skip(self, event):
        self.skips.append(event)

    def found(self):
        """(path, text, line, column) tuples, easy to compare."""
        return [(m.path, m.text, m.line, m.column) for m in self.matches]


@pytest.fixture
def recorder():
    return RecordingListener()
