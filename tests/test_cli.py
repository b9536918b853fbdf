# tests/test_cli.py
import io
import os
import sys
from unittest.mock import patch

import pytest

from treesearch.cli import build_config, create_arg_parser, main
from treesearch.models import ErrorEvent, ErrorKind, MatchEvent, SearchCounters, SkipEvent, SkipReason
from treesearch.printer import ConsolePrinter, Palette


def run_cli(*argv):
    with patch.object(sys, "argv", ["treesearch", *argv]):
        main()


# --- Test 1: argument parsing ---

def test_defaults():
    args = create_arg_parser().parse_args(["needle"])
    config = build_config(args)

    assert config.pattern == "needle"
    assert config.paths == (".",)
    assert config.filter_pattern is None
    assert config.skip_binary is True
    assert config.color is True
    assert config.prefetch is True


def test_flags_map_to_config():
    args = create_arg_parser().parse_args([
        "-r", "-i", "-v", "--noskip", "--nocolor", "-a", "-f", "txt$",
        "-x", "*.log", "-x", "build/", "--no-prefetch", "needle", "a", "b",
    ])
    config = build_config(args)

    assert config.paths == ("a", "b")
    assert config.recursive and config.ignore_case and config.verbose and config.absolute_paths
    assert config.skip_binary is False
    assert config.color is False
    assert config.prefetch is False
    assert config.filter_pattern == "txt$"
    assert config.exclude == ("*.log", "build/")


def test_missing_pattern_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as info:
        run_cli()
    assert info.value.code == 2


# --- Test 2: printer formatting ---

def test_content_match_format():
    printer = ConsolePrinter(palette=Palette.plain())
    event = MatchEvent("dir/f.txt", "bar", 3, 5, prefix="foo  ", suffix="!")
    assert printer.format_match(event) == "dir/f.txt:3:5: foo  bar!"


def test_content_match_is_highlighted():
    printer = ConsolePrinter(palette=Palette.ansi())
    event = MatchEvent("f.txt", "bar", 1, 0, suffix="x")
    assert printer.format_match(event) == "f.txt:1:0: \033[92;4mbar\033[0mx"


def test_filename_match_format():
    printer = ConsolePrinter(palette=Palette.plain())
    path = os.path.join("right", "rightleft")
    event = MatchEvent(path, "left", prefix="right", is_directory=True)
    assert printer.format_match(event) == os.path.join("right", "rightleft") + os.sep


def test_quiet_prints_only_matched_text():
    printer = ConsolePrinter(palette=Palette.ansi(), quiet=True)
    assert printer.format_match(MatchEvent("f.txt", "bar", 1, 4, prefix="foo ")) == "bar"


def test_errors_and_skips_only_when_verbose():
    quiet_err = io.StringIO()
    ConsolePrinter(err=quiet_err).on_error(ErrorEvent("x", "boom", ErrorKind.OPEN))
    assert quiet_err.getvalue() == ""

    err = io.StringIO()
    printer = ConsolePrinter(err=err, verbose=True)
    printer.on_error(ErrorEvent("x", "boom", ErrorKind.OPEN))
    printer.on_skip(SkipEvent("d/top.txt", "top.txt", SkipReason.FILTERED))
    assert err.getvalue().splitlines() == ["x: boom", "Skipping top.txt"]


def test_summary_line():
    out = io.StringIO()
    ConsolePrinter(out=out).summary(SearchCounters(discovered=4, searched=3, matched=2, skipped=1))
    assert out.getvalue() == "2 matched, 3 searched, 4 discovered, 1 skipped.\n"


# --- Test 3: end-to-end runs ---

def test_end_to_end_content_search(testdir, capsys, monkeypatch):
    monkeypatch.chdir(testdir)
    run_cli("--nocolor", "some", "left")

    out = capsys.readouterr().out.splitlines()
    assert out == [
        f"{os.path.join('left', 'underleft.txt')}:1:0: something",
        "1 matched, 1 searched, 1 discovered, 0 skipped.",
    ]


def test_end_to_end_filename_search(testdir, capsys, monkeypatch):
    monkeypatch.chdir(testdir)
    run_cli("--nocolor", "-rn", "rightleft", "right")

    out = capsys.readouterr().out.splitlines()
    assert out[0] == os.path.join("right", "rightleft") + os.sep
    assert out[-1] == "1 matched, 4 searched, 4 discovered, 0 skipped."


def test_quiet_run_has_no_summary(testdir, capsys):
    run_cli("-q", "-r", "bar", str(testdir))
    assert capsys.readouterr().out.splitlines() == ["bar", "bar"]


def test_verbose_reports_missing_path(testdir, capsys):
    run_cli("-v", "--nocolor", "some", str(testdir / "missing"), str(testdir / "left"))
    captured = capsys.readouterr()
    assert str(testdir / "missing") in captured.err
    assert "1 matched" in captured.out


def test_errors_are_silent_without_verbose(testdir, capsys):
    run_cli("--nocolor", "some", str(testdir / "missing"))
    assert capsys.readouterr().err == ""


def test_exclude_from_file(testdir, tmp_path, capsys):
    exclude_file = tmp_path / "excludes.txt"
    exclude_file.write_text("rightleft/\n", encoding="utf-8")

    run_cli("-q", "-r", "--exclude-from", str(exclude_file), "bar", str(testdir))
    assert capsys.readouterr().out.splitlines() == ["bar"]


@pytest.mark.parametrize("argv, message", [
    (["-q", "-v", "x"], "mutually exclusive"),
    (["-n", "-f", "y", "x"], "redundant"),
    (["(oops"], "Bad mandatory regex"),
])
def test_config_errors_exit_non_zero(argv, message, capsys):
    with pytest.raises(SystemExit) as info:
        run_cli("--nocolor", *argv)
    assert info.value.code == 1
    assert message in capsys.readouterr().err


def test_keyboard_interrupt_exits_non_zero(testdir, capsys):
    with patch("treesearch.cli.SearchOrchestrator.run", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as info:
            run_cli("--nocolor", "x", str(testdir))
    assert info.value.code == 1
    assert "Interrupted by user." in capsys.readouterr().err
