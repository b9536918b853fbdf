# tests/test_splitter.py
import re

import pytest

from treesearch.core.splitter import split_at_all_matches
from treesearch.models import MatchTriple


def test_no_match_returns_empty_list():
    assert split_at_all_matches("something", re.compile("nothere")) == []


def test_single_match():
    triples = split_at_all_matches("something", re.compile("some"))
    assert triples == [MatchTriple("", "some", "thing")]


def test_several_matches_on_one_line():
    triples = split_at_all_matches("foo bar foo", re.compile("foo"))
    assert triples == [
        MatchTriple("", "foo", " bar foo"),
        MatchTriple("foo bar ", "foo", ""),
    ]


def test_match_at_end_of_string():
    triples = split_at_all_matches("abcxyz", re.compile("xyz"))
    assert triples == [MatchTriple("abc", "xyz", "")]


def test_matches_do_not_overlap():
    triples = split_at_all_matches("aaaa", re.compile("aa"))
    assert [t.match for t in triples] == ["aa", "aa"]
    assert [len(t.prefix) for t in triples] == [0, 2]


@pytest.mark.parametrize("text, pattern", [
    ("foo bar foo", "o+"),
    ("baac", "a*"),
    ("a", "|a"),
    ("hello world", r"\b"),
    ("rightleft", ".*right.*"),
    ("", "x*"),
])
def test_every_triple_rebuilds_the_input(text, pattern):
    triples = split_at_all_matches(text, re.compile(pattern))
    for triple in triples:
        assert triple.joined() == text

    starts = [len(t.prefix) for t in triples]
    assert starts == sorted(set(starts))

    ends = [len(t.prefix) + len(t.match) for t in triples]
    for previous_end, start in zip(ends, starts[1:]):
        assert start >= previous_end


def test_empty_match_right_after_a_match_is_dropped():
    triples = split_at_all_matches("baac", re.compile("a*"))
    assert [(len(t.prefix), t.match) for t in triples] == [(0, ""), (1, "aa"), (4, "")]


def test_non_empty_match_at_same_start_as_empty_match_is_dropped():
    triples = split_at_all_matches("a", re.compile("|a"))
    assert [(len(t.prefix), t.match) for t in triples] == [(0, ""), (1, "")]
