# src/treesearch/core/splitter.py
import re
from typing import List

from treesearch.models import MatchTriple


def split_at_all_matches(text: str, pattern: re.Pattern[str]) -> List[MatchTriple]:
    """
    Returns one triple per match in `text`, left to right.
    Each triple holds what comes before the match, the match itself and the
    rest of the string, so prefix + match + suffix is always `text`.
    An empty list means there was no match.
    """
    triples: List[MatchTriple] = []
    last_start = -1
    last_end = -1
    last_was_empty = True

    for m in pattern.finditer(text):
        start, end = m.span()
        # re may report a non-empty match starting where an empty one did
        if start <= last_start:
            continue
        # Empty matches glued to the end of the previous match are noise
        if start == end and start == last_end and not last_was_empty:
            continue
        triples.append(MatchTriple(text[:start], text[start:end], text[end:]))
        last_start, last_end = start, end
        last_was_empty = start == end

    return triples
