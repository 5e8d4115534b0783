"""Collect the distinct, database-backed chord names referenced by a song body."""

import re
from typing import Final

from chordsheet.chord_resolver import ChordOracle

BRACKET_RE: Final[re.Pattern[str]] = re.compile(r"\[([^\]]+)\]")


def find_bracketed(body: str) -> list[str]:
    """Every ``[...]`` candidate in order of appearance, brackets stripped."""
    return BRACKET_RE.findall(body)


def extract_chords(body: str, oracle: ChordOracle) -> list[str]:
    """
    Return the sorted, de-duplicated chord names used in *body*.

    Only bracketed tokens the oracle recognises are kept, so section labels
    such as ``[Chorus]`` never reach diagram generation.
    """
    return sorted({candidate for candidate in find_bracketed(body) if oracle.is_valid(candidate)})
