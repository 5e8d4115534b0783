"""Chord name resolution and validity checks against a ChordDatabase."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from chordsheet.chord_database import ChordDatabase, ChordDefinition

MAJOR: Final[str] = "major"

# Accidental spellings -> the key spelling used by the chord database.
# Naturals map to themselves, so the table covers all twelve pitch classes.
CHROMATIC_KEYS: Final[dict[str, str]] = {
    "C": "C",
    "C#": "Csharp",
    "DB": "Csharp",
    "D": "D",
    "D#": "Eb",
    "EB": "Eb",
    "E": "E",
    "F": "F",
    "F#": "Fsharp",
    "GB": "Fsharp",
    "G": "G",
    "G#": "Ab",
    "AB": "Ab",
    "A": "A",
    "A#": "Bb",
    "BB": "Bb",
    "B": "B",
}

# Lower-cased suffix spellings -> database suffix vocabulary.
SUFFIX_ALIASES: Final[dict[str, str]] = {
    "": MAJOR,
    "m": "minor",
    "min": "minor",
    "maj": MAJOR,
    "maj7": "maj7",
    "m7": "m7",
    "min7": "m7",
    "7": "7",
    "7sus4": "7sus4",
    "sus2": "sus2",
    "sus4": "sus4",
    "dim": "dim",
    "aug": "aug",
    "6": "6",
    "9": "9",
    "11": "11",
    "13": "13",
    "add9": "add9",
    "dim7": "dim7",
    "m7b5": "m7b5",
    "maj9": "maj9",
    "m9": "m9",
    "9sus4": "9sus4",
    "6/9": "69",
    "mmaj7": "mmaj7",
}

_CHORD_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^([A-G][#b]?)(.*)$", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class ChordToken:
    """
    A chord name split into database vocabulary.

    Attributes:
        raw:    The text exactly as written, e.g. ``"Ebm7"``.
        key:    Canonical key spelling, e.g. ``"Eb"``.
        suffix: Canonical suffix, e.g. ``"m7"``.
    """

    raw: str
    key: str
    suffix: str


@dataclass(frozen=True)
class ResolvedChord:
    """A ChordToken paired with its database definition (None when absent)."""

    token: ChordToken
    definition: ChordDefinition | None

    @property
    def is_valid(self) -> bool:
        return self.definition is not None


def normalize_key(key: str) -> str:
    """Map a pitch letter plus optional accidental to the database spelling."""
    upper = key.upper()
    return CHROMATIC_KEYS.get(upper, upper)


def normalize_suffix(suffix: str) -> str:
    """Map a free-form chord quality to the database suffix vocabulary."""
    lowered = suffix.lower()
    return SUFFIX_ALIASES.get(lowered, lowered)


def resolve_chord_name(raw: str) -> ChordToken:
    """
    Split a chord name such as ``"A7sus4"`` or ``"Gb"`` into key and suffix.

    Tokens that do not start with a pitch letter are kept whole as the key
    with a ``major`` suffix; the database lookup then decides validity.
    """
    match = _CHORD_NAME_RE.match(raw)
    if not match:
        return ChordToken(raw=raw, key=raw, suffix=MAJOR)

    key, suffix = match.groups()
    return ChordToken(raw=raw, key=normalize_key(key), suffix=normalize_suffix(suffix))


class ChordOracle:
    """
    Answers "is this bracketed text a chord?" for one ChordDatabase.

    The database is injected so that tests and callers can use fixture or
    alternative databases side by side. Every failure (unknown key, unknown
    suffix, malformed input) is reported as an invalid chord rather than an
    exception.
    """

    def __init__(self, database: ChordDatabase) -> None:
        self.database = database

    def resolve(self, raw: str) -> ResolvedChord:
        """Resolve *raw* and attach its definition, if the database has one."""
        if not isinstance(raw, str) or not raw:
            return ResolvedChord(token=ChordToken(raw=str(raw), key="", suffix=MAJOR), definition=None)

        token = resolve_chord_name(raw)
        return ResolvedChord(token=token, definition=self.database.find(token.key, token.suffix))

    def find(self, raw: str) -> ChordDefinition | None:
        return self.resolve(raw).definition

    def is_valid(self, raw: str) -> bool:
        return self.resolve(raw).is_valid
