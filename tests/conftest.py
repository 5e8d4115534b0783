"""
Pytest configuration and shared fixtures
"""

import json
from pathlib import Path
from typing import Any

import pytest

from chordsheet.chord_database import ChordDatabase
from chordsheet.chord_resolver import ChordOracle
from chordsheet.markup import MarkupTransformer

# A small slice of the chords-db guitar layout. D has no positions and F carries
# malformed fret symbols, to exercise the fallback and tolerance paths.
FIXTURE_CHORDS: dict[str, Any] = {
    "chords": {
        "C": [
            {"key": "C", "suffix": "major", "positions": [{"frets": "x32010"}]},
            {"key": "C", "suffix": "7", "positions": [{"frets": "x32310"}]},
        ],
        "Csharp": [
            {"key": "C#", "suffix": "minor", "positions": [{"frets": "x46654"}]},
        ],
        "D": [
            {"key": "D", "suffix": "major", "positions": []},
        ],
        "Eb": [
            {"key": "Eb", "suffix": "major", "positions": [{"frets": "x65343"}]},
        ],
        "E": [
            {"key": "E", "suffix": "minor", "positions": [{"frets": "022000"}]},
            {"key": "E", "suffix": "m7", "positions": [{"frets": "022030"}, {"frets": "x7978x"}]},
        ],
        "F": [
            {"key": "F", "suffix": "major", "positions": [{"frets": "1z3?11"}]},
        ],
        "Fsharp": [
            {"key": "F#", "suffix": "major", "positions": [{"frets": [2, 4, 4, 3, 2, 2]}]},
        ],
        "G": [
            {"key": "G", "suffix": "major", "positions": [{"frets": "320003"}]},
        ],
        "Ab": [
            {"key": "Ab", "suffix": "major", "positions": [{"frets": "466544"}]},
        ],
        "A": [
            {"key": "A", "suffix": "minor", "positions": [{"frets": "x02210"}]},
            {"key": "A", "suffix": "7sus4", "positions": [{"frets": "x02030"}]},
        ],
        "Bb": [
            {"key": "Bb", "suffix": "major", "positions": [{"frets": "x13331"}]},
        ],
        "B": [
            {"key": "B", "suffix": "major", "positions": [{"frets": "xx9bcb"}]},
        ],
    }
}


@pytest.fixture
def chord_db() -> ChordDatabase:
    return ChordDatabase.from_dict(FIXTURE_CHORDS)


@pytest.fixture
def oracle(chord_db: ChordDatabase) -> ChordOracle:
    return ChordOracle(chord_db)


@pytest.fixture
def transformer(oracle: ChordOracle) -> MarkupTransformer:
    return MarkupTransformer(oracle)


@pytest.fixture
def db_file(tmp_path: Path) -> Path:
    path = tmp_path / "guitar.json"
    path.write_text(json.dumps(FIXTURE_CHORDS), encoding="utf-8")
    return path
