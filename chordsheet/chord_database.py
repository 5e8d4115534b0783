"""ChordDatabase: read-only lookup of chord fingerings keyed by pitch class."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

STRING_COUNT: Final[int] = 6
MUTED_SYMBOLS: Final[frozenset[str]] = frozenset({"x", "X"})
OPEN_SYMBOL: Final[str] = "0"
MAX_FRET: Final[int] = 15


@dataclass(frozen=True)
class Position:
    """
    One fingering of a chord.

    ``frets`` holds one symbol per string: ``x`` for a muted string, ``0`` for
    an open string, or a single hexadecimal digit for frets 1-15.
    """

    frets: str


@dataclass(frozen=True)
class ChordDefinition:
    """A chord quality available for one key, with its known fingerings."""

    suffix: str
    positions: tuple[Position, ...]


class ChordDatabase:
    """
    Immutable chord-position database.

    Maps a canonical key spelling (``"C"``, ``"Csharp"``, ``"Eb"``...) to the
    ordered definitions for that key. Built once and shared read-only by the
    resolver, the oracle and the diagram synthesizer.

    Usage:

        database = ChordDatabase.load("guitar.json")
        definition = database.find("E", "m7")
    """

    def __init__(self, chords: Mapping[str, list[ChordDefinition]]) -> None:
        self._chords: dict[str, tuple[ChordDefinition, ...]] = {}
        self._index: dict[str, dict[str, ChordDefinition]] = {}

        for key, definitions in chords.items():
            by_suffix: dict[str, ChordDefinition] = {}
            for definition in definitions:
                if definition.suffix in by_suffix:
                    logger.warning("Dropping duplicate suffix %r for key %r.", definition.suffix, key)
                    continue
                by_suffix[definition.suffix] = definition
            self._chords[key] = tuple(by_suffix.values())
            self._index[key] = by_suffix

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self._chords

    def __iter__(self) -> Iterator[str]:
        return iter(self._chords)

    def __len__(self) -> int:
        return len(self._chords)

    def keys(self) -> list[str]:
        """Canonical keys in load order."""
        return list(self._chords)

    def definitions(self, key: str) -> tuple[ChordDefinition, ...]:
        """Ordered definitions for *key*, empty when the key is unknown."""
        return self._chords.get(key, ())

    def find(self, key: str, suffix: str) -> ChordDefinition | None:
        """Return the definition with exactly *suffix* under *key*, if any."""
        by_suffix = self._index.get(key)
        if by_suffix is None:
            return None
        return by_suffix.get(suffix)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> ChordDatabase:
        """
        Read a database from a JSON file.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the file is not a JSON object.
        """
        with open(path, encoding="utf-8") as fh:
            return cls.from_json(fh.read())

    @classmethod
    def from_json(cls, text: str) -> ChordDatabase:
        """
        Parse a database from JSON text.

        Raises:
            ValueError: If the text is not valid JSON or not a JSON object.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Chord database is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> ChordDatabase:
        """
        Build a database from decoded JSON.

        Both the bare ``{key: [definition, ...]}`` mapping and the chords-db
        layout (``{"chords": {key: [...]}, ...}``) are accepted. Malformed
        keys, definitions and positions are dropped with a warning.

        Raises:
            ValueError: If *data* is not a mapping.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Chord database must be a JSON object.")

        chords = data.get("chords", data)
        if not isinstance(chords, Mapping):
            raise ValueError("Chord database 'chords' entry must be a JSON object.")

        parsed: dict[str, list[ChordDefinition]] = {}
        for key, entries in chords.items():
            if not isinstance(key, str) or not key:
                logger.warning("Dropping chord key %r: not a non-empty string.", key)
                continue
            if not isinstance(entries, list):
                logger.warning("Dropping chord key %r: definitions are not a list.", key)
                continue
            definitions = [
                definition
                for definition in (_parse_definition(key, entry) for entry in entries)
                if definition is not None
            ]
            parsed[key] = definitions

        logger.debug("Loaded %d chord keys.", len(parsed))
        return cls(parsed)


# ----------------------------------------------------------------------
# Record schema
# ----------------------------------------------------------------------


class PositionModel(BaseModel):
    """
    One chords-db position record.

    Only ``frets`` is read; ``fingers``, ``baseFret``, ``barres`` and the
    other chords-db fields are ignored.
    """

    frets: str

    @field_validator("frets", mode="before")
    @classmethod
    def normalize_frets(cls, value: Any) -> str:
        """
        Accept a 6-symbol string, or a list of 6 integers where ``-1`` marks
        a muted string and ``0..15`` become one hex digit each.
        """
        if isinstance(value, str):
            if len(value) != STRING_COUNT:
                raise ValueError(f"expected {STRING_COUNT} fret symbols, got {len(value)}")
            return value

        if isinstance(value, list):
            if len(value) != STRING_COUNT:
                raise ValueError(f"expected {STRING_COUNT} frets, got {len(value)}")
            symbols: list[str] = []
            for fret in value:
                if isinstance(fret, bool) or not isinstance(fret, int):
                    raise ValueError(f"fret {fret!r} is not an integer")
                if fret > MAX_FRET:
                    raise ValueError(f"fret {fret} is above {MAX_FRET}")
                symbols.append("x" if fret < 0 else format(fret, "x"))
            return "".join(symbols)

        raise ValueError("frets must be a string or a list of integers")


class ChordDefinitionModel(BaseModel):
    """
    One chords-db definition record.

    Positions stay unvalidated here so that a single bad fingering drops
    only itself, not the whole definition.
    """

    suffix: str = Field(..., min_length=1)
    positions: list[Any] = Field(default_factory=list)


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def _parse_definition(key: str, entry: Any) -> ChordDefinition | None:
    try:
        record = ChordDefinitionModel.model_validate(entry)
    except ValidationError as exc:
        logger.warning("Dropping definition under %r: %s", key, _describe(exc))
        return None

    positions: list[Position] = []
    for raw in record.positions:
        try:
            position = PositionModel.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Dropping malformed position of %s%s: %r (%s)", key, record.suffix, raw, _describe(exc))
            continue
        positions.append(Position(frets=position.frets))

    return ChordDefinition(suffix=record.suffix, positions=tuple(positions))
