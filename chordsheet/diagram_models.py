"""Data models for chord diagram outputs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MarkerKind(str, Enum):
    """What a string shows above or on the fretboard."""

    MUTED = "muted"
    OPEN = "open"
    FRETTED = "fretted"


@dataclass(frozen=True)
class DiagramLayout:
    """Fixed geometry shared by every diagram in a rendered set."""

    width: int = 120
    height: int = 160
    string_count: int = 6
    visible_frets: int = 4
    string_spacing: float = 16.0
    fret_spacing: float = 20.0
    start_x: float = 25.0
    start_y: float = 40.0
    string_weight: float = 1.5
    fret_weight: float = 1.0
    nut_weight: float = 3.0
    marker_offset: float = 8.0


@dataclass(frozen=True)
class GridLine:
    """A straight segment of the fretboard grid."""

    x1: float
    y1: float
    x2: float
    y2: float
    weight: float


@dataclass(frozen=True)
class StringMarker:
    """
    A mark for one string.

    ``row`` and ``fret`` are only set for fretted strings: ``row`` is the
    visible row the dot is drawn on, ``fret`` the true fret shown as label.
    """

    string_index: int
    kind: MarkerKind
    x: float
    y: float
    fret: int | None = None
    row: int | None = None


@dataclass(frozen=True)
class ChordDiagram:
    """A fretboard grid with per-string markers for one chord position."""

    name: str
    width: int
    height: int
    strings: list[GridLine]
    frets: list[GridLine]
    markers: list[StringMarker]


@dataclass(frozen=True)
class FallbackDiagram:
    """Placeholder shown when a chord has no usable position data."""

    name: str
    width: int
    height: int
    notice: tuple[str, str] = ("Chord not found", "in database")


Diagram = ChordDiagram | FallbackDiagram
