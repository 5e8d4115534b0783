"""DiagramSynthesizer: turns a chord position into a fixed-size fretboard diagram."""

from __future__ import annotations

import numpy as np

from chordsheet.chord_database import MAX_FRET, MUTED_SYMBOLS, OPEN_SYMBOL, Position
from chordsheet.chord_resolver import ChordOracle
from chordsheet.diagram_models import (
    ChordDiagram,
    Diagram,
    DiagramLayout,
    FallbackDiagram,
    GridLine,
    MarkerKind,
    StringMarker,
)


class DiagramSynthesizer:
    """
    Builds ChordDiagram values from fret strings.

    Layout
    ------
    The grid has ``string_count`` vertical strings and ``visible_frets + 1``
    horizontal fret lines; line 0 is the nut and is drawn heavier.

    Muted and open strings are marked above the nut. A fretted string gets a
    dot in row ``min(fret, visible_frets)`` so high positions collapse onto
    the last visible row, while the dot's label keeps the true fret number.

    Symbols that are not ``x``, ``0`` or a hexadecimal digit 1-15 produce no
    mark; the rest of the diagram is still drawn.
    """

    def __init__(self, layout: DiagramLayout | None = None) -> None:
        self.layout = layout or DiagramLayout()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _string_xs(self) -> list[float]:
        layout = self.layout
        xs = layout.start_x + np.arange(layout.string_count) * layout.string_spacing
        return [float(x) for x in xs]

    def _fret_ys(self) -> list[float]:
        layout = self.layout
        ys = layout.start_y + np.arange(layout.visible_frets + 1) * layout.fret_spacing
        return [float(y) for y in ys]

    def _grid(self) -> tuple[list[GridLine], list[GridLine]]:
        layout = self.layout
        xs = self._string_xs()
        ys = self._fret_ys()

        strings = [GridLine(x1=x, y1=ys[0], x2=x, y2=ys[-1], weight=layout.string_weight) for x in xs]
        frets = [
            GridLine(
                x1=xs[0],
                y1=y,
                x2=xs[-1],
                y2=y,
                weight=layout.nut_weight if index == 0 else layout.fret_weight,
            )
            for index, y in enumerate(ys)
        ]
        return strings, frets

    def _parse_fret(self, symbol: str) -> int | None:
        try:
            fret = int(symbol, 16)
        except ValueError:
            return None
        if 1 <= fret <= MAX_FRET:
            return fret
        return None

    def _marker(self, string_index: int, x: float, symbol: str) -> StringMarker | None:
        layout = self.layout
        above_nut = layout.start_y - layout.marker_offset

        if symbol in MUTED_SYMBOLS:
            return StringMarker(string_index=string_index, kind=MarkerKind.MUTED, x=x, y=above_nut)
        if symbol == OPEN_SYMBOL:
            return StringMarker(string_index=string_index, kind=MarkerKind.OPEN, x=x, y=above_nut)

        fret = self._parse_fret(symbol)
        if fret is None:
            return None

        row = min(fret, layout.visible_frets)
        y = layout.start_y + (row - 0.5) * layout.fret_spacing
        return StringMarker(
            string_index=string_index,
            kind=MarkerKind.FRETTED,
            x=x,
            y=y,
            fret=fret,
            row=row,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fallback(self, chord_name: str) -> FallbackDiagram:
        return FallbackDiagram(name=chord_name, width=self.layout.width, height=self.layout.height)

    def synthesize(self, chord_name: str, position: Position | None) -> Diagram:
        """
        Build the diagram for *chord_name* at *position*.

        Returns the fallback diagram when no position is given.
        """
        if position is None:
            return self.fallback(chord_name)

        strings, frets = self._grid()
        markers: list[StringMarker] = []
        for index, (x, symbol) in enumerate(zip(self._string_xs(), position.frets)):
            marker = self._marker(index, x, symbol)
            if marker is not None:
                markers.append(marker)

        return ChordDiagram(
            name=chord_name,
            width=self.layout.width,
            height=self.layout.height,
            strings=strings,
            frets=frets,
            markers=markers,
        )

    def synthesize_chord(self, chord_name: str, oracle: ChordOracle) -> Diagram:
        """Diagram for the first known position of *chord_name*, or the fallback."""
        definition = oracle.find(chord_name)
        if definition is None or not definition.positions:
            return self.fallback(chord_name)
        return self.synthesize(chord_name, definition.positions[0])
