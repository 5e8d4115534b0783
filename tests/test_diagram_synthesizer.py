"""Unit tests for DiagramSynthesizer."""

import pytest

from chordsheet.chord_database import Position
from chordsheet.chord_resolver import ChordOracle
from chordsheet.diagram_models import ChordDiagram, DiagramLayout, FallbackDiagram, MarkerKind
from chordsheet.diagram_synthesizer import DiagramSynthesizer


def _diagram(frets: str, name: str = "C") -> ChordDiagram:
    diagram = DiagramSynthesizer().synthesize(name, Position(frets=frets))
    assert isinstance(diagram, ChordDiagram)
    return diagram


def test_grid_has_six_strings_and_five_fret_lines() -> None:
    diagram = _diagram("x32010")
    assert len(diagram.strings) == 6
    assert len(diagram.frets) == 5


def test_nut_is_drawn_heavier() -> None:
    diagram = _diagram("x32010")
    nut, *others = diagram.frets
    assert all(nut.weight > line.weight for line in others)


def test_strings_are_evenly_spaced() -> None:
    diagram = _diagram("x32010")
    assert [line.x1 for line in diagram.strings] == [25.0, 41.0, 57.0, 73.0, 89.0, 105.0]
    assert all(line.y1 == 40.0 and line.y2 == 120.0 for line in diagram.strings)


def test_canvas_uses_layout_size() -> None:
    layout = DiagramLayout(width=200, height=240)
    diagram = DiagramSynthesizer(layout).synthesize("C", Position(frets="x32010"))
    assert (diagram.width, diagram.height) == (200, 240)


def test_markers_follow_string_order() -> None:
    diagram = _diagram("x32010")
    kinds = [(marker.string_index, marker.kind, marker.fret) for marker in diagram.markers]
    assert kinds == [
        (0, MarkerKind.MUTED, None),
        (1, MarkerKind.FRETTED, 3),
        (2, MarkerKind.FRETTED, 2),
        (3, MarkerKind.OPEN, None),
        (4, MarkerKind.FRETTED, 1),
        (5, MarkerKind.OPEN, None),
    ]


def test_muted_and_open_marks_sit_above_the_nut() -> None:
    diagram = _diagram("x00000")
    assert all(marker.y < 40.0 for marker in diagram.markers)


def test_fretted_dot_is_centred_in_its_row() -> None:
    marker = _diagram("x1xxxx").markers[1]
    assert marker.row == 1
    assert marker.y == 50.0


def test_high_fret_is_clamped_to_last_row_with_true_label() -> None:
    diagram = _diagram("xx9bcb", name="B")
    fret_twelve = diagram.markers[4]
    assert fret_twelve.kind is MarkerKind.FRETTED
    assert fret_twelve.fret == 12
    assert fret_twelve.row == 4
    assert fret_twelve.y == 110.0
    assert {marker.row for marker in diagram.markers if marker.kind is MarkerKind.FRETTED} == {4}


def test_uppercase_hex_and_muted_symbols() -> None:
    diagram = _diagram("XxFfAa")
    assert [marker.fret for marker in diagram.markers] == [None, None, 15, 15, 10, 10]


@pytest.mark.parametrize("frets", ["1z3?11", "1-3 11", "1.3!11"])
def test_malformed_symbols_are_skipped(frets: str) -> None:
    diagram = _diagram(frets)
    assert [marker.string_index for marker in diagram.markers] == [0, 2, 4, 5]


def test_short_fret_string_marks_only_given_strings() -> None:
    diagram = _diagram("x32")
    assert len(diagram.markers) == 3
    assert len(diagram.strings) == 6


def test_synthesis_is_deterministic() -> None:
    first = DiagramSynthesizer().synthesize("Em7", Position(frets="022030"))
    second = DiagramSynthesizer().synthesize("Em7", Position(frets="022030"))
    assert first == second


def test_missing_position_gives_fallback() -> None:
    diagram = DiagramSynthesizer().synthesize("H7", None)
    assert isinstance(diagram, FallbackDiagram)
    assert diagram.name == "H7"
    assert diagram.notice == ("Chord not found", "in database")
    assert (diagram.width, diagram.height) == (120, 160)


def test_unknown_chord_gives_fallback(oracle: ChordOracle) -> None:
    assert isinstance(DiagramSynthesizer().synthesize_chord("H7", oracle), FallbackDiagram)


def test_chord_without_positions_gives_fallback(oracle: ChordOracle) -> None:
    assert isinstance(DiagramSynthesizer().synthesize_chord("D", oracle), FallbackDiagram)


def test_known_chord_uses_first_position(oracle: ChordOracle) -> None:
    diagram = DiagramSynthesizer().synthesize_chord("Em7", oracle)
    assert isinstance(diagram, ChordDiagram)
    assert diagram.name == "Em7"
    assert [marker.fret for marker in diagram.markers if marker.kind is MarkerKind.FRETTED] == [2, 2, 3]
