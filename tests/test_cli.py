"""CLI tests driven through click's CliRunner."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from chordsheet import __version__
from chordsheet.cli import main

SONG = "---\ntitle: Amazing Grace\n---\n[Verse]\n[G]Amazing [C]grace [Zz]\n"


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    # The CLI reconfigures the root logger on every invocation.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def song_file(tmp_path: Path) -> Path:
    path = tmp_path / "amazing_grace.md"
    path.write_text(SONG, encoding="utf-8")
    return path


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_render_writes_page_next_to_song(song_file: Path, db_file: Path) -> None:
    result = CliRunner().invoke(main, ["render", str(song_file), "--db", str(db_file)])

    assert result.exit_code == 0, result.output
    assert "[1/3]" in result.output
    assert "Done!" in result.output
    html = song_file.with_suffix(".html").read_text(encoding="utf-8")
    assert "<title>Amazing Grace</title>" in html
    assert html.count('<div class="chord-diagram">') == 2


def test_render_fragment_with_title_and_output(song_file: Path, db_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "part.html"
    result = CliRunner().invoke(
        main,
        ["render", str(song_file), "--db", str(db_file), "-o", str(output), "--format", "FRAGMENT"],
    )

    assert result.exit_code == 0, result.output
    content = output.read_text(encoding="utf-8")
    assert content.startswith('<div class="chord-gallery">')
    assert "<html" not in content


def test_render_reads_database_from_environment(song_file: Path, db_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "env.html"
    result = CliRunner().invoke(
        main,
        ["render", str(song_file), "-o", str(output)],
        env={"CHORDSHEET_DB": str(db_file)},
    )
    assert result.exit_code == 0, result.output
    assert output.exists()


def test_render_without_database_is_a_usage_error(song_file: Path) -> None:
    result = CliRunner().invoke(main, ["render", str(song_file)], env={"CHORDSHEET_DB": None})
    assert result.exit_code == 2


def test_invalid_database_exits_with_error(song_file: Path, tmp_path: Path) -> None:
    bad_db = tmp_path / "bad.json"
    bad_db.write_text("{not json", encoding="utf-8")

    result = CliRunner().invoke(main, ["render", str(song_file), "--db", str(bad_db)])

    assert result.exit_code == 1
    assert "Could not load chord database" in result.output


def test_chords_lists_first_fingering(song_file: Path, db_file: Path) -> None:
    result = CliRunner().invoke(main, ["chords", str(song_file), "--db", str(db_file)])

    assert result.exit_code == 0, result.output
    rows = [line.split() for line in result.output.splitlines()]
    assert rows == [["C", "x32010"], ["G", "320003"]]


def test_chords_reports_empty_song(tmp_path: Path, db_file: Path) -> None:
    song = tmp_path / "words.md"
    song.write_text("only words here", encoding="utf-8")

    result = CliRunner().invoke(main, ["chords", str(song), "--db", str(db_file)])

    assert result.exit_code == 0
    assert "No chords found." in result.output


def test_diagram_prints_svg(db_file: Path) -> None:
    result = CliRunner().invoke(main, ["diagram", "Em7", "--db", str(db_file)])

    assert result.exit_code == 0, result.output
    assert result.output.startswith("<svg ")
    assert ">Em7</text>" in result.output


def test_diagram_for_unknown_chord_prints_fallback(db_file: Path) -> None:
    result = CliRunner().invoke(main, ["diagram", "H7", "--db", str(db_file)])

    assert result.exit_code == 0
    assert "Chord not found" in result.output


def test_diagram_writes_file(db_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "am.svg"
    result = CliRunner().invoke(main, ["diagram", "Am", "--db", str(db_file), "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert "Wrote" in result.output
    assert output.read_text(encoding="utf-8").startswith("<svg ")


def test_diagram_stdout_stays_pure_svg_when_database_warns(tmp_path: Path) -> None:
    db = tmp_path / "warns.json"
    db.write_text(
        json.dumps({"A": [{"suffix": "minor", "positions": [{"frets": "bad"}, {"frets": "x02210"}]}]}),
        encoding="utf-8",
    )

    result = CliRunner().invoke(main, ["diagram", "Am", "--db", str(db)])

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("<svg ")
    assert result.stdout.rstrip().endswith("</svg>")
    assert "Dropping malformed position of Aminor" in result.stderr


def test_render_html_song_does_not_overwrite_source(tmp_path: Path, db_file: Path) -> None:
    song = tmp_path / "song.html"
    song.write_text("[C] my original lyrics", encoding="utf-8")

    result = CliRunner().invoke(main, ["render", str(song), "--db", str(db_file)])

    assert result.exit_code == 0, result.output
    assert song.read_text(encoding="utf-8") == "[C] my original lyrics"
    rendered = tmp_path / "song.rendered.html"
    assert rendered.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_render_refuses_output_equal_to_song(song_file: Path, db_file: Path) -> None:
    result = CliRunner().invoke(main, ["render", str(song_file), "--db", str(db_file), "-o", str(song_file)])

    assert result.exit_code == 1
    assert "is the song file itself" in result.stderr
    assert song_file.read_text(encoding="utf-8") == SONG
