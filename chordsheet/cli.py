"""chordsheet CLI entry point."""

import logging
import sys
from pathlib import Path

import click

from chordsheet import __version__
from chordsheet.chord_database import ChordDatabase
from chordsheet.chord_extractor import extract_chords
from chordsheet.chord_resolver import ChordOracle
from chordsheet.diagram_synthesizer import DiagramSynthesizer
from chordsheet.front_matter import parse_front_matter
from chordsheet.logger import setup_logger
from chordsheet.renderers import SvgDiagramRenderer
from chordsheet.song_renderer import SongRenderer

DB_ENV_VAR = "CHORDSHEET_DB"

_db_option = click.option(
    "--db",
    "db_path",
    required=True,
    envvar=DB_ENV_VAR,
    type=click.Path(exists=True, dir_okay=False, readable=True),
    metavar="PATH",
    help=f"Chord database JSON (chords-db layout). Also read from ${DB_ENV_VAR}.",
)


def _load_database(db_path: str) -> ChordDatabase:
    """Load the chord database or exit with an error message."""
    try:
        return ChordDatabase.load(db_path)
    except (OSError, ValueError) as exc:
        click.echo(f"  ERROR: Could not load chord database — {exc}", err=True)
        sys.exit(1)


def _read_song(song_file: str) -> str:
    try:
        return Path(song_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        click.echo(f"  ERROR: Could not read song file — {exc}", err=True)
        sys.exit(1)


def _default_output(song_path: Path) -> Path:
    """Song path with an .html suffix, never the song file itself."""
    target = song_path.with_suffix(".html")
    if target == song_path:
        target = song_path.with_name(f"{song_path.stem}.rendered.html")
    return target


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="chordsheet")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """chordsheet — render tab-markup songs with chord diagrams."""
    setup_logger(logging.DEBUG if verbose else logging.WARNING)


# ── render subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("song_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@_db_option
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file path. Defaults to the song path with an .html suffix (.rendered.html for .html songs).",
)
@click.option(
    "--title",
    default=None,
    metavar="TEXT",
    help="Page title. Defaults to the 'title' metadata field, then the file stem.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "fragment"], case_sensitive=False),
    default="html",
    show_default=True,
    help="Self-contained HTML page, or an embeddable fragment (diagrams + markup).",
)
def render(
    song_file: str,
    db_path: str,
    output: str | None,
    title: str | None,
    output_format: str,
) -> None:
    """
    Render a song document with its chord diagrams.

    SONG_FILE is a text document with optional --- front matter.

    \b
    Examples:
      chordsheet render wonderwall.md --db guitar.json
      chordsheet render wonderwall.md --db guitar.json -o song.html --title "Wonderwall"
      chordsheet render wonderwall.md --db guitar.json --format fragment -o song.part.html
    """
    song_path = Path(song_file)
    normalized_format = output_format.lower()
    resolved_output = output if output is not None else str(_default_output(song_path))
    if Path(resolved_output).resolve() == song_path.resolve():
        click.echo(f"  ERROR: Output path '{resolved_output}' is the song file itself — pass a different --output.", err=True)
        sys.exit(1)

    click.echo(f"chordsheet v{__version__}")
    click.echo(f"  Song   : {song_file}")
    click.echo(f"  Format : {normalized_format}")
    click.echo(f"  Output : {resolved_output}")
    click.echo()

    click.echo("[1/3] Loading chord database...")
    database = _load_database(db_path)
    click.echo(f"      {len(database)} key(s) loaded")

    click.echo("[2/3] Rendering markup and chord diagrams...")
    renderer = SongRenderer(database, output_format=normalized_format)

    click.echo(f"[3/3] Writing output → '{resolved_output}'...")
    try:
        renderer.export(song_file, resolved_output, title=title)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
        sys.exit(1)
    except UnicodeDecodeError as exc:
        click.echo(f"  ERROR: Could not read song file — {exc}", err=True)
        sys.exit(1)

    click.echo()
    click.echo(f"Done!  Open '{resolved_output}' in any browser.")


# ── chords subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("song_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@_db_option
def chords(song_file: str, db_path: str) -> None:
    """
    List the chords a song uses, with their first fingering.

    \b
    Example:
      chordsheet chords wonderwall.md --db guitar.json
    """
    oracle = ChordOracle(_load_database(db_path))
    document = parse_front_matter(_read_song(song_file))
    names = extract_chords(document.body, oracle)

    if not names:
        click.echo("No chords found.", err=True)
        return

    for name in names:
        definition = oracle.find(name)
        frets = definition.positions[0].frets if definition and definition.positions else "not found"
        click.echo(f"{name:<8} {frets}")


# ── diagram subcommand ─────────────────────────────────────────────────────────

@main.command()
@click.argument("chord")
@_db_option
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination SVG path. Prints the SVG to stdout when omitted.",
)
def diagram(chord: str, db_path: str, output: str | None) -> None:
    """
    Draw the fretboard diagram for a single CHORD as SVG.

    Unknown chords produce the "not found" placeholder diagram.

    \b
    Examples:
      chordsheet diagram Am7 --db guitar.json
      chordsheet diagram "F#m" --db guitar.json -o fsharp-minor.svg
    """
    oracle = ChordOracle(_load_database(db_path))
    svg = SvgDiagramRenderer().render(DiagramSynthesizer().synthesize_chord(chord, oracle))

    if output is None:
        click.echo(svg)
        return

    try:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(svg)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write SVG file — {exc}", err=True)
        sys.exit(1)
    click.echo(f"Wrote '{output}'.")
