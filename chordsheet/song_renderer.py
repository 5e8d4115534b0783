"""SongRenderer: turns a song document into markup, chord diagrams and a page."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from chordsheet.chord_database import ChordDatabase
from chordsheet.chord_extractor import extract_chords
from chordsheet.chord_resolver import ChordOracle
from chordsheet.diagram_models import Diagram, DiagramLayout
from chordsheet.diagram_synthesizer import DiagramSynthesizer
from chordsheet.front_matter import TabDocument, parse_front_matter
from chordsheet.markup import MarkupTransformer
from chordsheet.renderers import FragmentRenderer, HtmlPageRenderer, SheetRenderer, SvgDiagramRenderer

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"html", "fragment"}


@dataclass(frozen=True)
class RenderedSong:
    """
    Everything derived from one song document.

    ``chords`` and ``diagrams`` share the same sorted order.
    """

    document: TabDocument
    markup: str
    chords: list[str]
    diagrams: list[Diagram]


class SongRenderer:
    """
    Render song documents against one chord database.

    Supported formats:
    - ``html``: self-contained page with metadata, chord gallery and song.
    - ``fragment``: chord gallery and song markup only, for embedding.
    """

    def __init__(
        self,
        database: ChordDatabase,
        output_format: str = "html",
        layout: DiagramLayout | None = None,
        max_workers: int | None = None,
    ) -> None:
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.oracle = ChordOracle(database)
        self.transformer = MarkupTransformer(self.oracle)
        self.synthesizer = DiagramSynthesizer(layout)
        self.diagram_renderer = SvgDiagramRenderer()
        self.renderer = self._build_renderer(normalized)
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return HtmlPageRenderer()
        return FragmentRenderer()

    def _synthesize_all(self, chords: list[str]) -> list[Diagram]:
        """Build one diagram per chord; ``map`` keeps the input order."""
        if not chords:
            return []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(lambda name: self.synthesizer.synthesize_chord(name, self.oracle), chords))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, raw_text: str) -> RenderedSong:
        """Split, transform and diagram one song document."""
        document = parse_front_matter(raw_text)
        chords = extract_chords(document.body, self.oracle)
        logger.debug("Found %d chord(s): %s", len(chords), ", ".join(chords))
        return RenderedSong(
            document=document,
            markup=self.transformer.transform(document.body),
            chords=chords,
            diagrams=self._synthesize_all(chords),
        )

    def render_page(self, raw_text: str, title: str | None = None) -> str:
        """
        Render a song into the selected output format.

        The title comes from *title*, then the ``title`` metadata field.
        """
        song = self.render(raw_text)
        resolved_title = title if title is not None else song.document.metadata.get("title", "")
        return self.renderer.render(
            title=resolved_title,
            metadata=song.document.metadata,
            markup=song.markup,
            diagram_svgs=[self.diagram_renderer.render(diagram) for diagram in song.diagrams],
        )

    def export(self, song_path: str, output_path: str, title: str | None = None) -> None:
        """
        Render a song file and write the result to disk.

        Without a ``title`` metadata field, the page title falls back to the
        file name stem.

        Raises:
            OSError: If the song cannot be read or the output cannot be written.
        """
        path = Path(song_path)
        raw_text = path.read_text(encoding="utf-8")
        if title is None and "title" not in parse_front_matter(raw_text).metadata:
            title = path.stem.replace("_", " ")

        content = self.render_page(raw_text, title=title)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
