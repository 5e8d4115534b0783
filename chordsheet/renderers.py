"""Renderer implementations for chord diagrams and song pages."""

from __future__ import annotations

from abc import ABC, abstractmethod

from chordsheet.diagram_models import ChordDiagram, Diagram, FallbackDiagram, MarkerKind
from chordsheet.markup import escape_html

# Palette shared by every diagram so a rendered set looks consistent
_BACKGROUND = "#1f2937"
_BORDER = "#374151"
_LABEL = "#f9fafb"
_MUTED_TEXT = "#6b7280"
_GRID = "#6b7280"
_NUT = "#e5e7eb"
_MUTED_MARK = "#ef4444"
_OPEN_MARK = "#10b981"
_DOT = "#3b82f6"


def _num(value: float) -> str:
    """Format a coordinate without a trailing ``.0``."""
    return f"{value:g}"


class DiagramRenderer(ABC):
    """Abstract chord diagram serializer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(self, diagram: Diagram) -> str:
        """Serialize one diagram."""


class SvgDiagramRenderer(DiagramRenderer):
    """Serialize ChordDiagram and FallbackDiagram values as standalone SVG."""

    @property
    def default_extension(self) -> str:
        return ".svg"

    def render(self, diagram: Diagram) -> str:
        if isinstance(diagram, FallbackDiagram):
            return self._render_fallback(diagram)
        return self._render_chord(diagram)

    def _open_svg(self, width: int, height: int) -> list[str]:
        return [
            f'<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" '
            'xmlns="http://www.w3.org/2000/svg">',
            f'<rect width="100%" height="100%" fill="{_BACKGROUND}" rx="8" stroke="{_BORDER}" stroke-width="1"/>',
        ]

    def _render_chord(self, diagram: ChordDiagram) -> str:
        name = escape_html(diagram.name)
        parts = self._open_svg(diagram.width, diagram.height)
        parts.append(
            f'<text x="{_num(diagram.width / 2)}" y="20" text-anchor="middle" fill="{_LABEL}" '
            f'font-family="sans-serif" font-size="14" font-weight="600">{name}</text>'
        )

        for line in diagram.strings:
            parts.append(
                f'<line x1="{_num(line.x1)}" y1="{_num(line.y1)}" x2="{_num(line.x2)}" y2="{_num(line.y2)}" '
                f'stroke="{_GRID}" stroke-width="{_num(line.weight)}"/>'
            )
        for index, line in enumerate(diagram.frets):
            color = _NUT if index == 0 else _GRID
            parts.append(
                f'<line x1="{_num(line.x1)}" y1="{_num(line.y1)}" x2="{_num(line.x2)}" y2="{_num(line.y2)}" '
                f'stroke="{color}" stroke-width="{_num(line.weight)}"/>'
            )

        for marker in diagram.markers:
            x, y = marker.x, marker.y
            if marker.kind is MarkerKind.MUTED:
                parts.append(
                    f'<line x1="{_num(x - 4)}" y1="{_num(y - 4)}" x2="{_num(x + 4)}" y2="{_num(y + 4)}" '
                    f'stroke="{_MUTED_MARK}" stroke-width="2"/>'
                )
                parts.append(
                    f'<line x1="{_num(x + 4)}" y1="{_num(y - 4)}" x2="{_num(x - 4)}" y2="{_num(y + 4)}" '
                    f'stroke="{_MUTED_MARK}" stroke-width="2"/>'
                )
            elif marker.kind is MarkerKind.OPEN:
                parts.append(
                    f'<circle cx="{_num(x)}" cy="{_num(y)}" r="5" fill="none" '
                    f'stroke="{_OPEN_MARK}" stroke-width="2"/>'
                )
            else:
                parts.append(f'<circle cx="{_num(x)}" cy="{_num(y)}" r="7" fill="{_DOT}" stroke="{_DOT}"/>')
                parts.append(
                    f'<text x="{_num(x)}" y="{_num(y + 3)}" text-anchor="middle" fill="white" '
                    f'font-family="sans-serif" font-size="10" font-weight="600">{marker.fret}</text>'
                )

        parts.append("</svg>")
        return "\n".join(parts)

    def _render_fallback(self, diagram: FallbackDiagram) -> str:
        name = escape_html(diagram.name)
        center = _num(diagram.width / 2)
        first, second = diagram.notice
        parts = self._open_svg(diagram.width, diagram.height)
        parts.extend(
            [
                f'<text x="{center}" y="40" text-anchor="middle" fill="{_LABEL}" '
                f'font-family="sans-serif" font-size="16" font-weight="600">{name}</text>',
                f'<text x="{center}" y="80" text-anchor="middle" fill="{_MUTED_TEXT}" '
                f'font-family="sans-serif" font-size="10">{escape_html(first)}</text>',
                f'<text x="{center}" y="95" text-anchor="middle" fill="{_MUTED_TEXT}" '
                f'font-family="sans-serif" font-size="10">{escape_html(second)}</text>',
                "</svg>",
            ]
        )
        return "\n".join(parts)


class SheetRenderer(ABC):
    """Abstract song sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        metadata: dict[str, str],
        markup: str,
        diagram_svgs: list[str],
    ) -> str:
        """Render output into a file content string."""


class FragmentRenderer(SheetRenderer):
    """Chord gallery plus song markup, for embedding into an existing page."""

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        metadata: dict[str, str],
        markup: str,
        diagram_svgs: list[str],
    ) -> str:
        gallery = "".join(f'<div class="chord-diagram">{svg}</div>' for svg in diagram_svgs)
        return f'<div class="chord-gallery">{gallery}</div>\n<div class="song-content">\n{markup}\n</div>\n'


class HtmlPageRenderer(SheetRenderer):
    """Render a song into a self-contained HTML document with inline SVG diagrams."""

    # Metadata fields shown first, in this order; the rest follow as declared
    _LEADING_FIELDS: tuple[str, ...] = ("artist", "album", "key", "genre", "difficulty")

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        metadata: dict[str, str],
        markup: str,
        diagram_svgs: list[str],
    ) -> str:
        return self.build_html(title, metadata, markup, diagram_svgs)

    def _metadata_rows(self, metadata: dict[str, str]) -> str:
        ordered = [name for name in self._LEADING_FIELDS if name in metadata]
        ordered += [name for name in metadata if name not in ordered and name != "title"]
        rows = []
        for name in ordered:
            label = escape_html(name.replace("_", " ").replace("-", " ").capitalize())
            rows.append(f"    <dt>{label}</dt><dd>{escape_html(metadata[name])}</dd>")
        return "\n".join(rows)

    def build_html(
        self,
        title: str,
        metadata: dict[str, str],
        markup: str,
        diagram_svgs: list[str],
    ) -> str:
        """
        Wrap song markup and chord diagrams in a self-contained HTML document.

        The stylesheet gives each element role (``chord-inline``,
        ``section-label``, ``chord-ref-line``...) its look on screen, and drops
        the dark background when printing.
        """
        title_safe = escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        rows = self._metadata_rows(metadata)
        details = f'  <dl class="metadata">\n{rows}\n  </dl>\n' if rows else ""
        if diagram_svgs:
            diagrams = "\n".join(f'    <div class="chord-diagram">{svg}</div>' for svg in diagram_svgs)
            gallery = f'  <h2>Chords Used</h2>\n  <div class="chord-gallery">\n{diagrams}\n  </div>\n'
        else:
            gallery = ""

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    *, *::before, *::after {{ box-sizing: border-box; }}
    body {{
      font-family: system-ui, sans-serif;
      background: #111827;
      color: #f9fafb;
      margin: 0 auto;
      max-width: 960px;
      padding: 2rem;
      line-height: 1.7;
    }}
    h1 {{ font-size: 1.8rem; margin-bottom: 0.5rem; }}
    .metadata {{
      display: grid;
      grid-template-columns: max-content 1fr;
      gap: 0.25rem 1rem;
      color: #9ca3af;
    }}
    .metadata dd {{ margin: 0; color: #f9fafb; }}
    .chord-gallery {{
      display: flex;
      gap: 1rem;
      overflow-x: auto;
      padding-bottom: 1rem;
    }}
    .chord-diagram {{ flex-shrink: 0; }}
    .chord-inline {{
      color: #3b82f6;
      font-weight: 600;
      background: #1f2937;
      padding: 2px 6px;
      border-radius: 4px;
      margin: 0 2px;
      font-size: 0.9em;
    }}
    .section-label {{
      color: #facc15;
      font-weight: 600;
      text-transform: uppercase;
      letter-spacing: 0.05em;
      border-left: 4px solid #facc15;
      padding-left: 0.75rem;
      margin: 1.5rem 0 0.5rem;
    }}
    .chord-ref-line {{ margin-bottom: 0.5rem; }}
    .chord-ref-line .chord-name {{ color: #60a5fa; font-weight: 600; }}
    .chord-ref-line .chord-frets {{ font-family: monospace; color: #d1d5db; }}
    .tab-table {{ border-collapse: collapse; }}
    .tab-table th, .tab-table td {{ border: 1px solid #374151; padding: 0.25rem 0.75rem; }}
    pre {{ background: #1f2937; padding: 1rem; overflow-x: auto; }}
    blockquote {{ border-left: 4px solid #4b5563; margin: 0; padding-left: 1rem; color: #d1d5db; }}
    @media print {{
      body {{
        background: #fff;
        color: #000;
        padding: 0;
      }}
      .metadata dd {{ color: #000; }}
      .chord-gallery {{
        flex-wrap: wrap;
        page-break-after: always;
      }}
    }}
  </style>
</head>
<body>
{heading}{details}{gallery}  <div class="song-content">
{markup}
  </div>
</body>
</html>"""
