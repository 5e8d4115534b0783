"""MarkupTransformer: converts a tab-markup song body into HTML markup."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

from chordsheet.chord_resolver import ChordOracle


def escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attribute(value: str) -> str:
    # Values come from already-escaped text, only quotes remain unsafe.
    return value.replace('"', "&quot;")


# Literal regions
_FENCE_RE: Final = re.compile(r"^[ \t]*```[ \t]*([\w+#.-]*)[^\n]*\n(.*?)^[ \t]*```[ \t]*$", re.MULTILINE | re.DOTALL)
_INLINE_CODE_RE: Final = re.compile(r"`([^`\n]+)`")
_PLACEHOLDER_RE: Final = re.compile(r"<!--(block|inline):(\d+)-->")
_BLOCK_PLACEHOLDER_LINE_RE: Final = re.compile(r"^<!--block:\d+-->$")

# Block rules (text is escaped by the time these run, so ">" reads "&gt;")
_HEADING_RE: Final = re.compile(r"^(#{1,5})[ \t]+(.+?)[ \t]*$")
_RULE_RE: Final = re.compile(r"^[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*$")
_QUOTE_RE: Final = re.compile(r"^[ \t]*&gt;[ \t]?(.*)$")
_LIST_ITEM_RE: Final = re.compile(r"^([ \t]*)([-*+]|\d+\.)[ \t]+(.*)$")
_TABLE_SEPARATOR_RE: Final = re.compile(r"^[ \t]*\|?[ \t]*:?-+:?[ \t]*(?:\|[ \t]*:?-+:?[ \t]*)+\|?[ \t]*$")
_REFERENCE_LINE_RE: Final = re.compile(r"^- ([A-G][#b]?[^:\n]*): \[[^\]\n]*?\|([0-9a-fA-FxX]+)\](.*)$")
_LABEL_RE: Final = re.compile(r"^[ \t]*\[([^\]\n]+)\](.*)$")

# Inline rules
_IMAGE_RE: Final = re.compile(r"!\[([^\]\n<]*)\]\(([^)\s<]+)\)")
_LINK_RE: Final = re.compile(r"\[([^\]\n]+)\]\(([^)\s<]+)\)")
_STRIKE_RE: Final = re.compile(r"~~(?=\S)(.+?)(?<=\S)~~")
_BOLD_STAR_RE: Final = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
_BOLD_UNDERSCORE_RE: Final = re.compile(r"(?<!\w)__(?=\S)(.+?)(?<=\S)__(?!\w)")
_ITALIC_STAR_RE: Final = re.compile(r"\*(?=[^\s*])(.+?)(?<=[^\s*])\*")
_ITALIC_UNDERSCORE_RE: Final = re.compile(r"(?<!\w)_(?=[^\s_])(.+?)(?<=[^\s_])_(?!\w)")
_CHORD_RE: Final = re.compile(r"\[([^\]\n]+)\]")

TAB_WIDTH: Final[int] = 4


@dataclass
class _LiteralTable:
    """
    Side table for regions that later rules must not touch.

    Each stored fragment is replaced in the text by ``<!--kind:index-->``.
    Text is HTML-escaped before extraction, so input can never contain a
    placeholder of its own.
    """

    blocks: list[str] = field(default_factory=list)
    inlines: list[str] = field(default_factory=list)

    def add_block(self, markup: str) -> str:
        self.blocks.append(markup)
        return f"<!--block:{len(self.blocks) - 1}-->"

    def add_inline(self, markup: str) -> str:
        self.inlines.append(markup)
        return f"<!--inline:{len(self.inlines) - 1}-->"

    def restore(self, text: str) -> str:
        # Inline spans first, then blocks.
        text = _PLACEHOLDER_RE.sub(lambda m: self._lookup(m, "inline"), text)
        return _PLACEHOLDER_RE.sub(lambda m: self._lookup(m, "block"), text)

    def _lookup(self, match: re.Match[str], kind: str) -> str:
        if match.group(1) != kind:
            return match.group(0)
        table = self.inlines if kind == "inline" else self.blocks
        return table[int(match.group(2))]


@dataclass(frozen=True)
class _ListItem:
    indent: int
    ordered: bool
    text: str


class MarkupTransformer:
    """
    Render a song body (front matter already removed) to HTML.

    Pipeline
    --------
    1. **Literal regions** – the text is escaped, then fenced code blocks and
       inline code spans are moved to a side table.
    2. **Blocks** – headings, horizontal rules, blockquotes, lists, tables,
       chord reference lines, section labels and paragraphs, line by line.
    3. **Inline** – images, links, strikethrough, bold, italic and finally
       chord spans, applied to the text content of each block.
    4. **Restore** – placeholders are swapped back for the literal markup.

    Element roles are marked with class names (``chord-inline``,
    ``section-label``, ``chord-ref-line``, ``tab-table``...) and carry no
    presentation. The transformer never raises; text that no rule matches is
    emitted unchanged.
    """

    def __init__(self, oracle: ChordOracle) -> None:
        self.oracle = oracle

    # ------------------------------------------------------------------
    # Literal regions
    # ------------------------------------------------------------------

    def _extract_literals(self, text: str, literals: _LiteralTable) -> str:
        """Escape *text* and move code regions (already escaped) to *literals*."""

        def fence(match: re.Match[str]) -> str:
            language, code = match.groups()
            code = code.rstrip("\n")
            class_attr = f' class="language-{language}"' if language else ""
            return literals.add_block(f"<pre><code{class_attr}>{code}</code></pre>")

        def inline(match: re.Match[str]) -> str:
            return literals.add_inline(f"<code>{match.group(1)}</code>")

        text = _FENCE_RE.sub(fence, escape_html(text))
        return _INLINE_CODE_RE.sub(inline, text)

    # ------------------------------------------------------------------
    # Inline rules
    # ------------------------------------------------------------------

    def _render_inline(self, text: str, literals: _LiteralTable) -> str:
        def image(match: re.Match[str]) -> str:
            alt, url = match.groups()
            return literals.add_inline(f'<img src="{_escape_attribute(url)}" alt="{_escape_attribute(alt)}">')

        def link(match: re.Match[str]) -> str:
            label, url = match.groups()
            return literals.add_inline(f'<a href="{_escape_attribute(url)}">') + label + "</a>"

        text = _IMAGE_RE.sub(image, text)
        text = _LINK_RE.sub(link, text)
        text = _STRIKE_RE.sub(r"<del>\1</del>", text)
        text = _BOLD_STAR_RE.sub(r"<strong>\1</strong>", text)
        text = _BOLD_UNDERSCORE_RE.sub(r"<strong>\1</strong>", text)
        text = _ITALIC_STAR_RE.sub(r"<em>\1</em>", text)
        text = _ITALIC_UNDERSCORE_RE.sub(r"<em>\1</em>", text)
        return _CHORD_RE.sub(self._chord_span, text)

    def _chord_span(self, match: re.Match[str]) -> str:
        name = match.group(1)
        if self.oracle.is_valid(name):
            return f'<span class="chord-inline">{name}</span>'
        return match.group(0)

    # ------------------------------------------------------------------
    # Block rules
    # ------------------------------------------------------------------

    def _indent_width(self, whitespace: str) -> int:
        return len(whitespace.expandtabs(TAB_WIDTH))

    def _list_item(self, line: str) -> _ListItem | None:
        if _RULE_RE.match(line):
            return None
        match = _LIST_ITEM_RE.match(line)
        if not match:
            return None
        indent, bullet, text = match.groups()
        return _ListItem(indent=self._indent_width(indent), ordered=bullet[0].isdigit(), text=text)

    def _starts_block(self, line: str) -> bool:
        """True when *line* would open a block of its own (ends a lazy quote)."""
        return bool(
            _HEADING_RE.match(line)
            or _RULE_RE.match(line)
            or _BLOCK_PLACEHOLDER_LINE_RE.match(line.strip())
            or self._list_item(line)
        )

    def _reference_line(self, line: str, literals: _LiteralTable) -> str | None:
        match = _REFERENCE_LINE_RE.match(line)
        if not match:
            return None
        name, frets, rest = match.groups()
        name = name.strip()
        if not self.oracle.is_valid(name):
            return None
        tail = self._render_inline(rest, literals) if rest.strip() else ""
        return (
            '<div class="chord-ref-line">'
            f'<span class="chord-name">{name}</span>: '
            f'<span class="chord-frets">{frets}</span>{tail}</div>'
        )

    def _section_label(self, line: str) -> tuple[str, str] | None:
        """Return (label, remainder) when *line* opens with a section label."""
        match = _LABEL_RE.match(line)
        if not match:
            return None
        label, rest = match.groups()
        if rest.startswith("("):
            return None  # a link, not a label
        if rest.strip() and self.oracle.is_valid(label):
            return None  # a chord leading a lyric line
        return label, rest.strip()

    def _split_cells(self, row: str) -> list[str]:
        row = row.strip()
        if row.startswith("|"):
            row = row[1:]
        if row.endswith("|"):
            row = row[:-1]
        return [cell.strip() for cell in row.split("|")]

    def _render_table(self, header: str, rows: list[str], literals: _LiteralTable) -> str:
        head = "".join(f"<th>{self._render_inline(cell, literals)}</th>" for cell in self._split_cells(header))
        body = "".join(
            "<tr>" + "".join(f"<td>{self._render_inline(cell, literals)}</td>" for cell in self._split_cells(row)) + "</tr>"
            for row in rows
        )
        return f'<table class="tab-table"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>'

    def _render_list(self, items: list[_ListItem], literals: _LiteralTable) -> str:
        """
        Nest list items by indentation.

        Consecutive items of the same kind at the same depth share one list;
        a deeper item opens a child list inside the current ``<li>``.
        """
        out: list[str] = []
        stack: list[_ListItem] = []

        def close() -> None:
            top = stack.pop()
            out.append("</li></ol>" if top.ordered else "</li></ul>")

        for item in items:
            while stack and stack[-1].indent > item.indent:
                close()
            if stack and stack[-1].indent == item.indent:
                if stack[-1].ordered == item.ordered:
                    out.append("</li>")
                else:
                    close()
            if not stack or stack[-1].indent < item.indent:
                out.append("<ol>" if item.ordered else "<ul>")
                stack.append(item)
            out.append(f"<li>{self._render_inline(item.text, literals)}")

        while stack:
            close()
        return "".join(out)

    def _render_blocks(self, text: str, literals: _LiteralTable) -> list[str]:
        lines = text.split("\n")
        blocks: list[str] = []
        paragraph: list[str] = []

        def flush() -> None:
            if paragraph:
                joined = "<br>".join(self._render_inline(line, literals) for line in paragraph)
                blocks.append(f"<p>{joined}</p>")
                paragraph.clear()

        i = 0
        while i < len(lines):
            line = lines[i]
            stripped = line.strip()

            if not stripped:
                flush()
                i += 1
                continue

            if _BLOCK_PLACEHOLDER_LINE_RE.match(stripped):
                flush()
                blocks.append(stripped)
                i += 1
                continue

            heading = _HEADING_RE.match(line)
            if heading:
                flush()
                level = len(heading.group(1))
                blocks.append(f"<h{level}>{self._render_inline(heading.group(2), literals)}</h{level}>")
                i += 1
                continue

            if _RULE_RE.match(line):
                flush()
                blocks.append("<hr>")
                i += 1
                continue

            reference = self._reference_line(line, literals)
            if reference is not None:
                flush()
                blocks.append(reference)
                i += 1
                continue

            if _QUOTE_RE.match(line):
                flush()
                quoted: list[str] = []
                while i < len(lines) and lines[i].strip():
                    quote = _QUOTE_RE.match(lines[i])
                    if quote is None and self._starts_block(lines[i]):
                        break
                    quoted.append(quote.group(1) if quote else lines[i].strip())
                    i += 1
                joined = "<br>".join(self._render_inline(part, literals) for part in quoted)
                blocks.append(f"<blockquote>{joined}</blockquote>")
                continue

            if "|" in line and i + 1 < len(lines) and _TABLE_SEPARATOR_RE.match(lines[i + 1]):
                flush()
                header = line
                i += 2
                rows: list[str] = []
                while i < len(lines) and lines[i].strip() and "|" in lines[i]:
                    rows.append(lines[i])
                    i += 1
                blocks.append(self._render_table(header, rows, literals))
                continue

            if self._list_item(line):
                flush()
                items: list[_ListItem] = []
                while i < len(lines):
                    item = self._list_item(lines[i])
                    if item is None or self._reference_line(lines[i], literals) is not None:
                        break
                    items.append(item)
                    i += 1
                blocks.append(self._render_list(items, literals))
                continue

            label = self._section_label(line)
            if label is not None:
                flush()
                name, rest = label
                blocks.append(f'<div class="section-label">{name}</div>')
                if rest:
                    paragraph.append(rest)
                i += 1
                continue

            paragraph.append(line)
            i += 1

        flush()
        return blocks

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def transform(self, body: str) -> str:
        """Render *body* to an HTML fragment. An empty body yields ``<p></p>``."""
        literals = _LiteralTable()
        text = body.replace("\r\n", "\n").replace("\r", "\n")
        text = self._extract_literals(text, literals)

        blocks = self._render_blocks(text, literals)
        html = "\n".join(blocks) if blocks else "<p></p>"
        return literals.restore(html)
