"""Split a song document into its front-matter metadata and body."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

_FRONT_MATTER_RE: Final[re.Pattern[str]] = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)(.*)\Z",
    re.DOTALL,
)
_LEADING_BLANK_LINES_RE: Final[re.Pattern[str]] = re.compile(r"\A(?:[ \t]*\r?\n)+")
_QUOTES: Final[str] = "\"'"


@dataclass(frozen=True)
class TabDocument:
    """A song document: flat string metadata plus the tab-markup body."""

    metadata: dict[str, str] = field(default_factory=dict)
    body: str = ""


def trim_blank_lines(text: str) -> str:
    """Drop leading blank lines and trailing whitespace, keeping first-line indentation."""
    return _LEADING_BLANK_LINES_RE.sub("", text).rstrip()


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def parse_metadata(block: str) -> dict[str, str]:
    """
    Parse ``key: value`` lines.

    Each line is split at its first colon; one pair of surrounding quotes is
    stripped from the value. Lines without both a key and a value are skipped.
    """
    metadata: dict[str, str] = {}
    for line in block.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = _unquote(value.strip())
        if key and value:
            metadata[key] = value
    return metadata


def parse_front_matter(text: str) -> TabDocument:
    """
    Separate the ``---`` delimited metadata block from the body.

    A missing or malformed block yields empty metadata and the whole input
    as body; this function never raises.
    """
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return TabDocument(metadata={}, body=trim_blank_lines(text))

    block, body = match.groups()
    return TabDocument(metadata=parse_metadata(block or ""), body=trim_blank_lines(body))
