"""Logging setup for the chordsheet CLI."""

import logging
import sys
from typing import TextIO

_PLAIN_FORMAT = "chordsheet: %(levelname)s: %(message)s"
_DEBUG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s"


def setup_logger(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Handler:
    """
    Route every ``chordsheet`` record to *stream* (stderr by default).

    stdout carries command output such as SVG markup, so diagnostics never
    go there unless a caller asks for it. Calling this again replaces the
    handler installed by the previous call.
    """
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, "_chordsheet", False)]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler._chordsheet = True  # type: ignore[attr-defined]
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_DEBUG_FORMAT if level <= logging.DEBUG else _PLAIN_FORMAT))

    root.setLevel(level)
    root.addHandler(handler)
    return handler
