from __future__ import annotations

import os
import re
import sys
import textwrap
from enum import IntEnum
from typing import Sequence, TextIO

from .markup import Segment, Styled, parse_markup, plain

# ANSI escape codes for terminal styles (can be monkeypatched for styling)
ESC = "\x1b["
RESET = f"{ESC}0m"
BOLD = f"{ESC}1m"
UNDERLINE = f"{ESC}4m"
EM = f"{ESC}32m"  # Green for locations
CODE = f"{ESC}38;5;153m"  # Light blue (xterm256 LightSkyBlue1) for signatures
C1 = f"{ESC}36m"
C2 = f"{ESC}33m"
WARN = f"{ESC}30;43m"  # Black on yellow
ERROR = f"{ESC}37;41m"  # White on red

ANSI_STYLES = {
    "b": BOLD,
    "u": UNDERLINE,
    "em": EM,
    "tt": CODE,
    "c1": C1,
    "c2": C2,
    "warn": WARN,
    "error": ERROR,
}

# Regex pattern to strip ANSI escape sequences
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

DEFAULT_WIDTH = 80


class Verbosity(IntEnum):
    NORMAL = 0
    VERBOSE = 1
    VERY_VERBOSE = 2
    DEBUG = 3

    @classmethod
    def from_count(cls, count: int) -> Verbosity:
        """Verbosity for the number of times -v was given."""
        return cls(max(cls.NORMAL, min(count, cls.DEBUG)))


class IO:
    """Output sink for error lines.

    Lines passed to :meth:`error_line` contain style markup, which the sink
    resolves into its display form. :meth:`error_line_raw` writes lines that
    are already in display form, typically built from :meth:`format` results.
    Subclasses implement :meth:`render_segments` and :meth:`_write`.
    """

    def __init__(
        self, verbosity: Verbosity = Verbosity.NORMAL, width: int | None = None
    ) -> None:
        self.verbosity = Verbosity(verbosity)
        self.width = width

    def is_verbose(self) -> bool:
        return self.verbosity >= Verbosity.VERBOSE

    def is_very_verbose(self) -> bool:
        return self.verbosity >= Verbosity.VERY_VERBOSE

    def is_debug(self) -> bool:
        return self.verbosity >= Verbosity.DEBUG

    def format(self, text: str) -> str:
        """Resolve style markup into the display form of this sink."""
        return self.render_segments(parse_markup(text))

    def error_line(self, text: str) -> None:
        """Write a line of markup, word-wrapping unstyled text to the width."""
        segments = parse_markup(text)
        if self.width and not any(isinstance(s, Styled) for s in segments):
            line = plain(segments)
            if len(line) > self.width:
                for chunk in textwrap.wrap(
                    line,
                    width=self.width,
                    break_long_words=False,
                    break_on_hyphens=False,
                ):
                    self._write(self.render_segments([chunk]))
                return
        self._write(self.render_segments(segments))

    def error_line_raw(self, text: str) -> None:
        """Write a line in display form as is."""
        self._write(text)

    def terminal_width(self) -> int:
        return self.width or DEFAULT_WIDTH

    def render_segments(self, segments: Sequence[Segment]) -> str:
        raise NotImplementedError

    def _write(self, line: str) -> None:
        raise NotImplementedError


class TtyIO(IO):
    """Writes ANSI styled lines to a terminal stream (stderr by default).

    Colors are only used on a TTY unless ``color`` is given explicitly.
    """

    def __init__(
        self,
        file: TextIO | None = None,
        verbosity: Verbosity = Verbosity.NORMAL,
        width: int | None = None,
        color: bool | None = None,
    ) -> None:
        super().__init__(verbosity, width)
        self.file = file if file is not None else sys.stderr
        if color is None:
            color = self.file.isatty() if hasattr(self.file, "isatty") else False
        self.color = color

    def render_segments(self, segments: Sequence[Segment]) -> str:
        out = ""
        for seg in segments:
            if isinstance(seg, Styled):
                codes = "".join(ANSI_STYLES[s] for s in seg.styles)
                out += f"{codes}{seg.text}{RESET}"
            else:
                out += seg
        if not self.color:
            out = ANSI_ESCAPE_RE.sub("", out)
        return out

    def _write(self, line: str) -> None:
        self.file.write(line + "\n")

    def terminal_width(self) -> int:
        if self.width:
            return self.width
        try:
            return os.get_terminal_size(self.file.fileno()).columns
        except (OSError, ValueError, AttributeError):
            return DEFAULT_WIDTH
