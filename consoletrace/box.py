from __future__ import annotations

import textwrap
import unicodedata

from .canvas import Canvas
from .io import ANSI_ESCAPE_RE
from .markup import styled, to_markup

# Spaces on each side of the box content
MARGIN = "  "


def display_width(s: str) -> int:
    """Calculate the display width of a string in terminal columns."""
    plain = ANSI_ESCAPE_RE.sub("", s)
    return sum(2 if unicodedata.east_asian_width(c) in "WF" else 1 for c in plain)


def wrap_message(message: str, width: int) -> list[str]:
    """Word-wrap a message, keeping its own line breaks.

    Words longer than the width are not broken. Empty lines are kept.
    """
    width = max(1, width)
    lines = []
    for line in message.split("\n"):
        lines += textwrap.wrap(
            line,
            width=width,
            break_long_words=False,
            break_on_hyphens=False,
        ) or [""]
    return lines


def box_lines(type_name: str, message: str, width: int) -> list[str]:
    """Content lines of the box: the type name and the wrapped message."""
    screen_width = width - 1
    return [f"[{type_name}]"] + wrap_message(message, screen_width - 2 * len(MARGIN))


def print_box(canvas: Canvas, type_name: str, message: str) -> None:
    """Print the error type and message inside an error styled box.

    The box is sized to its content. A type name or word wider than the
    canvas makes the box overflow rather than being cut.
    """
    io = canvas.io
    lines = box_lines(type_name, message, canvas.width)
    box_width = max(display_width(line) for line in lines)
    empty_line = to_markup([styled(" " * (box_width + 2 * len(MARGIN)), "error")])

    io.error_line("")
    io.error_line("")
    io.error_line(empty_line)
    for line in lines:
        padding = " " * (box_width - display_width(line))
        io.error_line(to_markup([styled(f"{MARGIN}{line}{padding}{MARGIN}", "error")]))
    io.error_line(empty_line)
    io.error_line("")
    io.error_line("")
