from __future__ import annotations

import os

from .io import IO
from .markup import Segment, styled, to_markup
from .record import StackFrame

# Separator between namespace parts of a qualified type name
NAMESPACE_SEPARATOR = "."

NOT_AVAILABLE = "n/a"


def cwd_prefix(cwd: str | None = None) -> str:
    """Working directory with exactly one trailing separator."""
    return os.path.join(cwd if cwd is not None else os.getcwd(), "")


def split_qualified_type(
    qualified_type: str | None, separator: str | None = None
) -> tuple[str, str]:
    """Split a qualified type name into namespace and class.

    The namespace keeps its trailing separator, e.g.
    ``"pkg.mod.Foo"`` -> ``("pkg.mod.", "Foo")`` and ``"Foo"`` -> ``("", "Foo")``.
    The separator defaults to :data:`NAMESPACE_SEPARATOR`.
    """
    if not qualified_type:
        return "", ""
    if separator is None:
        separator = NAMESPACE_SEPARATOR
    pos = qualified_type.rfind(separator)
    if pos == -1:
        return "", qualified_type
    pos += len(separator)
    return qualified_type[:pos], qualified_type[pos:]


def frame_location(frame: StackFrame, prefix: str) -> str:
    """File relative to the working directory prefix, with the line number."""
    if frame.file is None:
        location = NOT_AVAILABLE
    elif frame.file.startswith(prefix):
        location = frame.file[len(prefix) :]
    else:
        location = frame.file
    line = NOT_AVAILABLE if frame.line is None else frame.line
    return f"{location}:{line}"


def frame_segments(frame: StackFrame, prefix: str) -> list[Segment]:
    namespace, class_ = split_qualified_type(frame.qualified_type)
    signature = f"{class_}{frame.call_operator or ''}{frame.function or ''}"
    segments: list[Segment] = ["  ", namespace]
    if signature:
        segments += [styled(f"{signature}()", "tt"), " "]
    segments += ["at ", styled(frame_location(frame, prefix), "em")]
    return segments


def frame_line(frame: StackFrame, prefix: str, io: IO) -> str:
    """Format a frame as a display line for ``io.error_line_raw()``."""
    return io.format(to_markup(frame_segments(frame, prefix)))


def top_frame(origin: tuple[str | None, int | None] | None) -> StackFrame:
    """Synthetic frame for the location where the error was raised."""
    file, line = origin or (None, None)
    return StackFrame(None, "", "", file, line)
