from __future__ import annotations

from .io import IO


class Canvas:
    """A fixed width drawing surface on top of an output sink."""

    def __init__(self, io: IO, width: int | None = None) -> None:
        self.io = io
        self.width = width if width is not None else io.terminal_width()

    def __repr__(self) -> str:
        return f"Canvas(io={self.io!r}, width={self.width})"
