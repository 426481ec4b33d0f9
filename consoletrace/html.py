from __future__ import annotations

from typing import Any, Sequence

from html5tagger import HTML, E  # type: ignore[import]

from .canvas import Canvas
from .io import IO, Verbosity
from .markup import Segment, Styled
from .trace import ExceptionTrace

# Element used for each style, other styles become a span with the style as class
HTML_TAGS = {
    "b": "strong",
    "u": "u",
    "em": "em",
    "tt": "code",
}


def _styled_element(text: str, styles: Sequence[str]) -> Any:
    elem: Any = text
    for style in reversed(styles):
        tag = HTML_TAGS.get(style)
        if tag:
            elem = getattr(E, tag)(elem)
        else:
            elem = E.span(elem, class_=style)
    return elem


class HtmlIO(IO):
    """Collects error lines as HTML, for display in browsers and notebooks."""

    def __init__(
        self, verbosity: Verbosity = Verbosity.NORMAL, width: int | None = None
    ) -> None:
        super().__init__(verbosity, width)
        self.lines: list[str] = []

    def render_segments(self, segments: Sequence[Segment]) -> str:
        parts = [
            _styled_element(seg.text, seg.styles) if isinstance(seg, Styled) else seg
            for seg in segments
        ]
        return str(E.span(*parts, class_="line"))

    def _write(self, line: str) -> None:
        self.lines.append(line)

    def document(self) -> Any:
        with E.div(class_="consoletrace") as doc, doc.pre:
            for line in self.lines:
                doc(HTML(line))
                doc("\n")
        return doc


def html_traceback(
    exc: BaseException | None = None,
    *,
    verbosity: Verbosity = Verbosity.VERBOSE,
    width: int = 80,
    cwd: str | None = None,
) -> Any:
    """Render an exception (default: the one being handled) as HTML."""
    io = HtmlIO(verbosity)
    ExceptionTrace(exc, cwd=cwd).render(Canvas(io, width))
    return io.document()
