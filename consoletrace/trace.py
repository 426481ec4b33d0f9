from __future__ import annotations

from .box import print_box
from .canvas import Canvas
from .frames import cwd_prefix, frame_line, top_frame
from .logging import logger
from .markup import styled, to_markup
from .record import ErrorRecord, extract_record


class ExceptionTrace:
    """Renders an error and its causes according to the sink's verbosity.

    - Normal: a single ``fatal: <message>`` line.
    - Verbose: the error box and its exception trace.
    - Very verbose: the same for every cause in the chain, each introduced
      by a ``Caused by:`` line.

    Accepts an ErrorRecord or a Python exception, by default the exception
    currently being handled. The working directory used to shorten file paths
    defaults to the current one at render time.
    """

    def __init__(
        self,
        exception: ErrorRecord | BaseException | None = None,
        cwd: str | None = None,
    ) -> None:
        if not isinstance(exception, ErrorRecord):
            exception = extract_record(exception)
            if exception is None:
                raise ValueError("No exception to render")
        self.exception = exception
        self.cwd = cwd

    def render(self, canvas: Canvas) -> None:
        io = canvas.io
        record = self.exception

        if not io.is_verbose():
            io.error_line(to_markup([f"fatal: {record.message}"]))
            return

        prefix = cwd_prefix(self.cwd)
        self._render_record(canvas, record, prefix)

        if not io.is_very_verbose():
            return

        seen = {id(record)}
        while record.cause is not None:
            record = record.cause
            if id(record) in seen:
                logger.debug("Cycle in cause chain at %s, stopping", record.type_name)
                break
            seen.add(id(record))
            io.error_line("Caused by:")
            self._render_record(canvas, record, prefix)

    def _render_record(self, canvas: Canvas, record: ErrorRecord, prefix: str) -> None:
        print_box(canvas, record.type_name, record.message)
        print_trace(canvas, record, prefix)


def print_trace(canvas: Canvas, record: ErrorRecord, prefix: str) -> None:
    """Print the throw site followed by the stack frames of the record."""
    io = canvas.io
    io.error_line(to_markup([styled("Exception trace:", "b")]))
    for frame in (top_frame(record.origin), *record.frames):
        io.error_line_raw(frame_line(frame, prefix, io))
    io.error_line("")
    io.error_line("")
