from __future__ import annotations

import logging
import sys
import threading
from typing import TextIO

from .canvas import Canvas
from .io import TtyIO, Verbosity
from .logging import logger
from .markup import to_markup
from .trace import ExceptionTrace

# Hooks replaced by load(), keyed by name, restored by unload()
_saved_hooks: dict = {}


def tty_traceback(
    exc: BaseException | None = None,
    *,
    file: TextIO | None = None,
    verbosity: Verbosity = Verbosity.VERBOSE,
    term_width: int | None = None,
    cwd: str | None = None,
    msg: str | None = None,
) -> None:
    """Render an exception trace to the terminal (or the given file).

    Args:
        exc: The exception to render. If None, uses the current exception.
        file: Output file. Defaults to sys.stderr.
        verbosity: How much of the error chain to show.
        term_width: Terminal width. Auto-detected if None.
        cwd: Directory that file paths are shown relative to. Defaults to
            the current working directory.
        msg: Optional plain text line printed before the trace.
    """
    io = TtyIO(file, verbosity=verbosity)
    trace = ExceptionTrace(exc, cwd=cwd)
    if msg:
        io.error_line(to_markup([msg.rstrip("\n")]))
    trace.render(Canvas(io, term_width))


def _render_or_fallback(exc, verbosity, fallback, *args) -> None:
    try:
        tty_traceback(exc=exc, verbosity=verbosity)
    except Exception:
        logger.debug(
            "Rendering %s failed, passing it on to %r",
            type(exc).__name__,
            fallback,
            exc_info=True,
        )
        fallback(*args)


def _emit_with_trace(handler, record, verbosity, emit) -> None:
    """Write the formatted record followed by its rendered exception."""
    exc_info = record.exc_info
    record.exc_info = None
    record.exc_text = None
    try:
        msg = handler.format(record)
    finally:
        record.exc_info = exc_info
    # Writes during rendering must not come back through the patched emit
    patched = logging.StreamHandler.emit
    logging.StreamHandler.emit = emit
    try:
        tty_traceback(exc_info[1], file=handler.stream, verbosity=verbosity, msg=msg)
    finally:
        logging.StreamHandler.emit = patched


def load(verbosity: Verbosity = Verbosity.NORMAL, capture_logging: bool = True) -> None:
    """Render uncaught exceptions with consoletrace.

    Installs hooks for ``sys.excepthook`` and ``threading.excepthook``, and with
    ``capture_logging`` also for ``logging.StreamHandler.emit`` so that records
    logged with exception info get a trace instead of a Python traceback.
    Loading again only changes the verbosity. Call :func:`unload` to restore
    the previous hooks.

    Usage:
        import consoletrace
        consoletrace.load(consoletrace.Verbosity.VERY_VERBOSE)
    """
    excepthook = _saved_hooks.setdefault("excepthook", sys.excepthook)
    thread_hook = _saved_hooks.setdefault("threading", threading.excepthook)

    def consoletrace_excepthook(exc_type, exc_value, exc_tb):
        _render_or_fallback(
            exc_value, verbosity, excepthook, exc_type, exc_value, exc_tb
        )

    def consoletrace_threading_excepthook(args):  # pragma: no cover
        _render_or_fallback(args.exc_value, verbosity, thread_hook, args)

    sys.excepthook = consoletrace_excepthook
    threading.excepthook = consoletrace_threading_excepthook

    if not capture_logging:
        return
    emit = _saved_hooks.setdefault("emit", logging.StreamHandler.emit)

    def consoletrace_emit(self, record: logging.LogRecord) -> None:
        if not record.exc_info or record.exc_info[1] is None:
            return emit(self, record)
        try:
            _emit_with_trace(self, record, verbosity, emit)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    logging.StreamHandler.emit = consoletrace_emit  # type: ignore[method-assign]


def unload() -> None:
    """Restore the hooks replaced by :func:`load`."""
    if "excepthook" in _saved_hooks:
        sys.excepthook = _saved_hooks.pop("excepthook")
    if "threading" in _saved_hooks:
        threading.excepthook = _saved_hooks.pop("threading")
    if "emit" in _saved_hooks:
        logging.StreamHandler.emit = _saved_hooks.pop("emit")
