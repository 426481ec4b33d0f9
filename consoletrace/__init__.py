from .canvas import Canvas
from .html import HtmlIO, html_traceback
from .io import IO, TtyIO, Verbosity
from .record import ErrorRecord, StackFrame, extract_record
from .trace import ExceptionTrace
from .tty import load, tty_traceback, unload

__all__ = [
    "load",
    "unload",
    "tty_traceback",
    "html_traceback",
    "extract_record",
    "ExceptionTrace",
    "ErrorRecord",
    "StackFrame",
    "Canvas",
    "IO",
    "TtyIO",
    "HtmlIO",
    "Verbosity",
]
