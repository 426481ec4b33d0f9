from __future__ import annotations

import sys
import traceback
from collections import namedtuple

from .logging import logger

StackFrame = namedtuple(
    "StackFrame",
    ["qualified_type", "call_operator", "function", "file", "line"],
    defaults=(None, "", "", None, None),
)

ErrorRecord = namedtuple(
    "ErrorRecord",
    ["type_name", "message", "frames", "origin", "cause"],
    defaults=("", (), None, None),
)

# Operator between the owner type and the function name of a method call
MEMBER_CALL = "."


def type_name(exc: BaseException) -> str:
    """Qualified name of the exception class, without the builtins module."""
    cls = type(exc)
    if cls.__module__ in ("builtins", "__builtin__"):
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def extract_record(exc: BaseException | None = None) -> ErrorRecord | None:
    """Convert an exception and its causes into an ErrorRecord chain.

    Follows ``__cause__``, or ``__context__`` unless the context was
    suppressed with ``raise ... from None``. Returns None if there is no
    exception to extract.
    """
    exc = exc or sys.exc_info()[1]
    chain = []
    seen = set()
    while exc is not None:
        if id(exc) in seen:
            logger.debug("Cycle in exception chain at %s, cutting it", type_name(exc))
            break
        seen.add(id(exc))
        chain.append(exc)
        exc = exc.__cause__ or (None if exc.__suppress_context__ else exc.__context__)

    # Build from the root cause outwards so that each record can link its cause
    record = None
    for e in reversed(chain):
        record = extract_exception(e, cause=record)
    return record


def extract_exception(
    e: BaseException, *, cause: ErrorRecord | None = None
) -> ErrorRecord:
    """Extract a single exception, linking it to an already extracted cause."""
    message = getattr(e, "message", "") or str(e)
    if not isinstance(message, str):
        message = str(message)
    try:
        frames, origin = extract_frames(e.__traceback__)
    except Exception:
        logger.exception("Error extracting traceback")
        frames, origin = (), None
    return ErrorRecord(type_name(e), message, frames, origin, cause)


def extract_frames(tb) -> tuple[tuple[StackFrame, ...], tuple[str, int] | None]:
    """Extract stack frames and the throw site from a traceback.

    Returns ``(frames, origin)``. Frames are innermost first: each names a
    function and the location where that function was called from. The
    origin is the location of the innermost entry not hidden with
    ``__tracebackhide__``, normally where the exception was raised.
    """
    if tb is None:
        return (), None

    entries = []
    for frame, lineno in traceback.walk_tb(tb):
        hide = frame.f_globals.get("__tracebackhide__") or frame.f_locals.get(
            "__tracebackhide__"
        )
        if hide == "until":
            # Hide this frame and all outer frames
            entries = []
            continue
        if not hide:
            entries.append((frame, lineno))

    if not entries:
        return (), None

    # A hidden innermost frame moves the throw site to its visible caller
    last_frame, last_lineno = entries[-1]
    origin = (last_frame.f_code.co_filename, last_lineno)

    frames = []
    for i in range(len(entries) - 1, 0, -1):
        frame, _ = entries[i]
        caller, caller_lineno = entries[i - 1]
        qualified_type, function = _frame_owner(frame)
        frames.append(
            StackFrame(
                qualified_type,
                MEMBER_CALL if qualified_type else "",
                function,
                caller.f_code.co_filename,
                caller_lineno,
            )
        )
    return tuple(frames), origin


def _frame_owner(frame) -> tuple[str | None, str]:
    """Find the qualified owner type and the function name of a frame.

    Returns ``(None, name)`` for plain functions.
    """
    code = frame.f_code
    module = frame.f_globals.get("__name__")
    qualname = getattr(code, "co_qualname", None)
    if qualname is None:
        # Python < 3.11 has no co_qualname, guess the owner from self/cls
        qualname = code.co_name
        owner = frame.f_locals.get("self", frame.f_locals.get("cls"))
        if owner is not None and code.co_varnames[:1] in (("self",), ("cls",)):
            cls = owner if isinstance(owner, type) else type(owner)
            return f"{cls.__module__}.{cls.__qualname__}", qualname
        return None, qualname

    owner, sep, function = qualname.rpartition(".")
    if not sep or owner.endswith("<locals>"):
        return None, qualname
    return (f"{module}.{owner}" if module else owner), function
