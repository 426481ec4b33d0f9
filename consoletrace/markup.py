"""Style tokens and the tag markup that sinks understand.

Renderers build lines as sequences of segments, each either a plain string or
a :data:`Styled` value. Markup strings such as ``<error>text</error>`` only
exist at the boundary to an output sink, which parses them back into segments
before turning them into ANSI codes or HTML.
"""

from __future__ import annotations

import re
from collections import namedtuple
from typing import Iterable, Union

# Text with a tuple of style names, outermost style first
Styled = namedtuple("Styled", ["text", "styles"])

Segment = Union[str, Styled]

# Style tags recognized by the sinks, anything else stays literal text
STYLES = ("b", "u", "em", "tt", "c1", "c2", "warn", "error")

# Escaped "\\" or "<", or an opening/closing tag
TOKEN_RE = re.compile(r"\\([\\<])|<(/?)([a-z][a-z0-9]*)>")


def styled(text: str, *styles: str) -> Styled:
    return Styled(text, styles)


def escape(text: str) -> str:
    """Escape text so that it is never interpreted as markup."""
    return text.replace("\\", "\\\\").replace("<", "\\<")


def plain(segments: Iterable[Segment]) -> str:
    """Concatenate the text of all segments, dropping styles."""
    return "".join(seg.text if isinstance(seg, Styled) else seg for seg in segments)


def to_markup(segments: Iterable[Segment]) -> str:
    """Serialize segments into tag markup, escaping the text."""
    out = []
    for seg in segments:
        if isinstance(seg, Styled):
            text = escape(seg.text)
            for style in reversed(seg.styles):
                text = f"<{style}>{text}</{style}>"
            out.append(text)
        else:
            out.append(escape(seg))
    return "".join(out)


def parse_markup(text: str) -> list[Segment]:
    """Parse tag markup into segments.

    Nested tags are flattened into the styles tuple of each segment. ``\\<``
    and ``\\\\`` stand for a literal ``<`` and backslash. Unknown
    tags and closing tags that do not match the innermost open tag are kept
    as literal text. A tag left open styles the rest of the text.
    """
    segments: list[Segment] = []
    stack: list[str] = []
    buf = ""

    def flush() -> None:
        nonlocal buf
        if buf:
            segments.append(Styled(buf, tuple(stack)) if stack else buf)
            buf = ""

    pos = 0
    for m in TOKEN_RE.finditer(text):
        buf += text[pos : m.start()]
        pos = m.end()
        escaped, closing, tag = m.groups()
        if escaped:
            buf += escaped
        elif tag not in STYLES:
            buf += m.group()
        elif closing:
            if stack and stack[-1] == tag:
                flush()
                stack.pop()
            else:
                buf += m.group()
        else:
            flush()
            stack.append(tag)
    buf += text[pos:]
    flush()
    return segments
