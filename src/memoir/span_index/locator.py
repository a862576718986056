from __future__ import annotations

import re
from typing import Iterator, Optional, Union

from .models import LocatedSpan, SpanKind

EMPHASIS_DELIMITER = "=="
CUSTOM_OPEN = "{{"
CUSTOM_CLOSE = "}}"

# Non-greedy and non-nested: the interior holds neither "{{" nor "}}".
_CUSTOM_SPAN_RE = re.compile(r"\{\{((?:(?!\{\{).)*?)\}\}")


def locate_span(line: str, kind: Union[SpanKind, str], cursor: int = 0) -> Optional[LocatedSpan]:
    """Find the first span of ``kind`` starting at or after ``cursor``.

    Returns ``None`` once the line holds no further complete delimiter pair.
    ``end`` is exclusive and points past the closing delimiter.
    """
    kind = SpanKind(kind)
    if cursor < 0 or cursor > len(line):
        raise ValueError(f"Cursor {cursor} outside line of length {len(line)}")

    if kind is SpanKind.MARK:
        open_i = line.find(EMPHASIS_DELIMITER, cursor)
        if open_i == -1:
            return None
        inner_start = open_i + len(EMPHASIS_DELIMITER)
        close_i = line.find(EMPHASIS_DELIMITER, inner_start)
        if close_i == -1:
            return None
        return LocatedSpan(
            kind=kind,
            start=open_i,
            end=close_i + len(EMPHASIS_DELIMITER),
            interior=line[inner_start:close_i],
        )

    match = _CUSTOM_SPAN_RE.search(line, cursor)
    if match is None:
        return None
    return LocatedSpan(kind=kind, start=match.start(), end=match.end(), interior=match.group(1))


def iter_spans(line: str, kind: Union[SpanKind, str]) -> Iterator[LocatedSpan]:
    """Yield every non-overlapping span of ``kind`` on ``line``, left to right."""
    cursor = 0
    while cursor < len(line):
        span = locate_span(line, kind, cursor)
        if span is None:
            return
        yield span
        cursor = span.end
