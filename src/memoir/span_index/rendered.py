"""Live extraction over rendered HTML fragments.

Emphasis spans arrive as ``<mark>`` elements; the text node right after a
mark is its outer-tagging candidate. Custom spans are still raw ``{{...}}``
runs inside text nodes. Text under code, pre, mark and links is left alone.
"""

from __future__ import annotations

from typing import Iterator, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .indexer import record_rendered_span
from .locator import iter_spans
from .models import DEFAULT_OPTIONS, ExtractOptions, SpanKind, SpanRecord
from .store import SpanIndex

_SKIP_PARENTS = {"code", "pre", "mark", "a", "script", "style"}


def _inside_skipped(node: NavigableString) -> bool:
    return any(parent.name in _SKIP_PARENTS for parent in node.parents)


def _trailing_text(mark: Tag) -> Optional[str]:
    sibling = mark.next_sibling
    if isinstance(sibling, NavigableString) and not isinstance(sibling, Comment):
        return str(sibling)
    return None


def iter_rendered_candidates(html: str) -> Iterator[tuple[SpanKind, str, Optional[str]]]:
    """Yield ``(kind, interior, trailing)`` for each candidate in document order."""
    soup = BeautifulSoup(html, "html.parser")
    for node in soup.descendants:
        if isinstance(node, Tag):
            if node.name == "mark":
                yield SpanKind.MARK, node.get_text(), _trailing_text(node)
            continue
        if not isinstance(node, NavigableString) or isinstance(node, Comment):
            continue
        if _inside_skipped(node):
            continue
        for span in iter_spans(str(node), SpanKind.CUSTOM):
            yield SpanKind.CUSTOM, span.interior, None


def index_rendered_html(
    index: SpanIndex,
    identifier: str,
    html: str,
    *,
    line: int = 0,
    options: ExtractOptions = DEFAULT_OPTIONS,
) -> list[SpanRecord]:
    """Append a record for every tagged span of a rendered fragment."""
    records: list[SpanRecord] = []
    for kind, interior, trailing in iter_rendered_candidates(html):
        record = record_rendered_span(index, identifier, kind, interior, trailing, line=line, options=options)
        if record is not None:
            records.append(record)
    return records


def extract_from_rendered_html(
    identifier: str,
    html: str,
    *,
    line: int = 0,
    options: ExtractOptions = DEFAULT_OPTIONS,
) -> list[SpanRecord]:
    return index_rendered_html(SpanIndex(), identifier, html, line=line, options=options)
