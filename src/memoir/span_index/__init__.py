"""Tagged span extraction and indexing."""

from .extractor import extract_for_kind, extract_span
from .indexer import (
    RebuildCancelled,
    RebuildSummary,
    extract_from_document,
    extract_from_rendered_span,
    index_document,
    rebuild_index,
    record_rendered_span,
)
from .locator import iter_spans, locate_span
from .models import (
    ExtractOptions,
    LocatedSpan,
    SpanExtraction,
    SpanIndexConfig,
    SpanKind,
    SpanRecord,
    TagSequence,
)
from .rendered import extract_from_rendered_html, index_rendered_html
from .store import SpanIndex, load_index_json, write_index_json
from .tokenizer import parse_tag_sequence

__all__ = [
    "ExtractOptions",
    "LocatedSpan",
    "RebuildCancelled",
    "RebuildSummary",
    "SpanExtraction",
    "SpanIndex",
    "SpanIndexConfig",
    "SpanKind",
    "SpanRecord",
    "TagSequence",
    "extract_for_kind",
    "extract_from_document",
    "extract_from_rendered_html",
    "extract_from_rendered_span",
    "extract_span",
    "index_document",
    "index_rendered_html",
    "iter_spans",
    "load_index_json",
    "locate_span",
    "parse_tag_sequence",
    "rebuild_index",
    "record_rendered_span",
    "write_index_json",
]
