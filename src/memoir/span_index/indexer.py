from __future__ import annotations

import fnmatch
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from .extractor import extract_for_kind
from .locator import EMPHASIS_DELIMITER, iter_spans, locate_span
from .models import (
    DEFAULT_OPTIONS,
    ExtractOptions,
    LocatedSpan,
    SpanIndexConfig,
    SpanKind,
    SpanRecord,
    TagSequence,
)
from .store import SpanIndex

logger = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\r?\n")


class RebuildCancelled(Exception):
    """Raised when a rebuild is aborted between documents."""


@dataclass(frozen=True)
class RebuildSummary:
    scanned: int
    indexed: int
    skipped: int
    records: int


def split_lines(raw_text: str) -> list[str]:
    return _LINE_BREAK_RE.split(raw_text)


def _make_record(
    identifier: str,
    line_no: int,
    kind: SpanKind,
    span: Optional[LocatedSpan],
    text: str,
    sequence: TagSequence,
) -> SpanRecord:
    return SpanRecord(
        file=identifier,
        line=line_no,
        from_=span.start if span is not None else 0,
        to=span.end if span is not None else 0,
        text=text.strip(),
        tags=list(sequence.tags),
        attrs=dict(sequence.attrs),
        kind=kind,
    )


def _extract_line(
    identifier: str,
    line_no: int,
    line: str,
    options: ExtractOptions,
) -> list[SpanRecord]:
    records: list[SpanRecord] = []

    cursor = 0
    while cursor < len(line):
        span = locate_span(line, SpanKind.MARK, cursor)
        if span is None:
            break
        # Trailing text stops at the next emphasis delimiter, as a rendered text node would.
        next_open = line.find(EMPHASIS_DELIMITER, span.end)
        trailing = line[span.end : next_open if next_open != -1 else None]
        extraction = extract_for_kind(SpanKind.MARK, span.interior, trailing, options=options)
        if extraction.tagged:
            records.append(
                _make_record(identifier, line_no, SpanKind.MARK, span, extraction.text, extraction.sequence)
            )
        cursor = span.end + extraction.consumed

    for span in iter_spans(line, SpanKind.CUSTOM):
        extraction = extract_for_kind(SpanKind.CUSTOM, span.interior, options=options)
        if extraction.tagged:
            records.append(
                _make_record(identifier, line_no, SpanKind.CUSTOM, span, extraction.text, extraction.sequence)
            )

    records.sort(key=lambda r: r.from_)
    return records


def extract_from_document(
    identifier: str,
    raw_text: str,
    *,
    options: ExtractOptions = DEFAULT_OPTIONS,
) -> list[SpanRecord]:
    """Batch path: every tagged span of a raw document, in document order."""
    records: list[SpanRecord] = []
    for line_no, line in enumerate(split_lines(raw_text)):
        records.extend(_extract_line(identifier, line_no, line, options))
    logger.debug(f"Extracted {len(records)} span record(s) from {identifier}")
    return records


def extract_from_rendered_span(
    kind: Union[SpanKind, str],
    interior_text: str,
    trailing_text: Optional[str] = None,
    *,
    options: ExtractOptions = DEFAULT_OPTIONS,
) -> tuple[bool, str, TagSequence]:
    """Live path primitive for one rendered span element.

    ``trailing_text`` is the text right after the element; it is only
    consulted for emphasis spans with outer tagging enabled.
    """
    extraction = extract_for_kind(kind, interior_text, trailing_text, options=options)
    return extraction.tagged, extraction.text.strip(), extraction.sequence


def record_rendered_span(
    index: SpanIndex,
    identifier: str,
    kind: Union[SpanKind, str],
    interior_text: str,
    trailing_text: Optional[str] = None,
    *,
    line: int = 0,
    options: ExtractOptions = DEFAULT_OPTIONS,
) -> Optional[SpanRecord]:
    """Run the live primitive and append the resulting record, if tagged.

    Offsets are not recoverable from rendered markup and stay at zero.
    """
    kind = SpanKind(kind)
    tagged, text, sequence = extract_from_rendered_span(kind, interior_text, trailing_text, options=options)
    if not tagged:
        return None
    record = _make_record(identifier, line, kind, None, text, sequence)
    index.append(record)
    return record


def index_document(
    index: SpanIndex,
    identifier: str,
    raw_text: str,
    *,
    options: ExtractOptions = DEFAULT_OPTIONS,
) -> list[SpanRecord]:
    """Re-index one document, replacing whatever the index held for it."""
    records = extract_from_document(identifier, raw_text, options=options)
    index.replace_document(identifier, records)
    return records


def _is_excluded(rel_posix: str, exclude_globs: list[str]) -> bool:
    for pat in exclude_globs:
        if fnmatch.fnmatchcase(rel_posix, pat):
            return True
    return False


def iter_markdown_documents(vault_root: Path, exclude_globs: list[str]) -> list[tuple[str, Path]]:
    """List ``(identifier, path)`` for every Markdown file, sorted by identifier."""
    docs: list[tuple[str, Path]] = []
    for p in vault_root.rglob("*.md"):
        if not p.is_file():
            continue
        rel_posix = p.relative_to(vault_root).as_posix()
        if _is_excluded(rel_posix, exclude_globs):
            continue
        docs.append((rel_posix, p))
    docs.sort(key=lambda item: item[0])
    return docs


def _read_and_extract(
    identifier: str,
    path: Path,
    options: ExtractOptions,
) -> Optional[list[SpanRecord]]:
    try:
        raw_text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Skipping {identifier}: not valid UTF-8 ({e})")
        return None
    return extract_from_document(identifier, raw_text, options=options)


def rebuild_index(
    cfg: SpanIndexConfig,
    index: SpanIndex,
    *,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> RebuildSummary:
    """Clear ``index`` and re-scan every document of the vault.

    Documents are processed in identifier order; with ``cfg.workers > 1``
    extraction runs in a thread pool and results are merged in that same
    order. ``should_cancel`` is checked between documents.
    """
    docs = iter_markdown_documents(cfg.vault_root, cfg.exclude_globs)
    logger.info(f"Rebuilding span index over {len(docs)} document(s) in {cfg.vault_root}")
    index.clear()

    scanned = 0
    indexed = 0
    skipped = 0
    records = 0

    def _merge(identifier: str, doc_records: Optional[list[SpanRecord]]) -> None:
        nonlocal scanned, indexed, skipped, records
        scanned += 1
        if doc_records is None:
            skipped += 1
            return
        indexed += 1
        records += len(doc_records)
        index.extend(doc_records)

    def _check_cancel() -> None:
        if should_cancel is not None and should_cancel():
            logger.info(f"Rebuild cancelled after {scanned} document(s)")
            raise RebuildCancelled(f"Rebuild cancelled after {scanned} of {len(docs)} document(s)")

    if cfg.workers <= 1:
        for identifier, path in docs:
            _check_cancel()
            _merge(identifier, _read_and_extract(identifier, path, cfg.options))
    else:
        pool = ThreadPoolExecutor(max_workers=cfg.workers)
        try:
            futures = [
                (identifier, pool.submit(_read_and_extract, identifier, path, cfg.options))
                for identifier, path in docs
            ]
            for identifier, future in futures:
                _check_cancel()
                _merge(identifier, future.result())
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    logger.info(f"Rebuilt span index: {records} record(s) from {indexed} document(s), {skipped} skipped")
    return RebuildSummary(scanned=scanned, indexed=indexed, skipped=skipped, records=records)
