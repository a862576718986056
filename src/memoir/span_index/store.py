from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from .models import SpanRecord


class SpanIndex:
    """Ordered, in-memory collection of span records.

    Appends are guarded by a lock so parallel extraction workers may share
    one index. Readers get a snapshot tuple, never the live list.
    """

    def __init__(self, records: Optional[Iterable[SpanRecord]] = None):
        self._records: list[SpanRecord] = list(records or [])
        self._lock = threading.Lock()

    def clear(self) -> None:
        with self._lock:
            self._records = []

    def append(self, record: SpanRecord) -> None:
        with self._lock:
            self._records.append(record)

    def extend(self, records: Iterable[SpanRecord]) -> None:
        records = list(records)
        with self._lock:
            self._records.extend(records)

    def all(self) -> tuple[SpanRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def replace_document(self, identifier: str, records: Iterable[SpanRecord]) -> None:
        """Swap every record of ``identifier`` for ``records``.

        New records take the place of the first old one, or go to the end
        when the document was not indexed before.
        """
        records = list(records)
        with self._lock:
            kept: list[SpanRecord] = []
            insert_at: Optional[int] = None
            for record in self._records:
                if record.file == identifier:
                    if insert_at is None:
                        insert_at = len(kept)
                    continue
                kept.append(record)
            if insert_at is None:
                insert_at = len(kept)
            kept[insert_at:insert_at] = records
            self._records = kept

    def select(self, *, file: Optional[str] = None, tag: Optional[str] = None) -> list[SpanRecord]:
        """Records in index order, narrowed to one document and/or one tag."""
        records = self.all()
        return [
            r
            for r in records
            if (file is None or r.file == file) and (tag is None or tag in r.tags)
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[SpanRecord]:
        return iter(self.all())

    def to_json(self) -> list[dict[str, Any]]:
        return [record.to_json() for record in self.all()]

    def dumps(self) -> str:
        return json.dumps(self.to_json(), ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, data: list[dict[str, Any]]) -> "SpanIndex":
        return cls(SpanRecord.model_validate(item) for item in data)


def write_index_json(index: SpanIndex, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(index.dumps() + "\n", encoding="utf-8")
    return path


def load_index_json(path: Path) -> SpanIndex:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Index export must be a JSON array: {path}")
    return SpanIndex.from_json(data)
