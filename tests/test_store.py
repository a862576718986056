import json

import pytest
from pydantic import ValidationError

from memoir.span_index.models import SpanKind, SpanRecord
from memoir.span_index.store import SpanIndex, load_index_json, write_index_json


def _rec(file: str = "a.md", line: int = 0, start: int = 0, tags=None, **kwargs) -> SpanRecord:
    return SpanRecord(
        file=file,
        line=line,
        from_=start,
        to=start + 5,
        text=kwargs.pop("text", "日記"),
        tags=tags or ["気分"],
        attrs=kwargs.pop("attrs", {}),
        kind=kwargs.pop("kind", SpanKind.MARK),
    )


def test_to_json_uses_export_field_names():
    index = SpanIndex([_rec(attrs={"note": "メモ"})])
    [item] = index.to_json()
    assert list(item) == ["file", "line", "from", "to", "text", "tags", "attrs", "kind"]
    assert item["from"] == 0
    assert item["to"] == 5
    assert item["kind"] == "mark"
    assert item["attrs"] == {"note": "メモ"}


def test_dumps_keeps_unicode_text():
    dumped = SpanIndex([_rec()]).dumps()
    assert "日記" in dumped
    assert json.loads(dumped)[0]["tags"] == ["気分"]


def test_all_returns_a_snapshot():
    index = SpanIndex()
    index.append(_rec())
    snapshot = index.all()
    index.append(_rec(line=1))
    assert len(snapshot) == 1
    assert len(index) == 2
    index.clear()
    assert index.all() == ()


def test_export_file_round_trip(tmp_path):
    index = SpanIndex([_rec(), _rec(file="b.md", kind=SpanKind.CUSTOM, attrs={"k": "v"})])
    path = write_index_json(index, tmp_path / "meta" / "index.json")
    assert path.exists()
    loaded = load_index_json(path)
    assert loaded.all() == index.all()


def test_load_rejects_non_array(tmp_path):
    path = tmp_path / "index.json"
    path.write_text('{"file": "a.md"}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_index_json(path)


def test_select_filters_by_file_and_tag():
    index = SpanIndex([_rec(tags=["x", "y"]), _rec("b.md", tags=["y"]), _rec("b.md", line=3, tags=["x"])])
    assert [r.file for r in index.select(tag="y")] == ["a.md", "b.md"]
    assert [r.line for r in index.select(file="b.md")] == [0, 3]
    assert [r.line for r in index.select(file="b.md", tag="x")] == [3]
    assert index.select(file="c.md") == []
    assert len(index.select()) == 3


def test_record_requires_a_tag():
    with pytest.raises(ValidationError):
        SpanRecord(file="a.md", line=0, text="x", tags=[], kind="mark")
