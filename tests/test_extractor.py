import pytest

from memoir.span_index.extractor import extract_for_kind, extract_span
from memoir.span_index.models import ExtractOptions, SpanKind


def test_inner_tags_split_from_display_text():
    result = extract_span("日記: #気分 #外出")
    assert result.tagged
    assert not result.outer
    assert result.text == "日記"
    assert result.sequence.tags == ["気分", "外出"]


def test_inner_sequence_must_end_the_interior():
    result = extract_span("a: #x and more")
    assert not result.tagged
    assert result.text == "a: #x and more"


def test_outer_tags_after_closing_delimiter():
    trailing = ": #t1 #t2 rest of line"
    result = extract_span("テキスト", trailing)
    assert result.tagged
    assert result.outer
    assert result.text == "テキスト"
    assert result.sequence.tags == ["t1", "t2"]
    assert trailing[result.consumed :] == " rest of line"


def test_inner_wins_over_outer():
    result = extract_span("x: #inner", ": #outer")
    assert result.sequence.tags == ["inner"]
    assert result.consumed == 0


def test_toggles_gate_each_rule():
    assert not extract_span("x", ": #t", enable_outer=False).tagged
    result = extract_span("x: #a", ": #b", enable_inner=False)
    assert result.sequence.tags == ["b"]
    assert result.text == "x: #a"


def test_outer_needs_colon_at_start():
    assert not extract_span("x", " and then: #t").tagged


def test_untagged_span():
    result = extract_span("plain highlight")
    assert not result.tagged
    assert result.sequence.tags == []


def test_custom_spans_use_inner_only():
    options = ExtractOptions(enable_inner=False, enable_outer=True)
    result = extract_for_kind(SpanKind.CUSTOM, " 対象 : #tag1 ", ": #ignored", options=options)
    assert result.tagged
    assert result.sequence.tags == ["tag1"]
    assert not extract_for_kind("custom", "plain", ": #t").tagged


def test_unclosed_group_on_last_tag_still_tags():
    result = extract_span("x: #a(k=v")
    assert result.tagged
    assert result.text == "x"
    assert result.sequence.tags == ["a"]
    assert result.sequence.attrs == {}


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        extract_for_kind("link", "x: #a")
