"""Split a span into display text and tag sequence.

Inner tagging looks for a tag sequence at the end of the span interior.
Outer tagging (emphasis spans only) looks at the start of the text right
after the closing delimiter, and is tried only when inner tagging found
nothing.
"""

from __future__ import annotations

from typing import Optional, Union

from .models import DEFAULT_OPTIONS, ExtractOptions, SpanExtraction, SpanKind, TagSequence
from .tokenizer import INNER_SEQUENCE_RE, OUTER_SEQUENCE_RE, parse_tag_sequence


def extract_span(
    interior: str,
    trailing: Optional[str] = None,
    *,
    enable_inner: bool = True,
    enable_outer: bool = True,
) -> SpanExtraction:
    if enable_inner:
        match = INNER_SEQUENCE_RE.search(interior)
        if match:
            sequence = parse_tag_sequence(match.group(0))
            if sequence.tags:
                return SpanExtraction(
                    tagged=True,
                    text=interior[: match.start()].rstrip(),
                    sequence=sequence,
                )

    if enable_outer and trailing:
        match = OUTER_SEQUENCE_RE.match(trailing)
        if match:
            sequence = parse_tag_sequence(match.group(0))
            if sequence.tags:
                return SpanExtraction(
                    tagged=True,
                    text=interior,
                    sequence=sequence,
                    outer=True,
                    consumed=match.end(),
                )

    return SpanExtraction(tagged=False, text=interior, sequence=TagSequence())


def extract_for_kind(
    kind: Union[SpanKind, str],
    interior: str,
    trailing: Optional[str] = None,
    *,
    options: ExtractOptions = DEFAULT_OPTIONS,
) -> SpanExtraction:
    """Apply the tagging rules that hold for ``kind``.

    Custom spans only carry inner tags and are not gated by ``enable_inner``;
    the toggles apply to emphasis spans.
    """
    kind = SpanKind(kind)
    if kind is SpanKind.CUSTOM:
        return extract_span(interior, None, enable_inner=True, enable_outer=False)
    return extract_span(
        interior,
        trailing,
        enable_inner=options.enable_inner,
        enable_outer=options.enable_outer,
    )
