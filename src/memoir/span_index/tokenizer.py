"""Tag-sequence grammar shared by every extraction path.

A tag sequence is a colon followed by whitespace-separated ``#name`` tokens,
each optionally carrying a parenthesized attribute group::

    : #mood #place(city=Kyoto; note=rainy)

Tag names are any run of code points other than whitespace, ``:``, ``(``
and ``)``. Attributes from every group merge into one map for the span;
later keys overwrite earlier ones.
"""

from __future__ import annotations

import logging
import re

from .models import TagSequence

logger = logging.getLogger(__name__)

TAG_MARKER = "#"

_TAG_NAME = r"[^\s:()]+"
_TAG_TOKEN = rf"#{_TAG_NAME}(?:\([^()]*\))?"
_SEQUENCE = rf":\s*{_TAG_TOKEN}(?:\s+{_TAG_TOKEN})*"

# Suffix of a span interior. The last tag may carry an unclosed group.
INNER_SEQUENCE_RE = re.compile(rf"{_SEQUENCE}(?:\([^()]*)?\s*\Z")
# Prefix of the text right after a closing delimiter.
OUTER_SEQUENCE_RE = re.compile(rf"\A\s*{_SEQUENCE}")

_COLON_MARKER_RE = re.compile(r":\s*#")
_TOKEN_RE = re.compile(r"(?<![^\s:])#([^\s:()]+)")
_ATTR_SEPARATOR_RE = re.compile(r"[;,]")


def parse_attr_group(group: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for part in _ATTR_SEPARATOR_RE.split(group):
        part = part.strip()
        if not part:
            continue
        key, _, value = part.partition("=")
        key = key.strip()
        value = value.strip()
        if key and value:
            attrs[key] = value
    return attrs


def parse_tag_sequence(seq: str) -> TagSequence:
    """Tokenize a trailing tag string into ordered tag names and merged attributes.

    Tokens are read after the first colon (``: #a`` and ``:#a`` are the
    same) up to the next colon outside an attribute group; a string without
    any colon is read as a bare token list. Returns an empty ``TagSequence``
    when a colon is present but no ``#`` token follows it. Duplicated tag
    names are kept in order of appearance. An unbalanced or empty attribute group is
    dropped; its tag name is still recorded.
    """
    opening = _COLON_MARKER_RE.search(seq)
    if opening is None and ":" in seq.split(TAG_MARKER, 1)[0]:
        return TagSequence()

    tags: list[str] = []
    attrs: dict[str, str] = {}
    pos = opening.end() - 1 if opening is not None else 0
    while True:
        # A colon outside a group ends the sequence.
        stop = seq.find(":", pos)
        match = _TOKEN_RE.search(seq, pos, stop if stop != -1 else len(seq))
        if match is None:
            break
        name = match.group(1)
        tags.append(name)
        pos = match.end()

        if not seq.startswith("(", pos):
            continue
        close = seq.find(")", pos + 1)
        nested = seq.find("(", pos + 1)
        if close == -1 or (nested != -1 and nested < close):
            logger.debug(f"Dropping unbalanced attribute group on tag {name!r}")
            continue
        group_attrs = parse_attr_group(seq[pos + 1 : close])
        if not group_attrs:
            logger.debug(f"Attribute group on tag {name!r} has no key=value pairs")
        attrs.update(group_attrs)
        pos = close + 1

    return TagSequence(tags=tags, attrs=attrs)
