from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class SpanKind(str, Enum):
    MARK = "mark"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ExtractOptions:
    enable_inner: bool = True
    enable_outer: bool = True


DEFAULT_OPTIONS = ExtractOptions()


@dataclass(frozen=True)
class SpanIndexConfig:
    vault_root: Path
    export_path: Path
    exclude_globs: list[str]
    options: ExtractOptions = DEFAULT_OPTIONS
    workers: int = 1


@dataclass(frozen=True)
class TagSequence:
    tags: list[str] = field(default_factory=list)
    attrs: dict[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.tags)


@dataclass(frozen=True)
class LocatedSpan:
    kind: SpanKind
    start: int
    end: int
    interior: str


@dataclass(frozen=True)
class SpanExtraction:
    tagged: bool
    text: str
    sequence: TagSequence
    outer: bool = False
    consumed: int = 0


class SpanRecord(BaseModel):
    """One tagged span occurrence.

    ``from`` is a Python keyword, so the start offset lives on ``from_`` and
    is exposed as ``from`` in every serialized form.
    """

    file: str = Field(description="Document identifier")
    line: int = Field(ge=0, description="Zero-based line number")
    from_: int = Field(default=0, ge=0, alias="from", description="Start offset within the line")
    to: int = Field(default=0, ge=0, description="End offset (exclusive) within the line")
    text: str = Field(description="Display text with the tag sequence removed")
    tags: list[str] = Field(min_length=1, description="Tag names without the leading marker")
    attrs: dict[str, str] = Field(default_factory=dict, description="Merged attribute map")
    kind: SpanKind

    model_config = {"frozen": True, "populate_by_name": True}

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
