from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TokenKind(StrEnum):
    IDENTIFIER = "identifier"
    PUNCTUATOR = "punctuator"
    STRING_LITERAL = "string-literal"
    TEMPLATE_LITERAL = "template-literal"
    LINE_COMMENT = "line-comment"
    BLOCK_COMMENT = "block-comment"
    WHITESPACE = "whitespace"
    LINE_TERMINATOR = "line-terminator"
    OTHER = "other"


class Keyword(StrEnum):
    GEN = "gen"
    FUNCTION = "function"


TRIVIA_KINDS = frozenset(
    {
        TokenKind.WHITESPACE,
        TokenKind.LINE_TERMINATOR,
        TokenKind.LINE_COMMENT,
        TokenKind.BLOCK_COMMENT,
    }
)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int
    keyword: Keyword | None = None

    def is_punctuator(self, value: str) -> bool:
        return self.kind is TokenKind.PUNCTUATOR and self.text == value


@dataclass(frozen=True)
class GenBlock:
    start: int
    brace_start: int
    end: int
    content: str

    @property
    def content_start(self) -> int:
        return self.brace_start + 1

    @property
    def content_end(self) -> int:
        return self.end - 1


class EditKind(StrEnum):
    OVERWRITE = "overwrite"
    INSERT_BEFORE = "insert-before"
    INSERT_AFTER = "insert-after"


@dataclass(frozen=True)
class Edit:
    kind: EditKind
    pos: int
    text: str
    end: int | None = None

    @property
    def range_end(self) -> int:
        return self.end if self.end is not None else self.pos


@dataclass(frozen=True)
class Mapping:
    original_line: int
    original_column: int
    generated_line: int
    generated_column: int


@dataclass(frozen=True)
class DecodedMapping:
    generated_line: int
    generated_column: int
    source_index: int
    original_line: int
    original_column: int
    name_index: int | None = None


class SourceMapData(BaseModel):
    """Version 3 source map descriptor with a single source and no names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: int = 3
    file: str | None = None
    sources: list[str]
    sources_content: list[str | None] | None = Field(default=None, alias="sourcesContent")
    names: list[str] = Field(default_factory=list)
    mappings: str

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class TextSpan(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int
    length: int


class SourceFileRef(BaseModel):
    file_name: str


class Diagnostic(BaseModel):
    """Host compiler diagnostic; only ``file``, ``start`` and ``length`` are remapped."""

    file: SourceFileRef | None = None
    start: int | None = None
    length: int | None = None
    message: str = ""
    code: int | None = None
    category: str = "error"


@dataclass(frozen=True)
class TransformCacheEntry:
    original_text: str
    transformed_text: str
    raw_map: SourceMapData
    decoded_mappings: tuple[DecodedMapping, ...]
    file_key: str
