from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from gen_block.core.scanner import tokenize
from gen_block.models import Edit, EditKind, Keyword, Token, TokenKind

_BIND_LINE = re.compile(
    r"^(?P<indent>\s*)"
    r"(?:(?P<target>[A-Za-z_$][\w$]*|\[[\w$\s,]+\]|\{[\w$\s,:]+\})\s*)?"
    r"(?P<arrow><-)\s*(?P<expr>.+?)\s*$",
    re.ASCII,
)

_BIND_KEYWORD = "const "
_SUSPEND = "yield*"
_LAYOUT = (" ", "\t")


@dataclass(frozen=True)
class BindLine:
    """A matched bind line; all positions are columns within the line."""

    indent: str
    target: str | None
    target_start: int
    arrow_start: int
    expression: str
    has_semicolon: bool

    @property
    def arrow_end(self) -> int:
        return self.arrow_start + 2


def _arrow_replacement(line: str, bind: BindLine) -> str:
    after = "" if line[bind.arrow_end : bind.arrow_end + 1] in _LAYOUT else " "
    if bind.target is None:
        return f"{_SUSPEND}{after}"
    before = "" if line[bind.arrow_start - 1 : bind.arrow_start] in _LAYOUT else " "
    return f"{before}= {_SUSPEND}{after}"


def match_bind_line(line: str) -> BindLine | None:
    match = _BIND_LINE.match(line)
    if match is None:
        return None

    expression = match.group("expr").strip()
    has_semicolon = expression.endswith(";")
    if has_semicolon:
        expression = expression[:-1].rstrip()
    if not expression:
        return None

    target = match.group("target")
    return BindLine(
        indent=match.group("indent"),
        target=target,
        target_start=match.start("target") if target is not None else match.end("indent"),
        arrow_start=match.start("arrow"),
        expression=expression,
        has_semicolon=has_semicolon,
    )


def render_bind_line(line: str, bind: BindLine) -> str:
    keyword = _BIND_KEYWORD if bind.target is not None else ""
    return (
        line[: bind.target_start]
        + keyword
        + line[bind.target_start : bind.arrow_start]
        + _arrow_replacement(line, bind)
        + line[bind.arrow_end :]
    )


def _skip_layout(tokens: list[Token], index: int, limit: int) -> int:
    while index < limit and tokens[index].kind in (TokenKind.WHITESPACE, TokenKind.LINE_TERMINATOR):
        index += 1
    return index


def is_inside_nested_function(tokens: list[Token], up_to: int) -> bool:
    """Whether ``tokens[up_to]`` sits inside a block-bodied function or arrow.

    Only tokens before ``up_to`` are considered. Expression-bodied arrows
    never open a new scope.
    """
    depth = 0
    for index in range(up_to):
        token = tokens[index]
        if token.keyword is Keyword.FUNCTION:
            if any(tokens[j].is_punctuator("{") for j in range(index + 1, up_to)):
                depth += 1
        elif token.is_punctuator("=>"):
            after = _skip_layout(tokens, index + 1, up_to)
            if after < up_to and tokens[after].is_punctuator("{"):
                depth += 1
        elif token.is_punctuator("}") and depth > 0:
            depth -= 1
    return depth > 0


def _first_token_index(tokens: list[Token], line_start: int, line_end: int, hint: int) -> int | None:
    index = hint
    while index < len(tokens) and tokens[index].start < line_start:
        index += 1
    if index < len(tokens) and tokens[index].start < line_end:
        return index
    return None


def _bind_lines(content: str) -> Iterator[tuple[int, str, BindLine | None]]:
    """Yield ``(line_start, line, bind)`` for every ``\\n``-separated line of ``content``."""
    tokens: list[Token] | None = None
    cursor = 0
    line_start = 0
    for line in content.split("\n"):
        line_end = line_start + len(line)
        stripped = line.strip()
        bind: BindLine | None = None
        if stripped and not stripped.startswith("//"):
            candidate = match_bind_line(line)
            if candidate is not None:
                if tokens is None:
                    tokens = tokenize(content)
                first = _first_token_index(tokens, line_start, line_end, cursor)
                if first is not None:
                    cursor = first
                    # a line that starts inside a multi-line string or comment is text, not code
                    if tokens[first].start == line_start and not is_inside_nested_function(tokens, first):
                        bind = candidate
        yield line_start, line, bind
        line_start = line_end + 1


def transform_block_content(content: str) -> str:
    """Rewrite the bind lines of one block's content, leaving every other line verbatim.

    Lines inside a nested ``function`` or block-bodied arrow belong to another
    scope and are left untouched.
    """
    lines = [line if bind is None else render_bind_line(line, bind) for _, line, bind in _bind_lines(content)]
    return "\n".join(lines)


def bind_line_edits(content: str, base_offset: int = 0) -> list[Edit]:
    """Express :func:`transform_block_content` as edits against the enclosing buffer.

    No edit removes more text than it adds, and expression text is never
    touched, so positions stay monotonic and expressions map one to one.
    ``base_offset`` is the buffer offset of ``content``'s first character.
    """
    edits: list[Edit] = []
    for line_start, line, bind in _bind_lines(content):
        if bind is None:
            continue
        offset = base_offset + line_start
        if bind.target is not None:
            edits.append(Edit(kind=EditKind.INSERT_BEFORE, pos=offset + bind.target_start, text=_BIND_KEYWORD))
        edits.append(
            Edit(
                kind=EditKind.OVERWRITE,
                pos=offset + bind.arrow_start,
                end=offset + bind.arrow_end,
                text=_arrow_replacement(line, bind),
            )
        )
    return edits
