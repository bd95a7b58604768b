import re

from gen_block.core.scanner import tokenize
from gen_block.models import TRIVIA_KINDS, GenBlock, Keyword, Token

_GEN_BLOCK_HINT = re.compile(r"\bgen\s*\{")


def has_gen_blocks(source: str) -> bool:
    """Cheap textual pre-check; ``False`` means tokenizing can be skipped entirely."""
    return _GEN_BLOCK_HINT.search(source) is not None


def _next_significant(tokens: list[Token], index: int) -> int:
    while index < len(tokens) and tokens[index].kind in TRIVIA_KINDS:
        index += 1
    return index


def _matching_brace(tokens: list[Token], index: int) -> int | None:
    """Return the index of the ``}`` balancing the ``{`` just before ``index``."""
    depth = 1
    while index < len(tokens):
        token = tokens[index]
        if token.is_punctuator("{"):
            depth += 1
        elif token.is_punctuator("}"):
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


def find_gen_blocks(source: str) -> list[GenBlock]:
    """Locate every top-level ``gen { ... }`` block in ``source``.

    Candidates not followed by ``{`` or never balanced are skipped. A block
    nested inside another block's body belongs to the outer block and is not
    reported on its own.
    """
    if not has_gen_blocks(source):
        return []

    tokens = tokenize(source)
    blocks: list[GenBlock] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token.keyword is not Keyword.GEN:
            index += 1
            continue

        brace_index = _next_significant(tokens, index + 1)
        if brace_index >= len(tokens) or not tokens[brace_index].is_punctuator("{"):
            index += 1
            continue

        close_index = _matching_brace(tokens, brace_index + 1)
        if close_index is None:
            index += 1
            continue

        brace_start = tokens[brace_index].start
        end = tokens[close_index].end
        blocks.append(
            GenBlock(
                start=token.start,
                brace_start=brace_start,
                end=end,
                content=source[brace_start + 1 : end - 1],
            )
        )
        index = close_index + 1
    return blocks
