from __future__ import annotations

from gen_block.models import Keyword, Token, TokenKind

_PUNCTUATOR_CHARS = frozenset("{}()[];:,.<>?!+-*/%=&|^~@#")
_THREE_CHAR_PUNCTUATORS = frozenset({"===", "!==", ">>>", "...", "**="})
_TWO_CHAR_PUNCTUATORS = frozenset(
    {
        "==", "!=", "<=", ">=", "&&", "||", "++", "--", "+=", "-=", "*=", "/=",
        "=>", "<<", ">>", "??", "?.", "<-",
    }
)  # fmt: skip
_NUMBER_CHARS = frozenset("0123456789.eE_")
_KEYWORDS = {keyword.value: keyword for keyword in Keyword}


def _is_identifier_start(char: str) -> bool:
    return char.isascii() and (char.isalpha() or char in "_$")


def _is_identifier_part(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char in "_$")


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def skip_quoted(source: str, pos: int) -> int:
    """Return the offset just past the quoted string starting at ``pos``."""
    quote = source[pos]
    length = len(source)
    pos += 1
    while pos < length and source[pos] != quote:
        pos += 2 if source[pos] == "\\" else 1
    return min(pos + 1, length)


def scan_template_expression(source: str, pos: int) -> int:
    """Return the offset just past the ``}`` closing a ``${`` region whose body starts at ``pos``.

    Brace depth is tracked locally; nested template literals and quoted
    strings are skipped with their own escape handling.
    """
    length = len(source)
    depth = 1
    while pos < length:
        char = source[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos + 1
        elif char == "`":
            pos = scan_template(source, pos)
            continue
        elif char in "\"'":
            pos = skip_quoted(source, pos)
            continue
        pos += 1
    return length


def scan_template(source: str, pos: int) -> int:
    """Return the offset just past the template literal whose back-quote is at ``pos``."""
    length = len(source)
    pos += 1
    while pos < length:
        char = source[pos]
        if char == "`":
            return pos + 1
        if char == "\\":
            pos += 2
        elif char == "$" and source.startswith("{", pos + 1):
            pos = scan_template_expression(source, pos + 2)
        else:
            pos += 1
    return length


def _scan_punctuator(source: str, pos: int) -> int:
    if source[pos : pos + 3] in _THREE_CHAR_PUNCTUATORS:
        return pos + 3
    if source[pos : pos + 2] in _TWO_CHAR_PUNCTUATORS:
        return pos + 2
    return pos + 1


def _scan_number(source: str, pos: int) -> int:
    length = len(source)
    while pos < length and source[pos] in _NUMBER_CHARS:
        if source[pos] in "eE" and source[pos + 1 : pos + 2] in ("+", "-"):
            pos += 2
        else:
            pos += 1
    if source.startswith("n", pos):
        pos += 1
    return pos


def _scan(source: str, pos: int) -> tuple[TokenKind, int]:
    """Classify the token starting at ``pos`` and return ``(kind, end)``."""
    length = len(source)
    char = source[pos]

    if char in " \t":
        end = pos + 1
        while end < length and source[end] in " \t":
            end += 1
        return TokenKind.WHITESPACE, end

    if char == "\n":
        return TokenKind.LINE_TERMINATOR, pos + 1
    if char == "\r":
        return TokenKind.LINE_TERMINATOR, pos + 2 if source.startswith("\n", pos + 1) else pos + 1

    if source.startswith("//", pos):
        end = pos + 2
        while end < length and source[end] not in "\r\n":
            end += 1
        return TokenKind.LINE_COMMENT, end
    if source.startswith("/*", pos):
        close = source.find("*/", pos + 2)
        return TokenKind.BLOCK_COMMENT, length if close == -1 else close + 2

    if char in "\"'":
        return TokenKind.STRING_LITERAL, skip_quoted(source, pos)
    if char == "`":
        return TokenKind.TEMPLATE_LITERAL, scan_template(source, pos)

    if _is_identifier_start(char):
        end = pos + 1
        while end < length and _is_identifier_part(source[end]):
            end += 1
        return TokenKind.IDENTIFIER, end

    if char in _PUNCTUATOR_CHARS:
        return TokenKind.PUNCTUATOR, _scan_punctuator(source, pos)

    if _is_digit(char):
        return TokenKind.OTHER, _scan_number(source, pos)

    return TokenKind.OTHER, pos + 1


def tokenize(source: str) -> list[Token]:
    """Split ``source`` into a gapless list of classified tokens.

    Only enough of the JavaScript/TypeScript grammar is recognized to step over
    strings, template literals and comments. Malformed input never raises;
    unterminated constructs run to end of input.
    """
    tokens: list[Token] = []
    pos = 0
    length = len(source)
    while pos < length:
        kind, end = _scan(source, pos)
        end = min(end, length)
        text = source[pos:end]
        keyword = _KEYWORDS.get(text) if kind is TokenKind.IDENTIFIER else None
        tokens.append(Token(kind=kind, text=text, start=pos, end=end, keyword=keyword))
        pos = end
    return tokens
