"""Tokenizer for rule expressions."""
from dataclasses import dataclass
from enum import Enum
from typing import List

from .errors import ParseError


class TokenKind(str, Enum):
    NUMBER = "number"
    STRING = "string"
    IDENT = "ident"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"
    AND = "and"
    OR = "or"
    NOT = "not"
    COMPARE = "compare"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    DOT = "."
    COMMA = ","
    LPAREN = "("
    RPAREN = ")"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    """A lexical token with its starting offset in the source."""
    kind: TokenKind
    text: str
    position: int


# Word operators are matched case-insensitively
KEYWORDS = {
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "null": TokenKind.NULL,
    "none": TokenKind.NULL,
}

# Longest spellings first so "<=" wins over "<"
SYMBOLS = [
    ("&&", TokenKind.AND),
    ("||", TokenKind.OR),
    ("==", TokenKind.COMPARE),
    ("!=", TokenKind.COMPARE),
    (">=", TokenKind.COMPARE),
    ("<=", TokenKind.COMPARE),
    (">", TokenKind.COMPARE),
    ("<", TokenKind.COMPARE),
    ("!", TokenKind.NOT),
    ("+", TokenKind.PLUS),
    ("-", TokenKind.MINUS),
    ("*", TokenKind.STAR),
    ("/", TokenKind.SLASH),
    ("%", TokenKind.PERCENT),
    (".", TokenKind.DOT),
    (",", TokenKind.COMMA),
    ("(", TokenKind.LPAREN),
    (")", TokenKind.RPAREN),
]

ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}


def tokenize(source: str) -> List[Token]:
    """
    Split an expression into tokens.

    Args:
        source: Raw expression text

    Returns:
        List of tokens, always terminated by an EOF token

    Raises:
        ParseError: On unterminated strings or characters outside the grammar

    Example:
        >>> [t.text for t in tokenize("input1.Age >= 18")]
        ['input1', '.', 'Age', '>=', '18', '']
    """
    tokens: List[Token] = []
    pos = 0
    length = len(source)

    while pos < length:
        char = source[pos]

        if char.isspace():
            pos += 1
            continue

        if char.isdigit() or (char == "." and pos + 1 < length and source[pos + 1].isdigit()):
            end = _scan_number(source, pos)
            tokens.append(Token(TokenKind.NUMBER, source[pos:end], pos))
            pos = end
            continue

        if char.isalpha() or char == "_":
            end = pos + 1
            while end < length and (source[end].isalnum() or source[end] == "_"):
                end += 1
            word = source[pos:end]
            kind = KEYWORDS.get(word.lower(), TokenKind.IDENT)
            tokens.append(Token(kind, word, pos))
            pos = end
            continue

        if char == '"':
            text, end = _scan_string(source, pos)
            tokens.append(Token(TokenKind.STRING, text, pos))
            pos = end
            continue

        for symbol, kind in SYMBOLS:
            if source.startswith(symbol, pos):
                tokens.append(Token(kind, symbol, pos))
                pos += len(symbol)
                break
        else:
            if char == "=":
                raise ParseError(pos, "Unexpected '=' (use '==' for equality)", source)
            raise ParseError(pos, f"Unexpected character {char!r}", source)

    tokens.append(Token(TokenKind.EOF, "", length))
    return tokens


def _scan_number(source: str, start: int) -> int:
    """Return the end offset of a decimal literal starting at `start`."""
    pos = start
    length = len(source)
    seen_dot = False
    while pos < length:
        char = source[pos]
        if char.isdigit():
            pos += 1
        elif char == "." and not seen_dot and pos + 1 < length and source[pos + 1].isdigit():
            seen_dot = True
            pos += 1
        else:
            break

    # Optional exponent: 1e3, 2.5E-2
    if pos < length and source[pos] in "eE":
        exp = pos + 1
        if exp < length and source[exp] in "+-":
            exp += 1
        if exp < length and source[exp].isdigit():
            while exp < length and source[exp].isdigit():
                exp += 1
            pos = exp

    # C# decimal suffix as written in the demo's source ("30m")
    if pos < length and source[pos] in "mM" and not (pos + 1 < length and (source[pos + 1].isalnum() or source[pos + 1] == "_")):
        pos += 1

    if pos < length and (source[pos].isalpha() or source[pos] == "_"):
        raise ParseError(pos, "Invalid numeric literal", source)
    return pos


def _scan_string(source: str, start: int) -> tuple[str, int]:
    """Decode a double-quoted string literal. Returns (value, end offset)."""
    pos = start + 1
    chars = []
    while pos < len(source):
        char = source[pos]
        if char == '"':
            return "".join(chars), pos + 1
        if char == "\\":
            if pos + 1 >= len(source):
                break
            escaped = source[pos + 1]
            if escaped not in ESCAPES:
                raise ParseError(pos, f"Unknown escape sequence '\\{escaped}'", source)
            chars.append(ESCAPES[escaped])
            pos += 2
            continue
        chars.append(char)
        pos += 1
    raise ParseError(start, "Unterminated string literal", source)
