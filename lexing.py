"""
Calx Lexical Analysis
Cuts source text into tokens one at a time, tracking spans separately
"""

from typing import Any, Iterator, List, Optional, Tuple
from dataclasses import dataclass
import re

from error_handling import CalxError


@dataclass(frozen=True)
class Token:
    """Calx token; positions live in the Lexer's spans, not here"""
    type: str
    value: Any = None

    def __str__(self) -> str:
        if self.value is None:
            return self.type
        return f"{self.type}({self.value!r})"


# Token types
SEMICOLON = "SEMICOLON"
EQUAL = "EQUAL"
PLUS = "PLUS"
MINUS = "MINUS"
ASTERISK = "ASTERISK"
SLASH = "SLASH"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
COMMA = "COMMA"
LET = "LET"
IN = "IN"
DEF = "DEF"
NUMBER = "NUMBER"
STRING = "STRING"
IDENTIFIER = "IDENTIFIER"

PUNCTUATION = {
    ';': Token(SEMICOLON),
    '=': Token(EQUAL),
    '+': Token(PLUS),
    '-': Token(MINUS),
    '*': Token(ASTERISK),
    '/': Token(SLASH),
    '(': Token(LPAREN),
    ')': Token(RPAREN),
    ',': Token(COMMA),
}

KEYWORDS = {
    'let': Token(LET),
    'in': Token(IN),
    'def': Token(DEF),
}

ESCAPES = {
    '"': '"',
    '\\': '\\',
    '/': '/',
    'n': '\n',
    'r': '\r',
    't': '\t',
}

_UNESCAPES = {decoded: '\\' + escaped for escaped, decoded in ESCAPES.items() if escaped != '/'}


def quote_string(s: str) -> str:
    """Inverse of string literal decoding: the result lexes back to s"""
    return '"' + ''.join(_UNESCAPES.get(c, c) for c in s) + '"'


IDENTIFIER_PATTERN = re.compile(r'[a-zA-Z_][a-zA-Z0-9_]*')
NUMBER_PATTERN = re.compile(r"""
    (0|[1-9][0-9]*)     # integer
    ([.][0-9]+)?        # fraction
    ([eE][-+]?[0-9]+)?  # exponent
""", re.VERBOSE)
WHITESPACE_PATTERN = re.compile(r'[\t\n\r ]+')


class LexicalError(CalxError):
    """Raised while scanning; terminal for the token stream"""
    pass


class UnexpectedCharacter(LexicalError):
    def __init__(self, char: str):
        self.char = char
        super().__init__(f"unexpected character: '{char}'")


class UnexpectedEndOfFile(LexicalError):
    def __init__(self):
        super().__init__("unexpected end of file")


class UndefinedEscape(LexicalError):
    def __init__(self, char: str):
        self.char = char
        super().__init__(f"undefined escape: '\\{char}'")


LexResult = Optional[Tuple[Token, int]]


def next_token(text: str, pos: int = 0) -> LexResult:
    """Cut a single token from text starting at pos.

    Returns (token, chars_consumed), or None at end of input.
    Raises a LexicalError when no token can be cut.
    """
    if pos >= len(text):
        return None

    first = text[pos]
    if first in PUNCTUATION:
        return PUNCTUATION[first], 1

    m = IDENTIFIER_PATTERN.match(text, pos)
    if m:
        word = m.group(0)
        return KEYWORDS.get(word, Token(IDENTIFIER, word)), m.end() - pos

    m = NUMBER_PATTERN.match(text, pos)
    if m:
        return Token(NUMBER, float(m.group(0))), m.end() - pos

    if first == '"':
        return lex_string_literal(text, pos)

    raise UnexpectedCharacter(first)


def lex_string_literal(text: str, pos: int = 0) -> LexResult:
    """Decode a string literal whose opening quote is at pos"""
    assert text[pos] == '"'

    buffer = []
    i = pos + 1
    while i < len(text):
        c = text[i]
        i += 1
        if c == '\\':
            if i >= len(text):
                raise UnexpectedEndOfFile()
            escaped = text[i]
            i += 1
            if escaped not in ESCAPES:
                raise UndefinedEscape(escaped)
            buffer.append(ESCAPES[escaped])
        elif c == '"':
            return Token(STRING, ''.join(buffer)), i - pos
        else:
            buffer.append(c)

    raise UnexpectedEndOfFile()


def lex_strip(text: str, pos: int = 0) -> LexResult:
    """Same as next_token, but skips leading whitespace first"""
    m = WHITESPACE_PATTERN.match(text, pos)
    if m is None:
        return next_token(text, pos)

    result = next_token(text, m.end())
    if result is None:
        return None
    token, consumed = result
    return token, m.end() - pos + consumed


Span = Tuple[int, Token, int]


class Lexer:
    """Iterator of (start, token, end) spans over a source string.

    Offsets are str indices (code points), not UTF-8 byte offsets, so
    source[start:end] is the token text.
    The first lexical error is raised once; after that the stream is over.
    """

    def __init__(self, source: str, debug: bool = False):
        self.source = source
        self.consumed = 0
        self.debug = debug
        self._done = False

    def __iter__(self) -> Iterator[Span]:
        return self

    def __next__(self) -> Span:
        if self._done:
            raise StopIteration

        try:
            result = lex_strip(self.source, self.consumed)
        except LexicalError:
            self._done = True
            raise

        if result is None:
            self._done = True
            raise StopIteration

        token, consumed = result
        start = self.consumed
        self.consumed += consumed

        # Spans exclude the whitespace lex_strip skipped
        m = WHITESPACE_PATTERN.match(self.source, start, self.consumed)
        if m:
            start = m.end()

        if self.debug:
            print(f"Token: {token} at {start}..{self.consumed}")
        return start, token, self.consumed


def tokenize(source: str) -> List[Span]:
    """Tokenize a whole source string, raising on the first lexical error"""
    return list(Lexer(source))
