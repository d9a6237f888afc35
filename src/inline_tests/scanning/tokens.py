"""String- and comment-aware tokenizer.

A single left-to-right pass drives a small state machine::

    NORMAL -> IN_STRING(delim) -> NORMAL
    NORMAL -> IN_LINE_COMMENT  -> NORMAL
    NORMAL -> IN_BLOCK_COMMENT -> NORMAL

Only NORMAL state emits punctuation, so a brace inside a string or comment
never reaches brace counting. An escape character inside a string consumes
the next character unconditionally.

The tokenizer never raises. An unterminated string or block comment is
recorded as a :class:`~inline_tests.errors.ScanFailure` and tokenization stops
there; the tokens found so far are returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from inline_tests.errors import ScanFailure


class TokenKind(Enum):
    SCOPE_KEYWORD = "scope_keyword"
    DECL_KEYWORD = "decl_keyword"
    MODIFIER = "modifier"
    IDENTIFIER = "identifier"
    STRING = "string"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    MARKER_OPEN = "marker_open"
    PUNCT = "punct"


class LexState(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    IN_LINE_COMMENT = "in_line_comment"
    IN_BLOCK_COMMENT = "in_block_comment"


SCOPE_KEYWORDS = frozenset({"namespace", "class", "interface", "trait", "enum"})
DECL_KEYWORDS = frozenset({"function"})
MODIFIERS = frozenset(
    {"public", "protected", "private", "static", "abstract", "final", "readonly"}
)

STRING_DELIMITERS = frozenset({"'", '"', "`"})
ESCAPE = "\\"

# Longest first so "?->" wins over "?".
MULTI_CHAR_PUNCT = ("?->", "::", "->", "=>")
MEMBER_ACCESS = frozenset({"->", "?->", "::"})


@dataclass(frozen=True, slots=True)
class Token:
    """A lexeme with its ``[start, end)`` offsets in the source text."""

    kind: TokenKind
    text: str
    start: int
    end: int

    def is_punct(self, text: str) -> bool:
        return self.kind is TokenKind.PUNCT and self.text == text

    @property
    def is_comment(self) -> bool:
        return self.kind in (TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT)


@dataclass(frozen=True, slots=True)
class TokenStream:
    tokens: tuple[Token, ...]
    failures: tuple[ScanFailure, ...] = field(default_factory=tuple)

    @property
    def complete(self) -> bool:
        return not self.failures

    def significant(self) -> list[Token]:
        """Tokens with comments filtered out."""
        return [tok for tok in self.tokens if not tok.is_comment]


def _is_word_start(ch: str) -> bool:
    return ch.isalnum() or ch in "_\\$" or ord(ch) > 0x7F


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_\\" or ord(ch) > 0x7F


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.state = LexState.NORMAL
        self.token_start = 0
        self.delimiter = ""
        self.tokens: list[Token] = []
        self.failures: list[ScanFailure] = []

    def run(self) -> TokenStream:
        handlers = {
            LexState.NORMAL: self._normal,
            LexState.IN_STRING: self._in_string,
            LexState.IN_LINE_COMMENT: self._in_line_comment,
            LexState.IN_BLOCK_COMMENT: self._in_block_comment,
        }
        length = len(self.text)
        while self.pos < length:
            handlers[self.state]()

        if self.state is LexState.IN_STRING:
            self._fail("unterminated string literal")
        elif self.state is LexState.IN_BLOCK_COMMENT:
            self._fail("unterminated block comment")
        elif self.state is LexState.IN_LINE_COMMENT:
            self._emit(TokenKind.LINE_COMMENT, length)

        return TokenStream(tuple(self.tokens), tuple(self.failures))

    def _fail(self, reason: str) -> None:
        self.failures.append(ScanFailure(self.token_start, reason))

    def _emit(self, kind: TokenKind, end: int) -> None:
        self.tokens.append(
            Token(kind, self.text[self.token_start : end], self.token_start, end)
        )
        self.pos = end
        self.state = LexState.NORMAL

    def _previous_significant(self) -> Token | None:
        for tok in reversed(self.tokens):
            if not tok.is_comment:
                return tok
        return None

    def _normal(self) -> None:
        text = self.text
        pos = self.pos
        ch = text[pos]
        self.token_start = pos

        if ch.isspace():
            self.pos += 1
            return

        if ch in STRING_DELIMITERS:
            self.delimiter = ch
            self.state = LexState.IN_STRING
            self.pos += 1
            return

        if text.startswith("//", pos) or (ch == "#" and not text.startswith("#[", pos)):
            self.state = LexState.IN_LINE_COMMENT
            self.pos += 1
            return

        if text.startswith("/*", pos):
            self.state = LexState.IN_BLOCK_COMMENT
            self.pos += 2
            return

        if text.startswith("#[", pos):
            self._emit(TokenKind.MARKER_OPEN, pos + 2)
            return

        if _is_word_start(ch):
            end = pos + 1
            while end < len(text) and _is_word_char(text[end]):
                end += 1
            self._emit(self._classify_word(text[pos:end]), end)
            return

        for punct in MULTI_CHAR_PUNCT:
            if text.startswith(punct, pos):
                self._emit(TokenKind.PUNCT, pos + len(punct))
                return

        self._emit(TokenKind.PUNCT, pos + 1)

    def _classify_word(self, word: str) -> TokenKind:
        previous = self._previous_significant()
        if previous is not None and previous.kind is TokenKind.PUNCT and previous.text in MEMBER_ACCESS:
            # $obj->class, Foo::function
            return TokenKind.IDENTIFIER
        lowered = word.lower()
        if lowered in SCOPE_KEYWORDS:
            return TokenKind.SCOPE_KEYWORD
        if lowered in DECL_KEYWORDS:
            return TokenKind.DECL_KEYWORD
        if lowered in MODIFIERS:
            return TokenKind.MODIFIER
        return TokenKind.IDENTIFIER

    def _in_string(self) -> None:
        ch = self.text[self.pos]
        if ch == ESCAPE:
            self.pos += 2
            return
        if ch == self.delimiter:
            self._emit(TokenKind.STRING, self.pos + 1)
            return
        self.pos += 1

    def _in_line_comment(self) -> None:
        if self.text[self.pos] == "\n":
            self._emit(TokenKind.LINE_COMMENT, self.pos)
            return
        self.pos += 1

    def _in_block_comment(self) -> None:
        if self.text.startswith("*/", self.pos):
            self._emit(TokenKind.BLOCK_COMMENT, self.pos + 2)
            return
        self.pos += 1


def tokenize(text: str) -> TokenStream:
    """Tokenize ``text``; never raises."""
    return _Lexer(text).run()


def brace_balance(stream: TokenStream) -> int:
    """Net ``{`` minus ``}`` count over NORMAL-state tokens."""
    depth = 0
    for tok in stream.tokens:
        if tok.is_punct("{"):
            depth += 1
        elif tok.is_punct("}"):
            depth -= 1
    return depth
