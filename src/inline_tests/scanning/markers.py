"""Marker block parsing: ``#[Name(args), Other]``."""

from __future__ import annotations

from typing import Any

from inline_tests.scanning.models import NAME_SEPARATOR, Marker
from inline_tests.scanning.tokens import Token, TokenKind


OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = frozenset(OPENERS.values())

_LITERAL_KEYWORDS = {"true": True, "false": False, "null": None}


def find_closing(tokens: list[Token], index: int, opener: str, closer: str) -> int | None:
    """Index of the token closing the ``opener`` at ``index``, or None."""
    depth = 0
    for j in range(index, len(tokens)):
        tok = tokens[j]
        if tok.kind is TokenKind.PUNCT:
            if tok.text == opener:
                depth += 1
            elif tok.text == closer:
                depth -= 1
                if depth == 0:
                    return j
        elif tok.kind is TokenKind.MARKER_OPEN and opener == "[":
            depth += 1
    return None


def split_top_level(tokens: list[Token], separator: str = ",") -> list[list[Token]]:
    """Split ``tokens`` on ``separator`` outside any bracket pair."""
    parts: list[list[Token]] = [[]]
    depth = 0
    for tok in tokens:
        if tok.kind is TokenKind.PUNCT:
            if tok.text in OPENERS:
                depth += 1
            elif tok.text in CLOSERS:
                depth -= 1
            elif tok.text == separator and depth == 0:
                parts.append([])
                continue
        elif tok.kind is TokenKind.MARKER_OPEN:
            depth += 1
        parts[-1].append(tok)
    return [part for part in parts if part]


def parse_literal(raw: str) -> Any:
    """Convert a literal as written to a Python value.

    Strings are unquoted, numbers converted and ``true``/``false``/``null``
    mapped. Anything else (constants, ``Foo::class``, arrays) stays text.
    """
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "'\"":
        body = raw[1:-1]
        if raw[0] == "'":
            return body.replace("\\'", "'").replace("\\\\", "\\")
        return body.replace('\\"', '"').replace("\\\\", "\\")

    keyword = _LITERAL_KEYWORDS.get(raw.lower(), ...)
    if keyword is not ...:
        return keyword

    for convert in (int, float):
        try:
            return convert(raw.replace("_", ""))
        except ValueError:
            continue
    return raw


def _span_text(text: str, tokens: list[Token]) -> str:
    return text[tokens[0].start : tokens[-1].end]


def _parse_arguments(text: str, tokens: list[Token]) -> tuple[tuple[Any, ...], dict[str, Any]]:
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for part in split_top_level(tokens):
        if (
            len(part) > 2
            and part[0].kind is TokenKind.IDENTIFIER
            and part[1].is_punct(":")
        ):
            kwargs[part[0].text] = parse_literal(_span_text(text, part[2:]))
        else:
            args.append(parse_literal(_span_text(text, part)))
    return tuple(args), kwargs


def parse_marker_block(text: str, tokens: list[Token], index: int) -> tuple[list[Marker], int]:
    """Parse the block opened by the MARKER_OPEN token at ``index``.

    Returns the markers and the index of the closing ``]``. When the block
    never closes the index is ``len(tokens)``.
    """
    close = find_closing(tokens, index, "[", "]")
    if close is None:
        return [], len(tokens)

    markers = []
    for entry in split_top_level(tokens[index + 1 : close]):
        head = entry[0]
        if head.kind is not TokenKind.IDENTIFIER:
            continue
        qualified = head.text.lstrip(NAME_SEPARATOR)
        args: tuple[Any, ...] = ()
        kwargs: dict[str, Any] = {}
        if len(entry) > 1 and entry[1].is_punct("("):
            closing = find_closing(entry, 1, "(", ")")
            inner = entry[2:closing] if closing is not None else entry[2:]
            args, kwargs = _parse_arguments(text, inner)
        markers.append(
            Marker(
                name=qualified.rsplit(NAME_SEPARATOR, 1)[-1],
                qualified_name=qualified,
                args=args,
                kwargs=kwargs,
                start=head.start,
                end=entry[-1].end,
            )
        )
    return markers, close
