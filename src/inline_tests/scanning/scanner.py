"""Structural pass over the token stream.

Resolves scope regions and declarations in one walk. Scope frames are kept
on a stack keyed by the index of their closing brace; declaration bodies are
skipped whole once their balanced end is known, so nothing inside a body is
ever treated as structure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from inline_tests.errors import ScanFailure
from inline_tests.scanning.markers import find_closing, parse_marker_block, split_top_level
from inline_tests.scanning.models import (
    NAME_SEPARATOR,
    Declaration,
    Marker,
    Parameter,
    ScopeRegion,
    SourceUnit,
)
from inline_tests.scanning.tokens import Token, TokenKind, tokenize
from inline_tests.types import ScopeKind, Visibility


logger = logging.getLogger(__name__)

_SCOPE_KINDS = {
    "namespace": ScopeKind.NAMESPACE,
    "class": ScopeKind.CLASS,
    "interface": ScopeKind.INTERFACE,
    "trait": ScopeKind.TRAIT,
    "enum": ScopeKind.ENUM,
}

_VISIBILITIES = {v.value: v for v in Visibility}


def is_sentinel(name: str, sentinel: str = "Tests") -> bool:
    """True when ``sentinel`` is a whole segment of the qualified ``name``.

    >>> is_sentinel("App\\\\Tests")
    True
    >>> is_sentinel("App\\\\TestsHelper")
    False
    """
    return sentinel in (s for s in name.split(NAME_SEPARATOR) if s)


def match_braces(tokens: list[Token]) -> tuple[dict[int, int], list[ScanFailure]]:
    """Map each ``{`` token index to its matching ``}`` index."""
    matches: dict[int, int] = {}
    failures: list[ScanFailure] = []
    stack: list[int] = []
    for i, tok in enumerate(tokens):
        if tok.is_punct("{"):
            stack.append(i)
        elif tok.is_punct("}"):
            if stack:
                matches[stack.pop()] = i
            else:
                failures.append(ScanFailure(tok.start, "unbalanced closing brace"))
    for i in stack:
        failures.append(ScanFailure(tokens[i].start, "unexpected end of file inside braces"))
    return matches, failures


@dataclass
class _Pending:
    """Markers and modifiers seen since the last structural token."""

    markers: list[Marker] = field(default_factory=list)
    marker_start: int | None = None
    modifier_start: int | None = None
    visibility: Visibility = Visibility.PUBLIC
    static: bool = False

    def start_of(self, keyword: Token) -> int:
        return self.modifier_start if self.modifier_start is not None else keyword.start

    def marker_start_of(self, start: int) -> int:
        return self.marker_start if self.marker_start is not None else start


@dataclass
class _Frame:
    close: int
    region: ScopeRegion | None = None


class _StructuralPass:
    """One left-to-right walk building scopes and declarations.

    A ``namespace Foo;`` scope ends where the next sibling namespace begins,
    which is only known later in the walk. Those ends are recorded in
    ``namespace_ends`` (keyed by scope start) and fed to a second pass, so
    every region is built once with its final ``end``.
    """

    def __init__(
        self, text: str, tokens: list[Token], namespace_ends: dict[int, int] | None = None
    ) -> None:
        self.text = text
        self.tokens = tokens
        self.known_ends = namespace_ends or {}
        self.namespace_ends: dict[int, int] = {}
        self.root = ScopeRegion(
            kind=ScopeKind.ROOT,
            name="",
            start=0,
            end=len(text),
            body_start=0,
            braced=False,
            marker_start=0,
        )
        self.matches, self.failures = match_braces(tokens)
        self.scopes: list[ScopeRegion] = []
        self.declarations: list[Declaration] = []
        self.frames: list[_Frame] = []
        self.open_namespace: ScopeRegion | None = None
        self.pending = _Pending()

    @property
    def current_scope(self) -> ScopeRegion:
        for frame in reversed(self.frames):
            if frame.region is not None:
                return frame.region
        return self.open_namespace or self.root

    def _next(self, index: int) -> Token | None:
        return self.tokens[index] if index < len(self.tokens) else None

    def _find_opening(self, index: int) -> tuple[int, bool]:
        """Index of the first ``{`` or ``;`` at or after ``index``."""
        for j in range(index, len(self.tokens)):
            if self.tokens[j].is_punct("{"):
                return j, True
            if self.tokens[j].is_punct(";"):
                return j, False
        return len(self.tokens), False

    def run(self) -> None:
        i = 0
        tokens = self.tokens
        while i < len(tokens):
            while self.frames and self.frames[-1].close < i:
                self.frames.pop()
            tok = tokens[i]

            if tok.kind is TokenKind.MARKER_OPEN:
                markers, close = parse_marker_block(self.text, tokens, i)
                if self.pending.marker_start is None:
                    self.pending.marker_start = tok.start
                self.pending.markers.extend(markers)
                i = close + 1
                continue

            if tok.kind is TokenKind.MODIFIER:
                self._modifier(tok)
                i += 1
                continue

            if tok.kind is TokenKind.SCOPE_KEYWORD:
                i = self._scope(i)
            elif tok.kind is TokenKind.DECL_KEYWORD:
                i = self._declaration(i)
            elif tok.is_punct("{"):
                close = self.matches.get(i)
                if close is None:
                    break
                self.frames.append(_Frame(close))
                i += 1
            else:
                i += 1
            self.pending = _Pending()

    def _close_namespace(self, end: int) -> None:
        if self.open_namespace is not None:
            self.namespace_ends[self.open_namespace.start] = end
            self.open_namespace = None

    def _modifier(self, tok: Token) -> None:
        word = tok.text.lower()
        if self.pending.modifier_start is None:
            self.pending.modifier_start = tok.start
        if word in _VISIBILITIES:
            self.pending.visibility = _VISIBILITIES[word]
        elif word == "static":
            self.pending.static = True

    def _scope(self, i: int) -> int:
        keyword = self.tokens[i]
        kind = _SCOPE_KINDS[keyword.text.lower()]
        name_tok = self._next(i + 1)

        if kind is ScopeKind.NAMESPACE:
            if name_tok is not None and name_tok.kind is TokenKind.IDENTIFIER:
                name = name_tok.text.strip(NAME_SEPARATOR)
                after = i + 2
            else:
                name = ""
                after = i + 1
            follower = self._next(after)
            if follower is not None and follower.is_punct(";"):
                return self._open_namespace(keyword, name, after)
            if follower is not None and follower.is_punct("{"):
                return self._open_braced(kind, keyword, name, after, parent=self.root)
            return after

        if name_tok is None or name_tok.kind is not TokenKind.IDENTIFIER:
            # anonymous class
            return i + 1
        opening, braced = self._find_opening(i + 2)
        if not braced:
            return opening + 1
        parent = self.current_scope
        name = name_tok.text
        if parent.name:
            name = f"{parent.name}{NAME_SEPARATOR}{name}"
        return self._open_braced(kind, keyword, name, opening, parent=parent)

    def _open_namespace(self, keyword: Token, name: str, semicolon: int) -> int:
        start = self.pending.start_of(keyword)
        marker_start = self.pending.marker_start_of(start)
        self._close_namespace(marker_start)
        region = ScopeRegion(
            kind=ScopeKind.NAMESPACE,
            name=name,
            start=start,
            end=self.known_ends.get(start, len(self.text)),
            body_start=self.tokens[semicolon].end,
            braced=False,
            marker_start=marker_start,
            markers=tuple(self.pending.markers),
            parent=self.root,
        )
        self.scopes.append(region)
        self.open_namespace = region
        return semicolon + 1

    def _open_braced(
        self,
        kind: ScopeKind,
        keyword: Token,
        name: str,
        opening: int,
        parent: ScopeRegion,
    ) -> int:
        close = self.matches.get(opening)
        if close is None:
            return len(self.tokens)
        if kind is ScopeKind.NAMESPACE:
            self._close_namespace(self.pending.marker_start_of(self.pending.start_of(keyword)))
        start = self.pending.start_of(keyword)
        region = ScopeRegion(
            kind=kind,
            name=name,
            start=start,
            end=self.tokens[close].end,
            body_start=self.tokens[opening].end,
            braced=True,
            marker_start=self.pending.marker_start_of(start),
            markers=tuple(self.pending.markers),
            parent=parent,
        )
        self.scopes.append(region)
        self.frames.append(_Frame(close, region))
        return opening + 1

    def _declaration(self, i: int) -> int:
        keyword = self.tokens[i]
        j = i + 1
        tok = self._next(j)
        if tok is not None and tok.is_punct("&"):
            j += 1
            tok = self._next(j)
        if tok is None or tok.kind is not TokenKind.IDENTIFIER:
            # closure
            return i + 1
        paren = self._next(j + 1)
        if paren is None or not paren.is_punct("("):
            return j + 1

        params_close = find_closing(self.tokens, j + 1, "(", ")")
        if params_close is None:
            self.failures.append(ScanFailure(paren.start, "unterminated parameter list"))
            return len(self.tokens)

        opening, braced = self._find_opening(params_close + 1)
        if not braced:
            return opening + 1
        close = self.matches.get(opening)
        if close is None:
            return len(self.tokens)

        start = self.pending.start_of(keyword)
        self.declarations.append(
            Declaration(
                name=tok.text,
                scope=self.current_scope,
                start=start,
                end=self.tokens[close].end,
                body_start=self.tokens[opening].end,
                marker_start=self.pending.marker_start_of(start),
                visibility=self.pending.visibility,
                static=self.pending.static,
                parameters=tuple(self._parameters(self.tokens[j + 2 : params_close])),
                markers=tuple(self.pending.markers),
            )
        )
        return close + 1

    def _parameters(self, tokens: list[Token]) -> list[Parameter]:
        params = []
        for part in split_top_level(tokens):
            k = 0
            # skip attributes and promoted-property modifiers
            while k < len(part):
                if part[k].kind is TokenKind.MARKER_OPEN:
                    close = find_closing(part, k, "[", "]")
                    k = (close if close is not None else len(part) - 1) + 1
                elif part[k].kind is TokenKind.MODIFIER:
                    k += 1
                else:
                    break
            var = next(
                (n for n in range(k, len(part)) if part[n].text.startswith("$")),
                None,
            )
            if var is None:
                continue

            type_end = var
            variadic = False
            while type_end > k and part[type_end - 1].kind is TokenKind.PUNCT and part[
                type_end - 1
            ].text in (".", "&"):
                variadic = variadic or part[type_end - 1].text == "."
                type_end -= 1
            type_text = (
                self.text[part[k].start : part[type_end - 1].end].strip()
                if type_end > k
                else None
            )

            default = None
            if var + 1 < len(part) and part[var + 1].is_punct("=") and var + 2 < len(part):
                default = self.text[part[var + 2].start : part[-1].end].strip()

            params.append(
                Parameter(
                    name=part[var].text[1:],
                    type=type_text,
                    default=default,
                    variadic=variadic,
                )
            )
        return params


def scan(text: str, path: Path | None = None) -> SourceUnit:
    """Resolve the scope tree and declarations of ``text``. Never raises."""
    stream = tokenize(text)
    tokens = stream.significant()
    structure = _StructuralPass(text, tokens)
    structure.run()
    if structure.namespace_ends:
        structure = _StructuralPass(text, tokens, structure.namespace_ends)
        structure.run()

    failures = [
        ScanFailure(f.offset, f.reason, path) for f in (*stream.failures, *structure.failures)
    ]
    for failure in failures:
        logger.debug("Scan failure: %s", failure)

    return SourceUnit(
        text=text,
        root=structure.root,
        scopes=tuple(structure.scopes),
        declarations=tuple(structure.declarations),
        failures=tuple(failures),
        path=path,
    )


def find_scopes(text: str) -> list[ScopeRegion]:
    """Scope regions of ``text`` in source order, outermost first."""
    return list(scan(text).scopes)


def find_declarations(text: str, scope: ScopeRegion | None = None) -> list[Declaration]:
    """Declarations directly inside ``scope`` (the file root when None).

    ``scope`` may come from an earlier scan of the same text; it is matched
    by kind, name and start offset.
    """
    unit = scan(text)
    if scope is None or scope.kind is ScopeKind.ROOT:
        target = unit.root
    else:
        target = next(
            (
                s
                for s in unit.scopes
                if s.kind is scope.kind and s.name == scope.name and s.start == scope.start
            ),
            None,
        )
        if target is None:
            return []
    return unit.declarations_in(target)
