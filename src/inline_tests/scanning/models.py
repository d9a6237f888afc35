"""Structural model produced by the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from inline_tests.errors import ScanFailure
from inline_tests.types import ScopeKind, Visibility


NAME_SEPARATOR = "\\"


@dataclass(frozen=True, slots=True)
class Marker:
    """Structured metadata preceding a declaration, e.g. ``#[DataProvider('rows')]``.

    ``name`` is the last segment of the name as written; ``qualified_name``
    keeps any namespace prefix.
    """

    name: str
    qualified_name: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    start: int = 0
    end: int = 0

    @property
    def first_argument(self) -> Any:
        """First positional argument, else the first named one, else None."""
        if self.args:
            return self.args[0]
        if self.kwargs:
            return next(iter(self.kwargs.values()))
        return None


@dataclass(eq=False, frozen=True, slots=True)
class ScopeRegion:
    """A named lexical container.

    ``start`` is the scope keyword offset; ``marker_start`` is where the
    marker block attached to the scope begins (equal to ``start`` when there
    is none). For brace-delimited scopes ``end`` is just past the matching
    ``}``; for a ``namespace Foo;`` scope it is the start of the next sibling
    namespace or the end of the file.
    """

    kind: ScopeKind
    name: str
    start: int
    end: int
    body_start: int
    braced: bool
    marker_start: int
    markers: tuple[Marker, ...] = ()
    parent: ScopeRegion | None = None

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(s for s in self.name.split(NAME_SEPARATOR) if s)

    @property
    def short_name(self) -> str:
        segments = self.segments
        return segments[-1] if segments else ""

    @property
    def is_type(self) -> bool:
        return self.kind in (ScopeKind.CLASS, ScopeKind.TRAIT, ScopeKind.ENUM, ScopeKind.INTERFACE)

    def ancestors(self) -> list[ScopeRegion]:
        """Enclosing scopes, innermost first."""
        chain = []
        current = self.parent
        while current is not None:
            chain.append(current)
            current = current.parent
        return chain

    def encloses(self, other: ScopeRegion) -> bool:
        return other is self or self in other.ancestors()

    def __repr__(self) -> str:
        return f"ScopeRegion({self.kind.value} {self.name!r} [{self.start}:{self.end}])"


@dataclass(frozen=True, slots=True)
class Parameter:
    name: str
    type: str | None = None
    default: str | None = None
    variadic: bool = False

    @property
    def required(self) -> bool:
        return self.default is None and not self.variadic


@dataclass(eq=False, frozen=True, slots=True)
class Declaration:
    """A function or method with a body.

    ``[start, end)`` spans from the first modifier (or the declaration
    keyword) through the balanced closing brace. ``marker_start`` is where
    the preceding marker block begins.
    """

    name: str
    scope: ScopeRegion
    start: int
    end: int
    body_start: int
    marker_start: int
    visibility: Visibility = Visibility.PUBLIC
    static: bool = False
    parameters: tuple[Parameter, ...] = ()
    markers: tuple[Marker, ...] = ()

    @property
    def is_method(self) -> bool:
        return self.scope.is_type

    @property
    def qualified_name(self) -> str:
        if not self.scope.name:
            return self.name
        joiner = "::" if self.is_method else NAME_SEPARATOR
        return f"{self.scope.name}{joiner}{self.name}"

    @property
    def marker_names(self) -> list[str]:
        return [m.name for m in self.markers]

    def markers_named(self, name: str) -> list[Marker]:
        return [m for m in self.markers if m.name == name]

    def __repr__(self) -> str:
        return f"Declaration({self.qualified_name!r} [{self.start}:{self.end}])"


@dataclass(frozen=True, slots=True)
class SourceUnit:
    """One file's text and its resolved structure."""

    text: str
    root: ScopeRegion
    scopes: tuple[ScopeRegion, ...] = ()
    declarations: tuple[Declaration, ...] = ()
    failures: tuple[ScanFailure, ...] = ()
    path: Path | None = None

    @property
    def complete(self) -> bool:
        return not self.failures

    def declarations_in(self, scope: ScopeRegion) -> list[Declaration]:
        return [d for d in self.declarations if d.scope is scope]

    def children(self, scope: ScopeRegion) -> list[ScopeRegion]:
        return [s for s in self.scopes if s.parent is scope]

    def scope_named(self, name: str) -> ScopeRegion | None:
        for scope in self.scopes:
            if scope.name == name:
                return scope
        return None
