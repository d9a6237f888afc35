"""Removal of inline tests from source text.

All boundaries come from one scan of the original text. Removal ranges
from every rule are merged and applied back to front, so offsets never
shift underneath a pending removal.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from inline_tests.config import DEFAULT_CONFIG, InlineConfig
from inline_tests.scanning import Declaration, ScopeRegion, SourceUnit, scan
from inline_tests.scanning.models import NAME_SEPARATOR
from inline_tests.scanning.scanner import is_sentinel, match_braces
from inline_tests.scanning.tokens import TokenKind, tokenize
from inline_tests.types import TEST_ONLY_ROLES, MarkerRole, ScopeKind


logger = logging.getLogger(__name__)

_USE_STATEMENT = re.compile(
    r"use\s+(?:function\s+)?(?P<name>\\?[\w\\]+)(?:\s+as\s+\w+)?\s*;",
    re.IGNORECASE,
)
_GROUPED_USE = re.compile(
    r"use\s+(?:function\s+)?(?P<prefix>\\?[\w\\]+?)\\\{(?P<members>[^}]*)\}\s*;",
    re.IGNORECASE,
)
_TRAILING_WHITESPACE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUNS = re.compile(r"\n{3,}")


@dataclass(frozen=True, slots=True)
class Removal:
    start: int
    end: int
    reason: str


def _line_bounds(text: str, start: int, end: int) -> tuple[int, int]:
    """Widen ``[start, end)`` to whole lines when the construct owns them.

    Blank lines directly above a widened construct are swallowed too.
    """
    line_start = text.rfind("\n", 0, start) + 1
    if text[line_start:start].strip():
        return start, end

    newline = text.find("\n", end)
    line_end = len(text) if newline == -1 else newline + 1
    if text[end:line_end].strip():
        return line_start, end

    while line_start > 0:
        previous = text.rfind("\n", 0, line_start - 1) + 1
        if text[previous : line_start - 1].strip():
            break
        line_start = previous
    return line_start, line_end


def merge_removals(removals: list[Removal]) -> list[tuple[int, int]]:
    """Sort and merge overlapping ranges; contained ranges disappear."""
    merged: list[tuple[int, int]] = []
    for removal in sorted(removals, key=lambda r: (r.start, -r.end)):
        if merged and removal.start < merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], removal.end))
        else:
            merged.append((removal.start, removal.end))
    return merged


class Stripper:
    """Computes and applies removals for one source text."""

    def __init__(self, config: InlineConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def _roles(self, decl: Declaration) -> set[MarkerRole]:
        return self.config.roles(m.qualified_name for m in decl.markers)

    def _is_test_only_scope(self, scope: ScopeRegion) -> bool:
        return scope.kind is not ScopeKind.ROOT and is_sentinel(scope.name, self.config.sentinel)

    def _removal(self, text: str, start: int, end: int, reason: str) -> Removal:
        start, end = _line_bounds(text, start, end)
        return Removal(start, end, reason)

    def data_source_references(self, unit: SourceUnit) -> list[tuple[str, ScopeRegion]]:
        """Data-source names referenced by tests, with the scope resolving them."""
        references = []
        for decl in unit.declarations:
            if MarkerRole.TEST not in self._roles(decl):
                continue
            for marker in decl.markers:
                if self.config.role_of(marker.qualified_name) is not MarkerRole.DATA_SOURCE:
                    continue
                name = marker.first_argument
                if isinstance(name, str) and name:
                    references.append((name, decl.scope))
        return references

    def sentinel_removals(self, unit: SourceUnit) -> list[Removal]:
        removals = []
        for scope in unit.scopes:
            if not self._is_test_only_scope(scope):
                continue
            if any(self._is_test_only_scope(outer) for outer in scope.ancestors()):
                continue
            logger.debug("Removing test-only scope %s", scope.name)
            removals.append(
                self._removal(unit.text, scope.marker_start, scope.end, f"scope {scope.name}")
            )
        return removals

    def declaration_removals(self, unit: SourceUnit) -> list[Removal]:
        removals = []
        for decl in unit.declarations:
            if self._roles(decl) & TEST_ONLY_ROLES:
                removals.append(
                    self._removal(unit.text, decl.marker_start, decl.end, decl.qualified_name)
                )
        return removals

    def data_source_removals(
        self, unit: SourceUnit, references: list[tuple[str, ScopeRegion]]
    ) -> list[Removal]:
        removals = []
        for name, scope in references:
            for candidate in (scope, *scope.ancestors()):
                match = next(
                    (d for d in unit.declarations_in(candidate) if d.name == name), None
                )
                if match is not None:
                    removals.append(
                        self._removal(unit.text, match.marker_start, match.end, match.qualified_name)
                    )
                    break
            else:
                logger.debug("Data source %s not found for removal", name)
        return removals

    def import_removals(self, text: str) -> list[Removal]:
        removals = []
        for tok in tokenize(text).significant():
            if tok.kind is not TokenKind.IDENTIFIER or tok.text.lower() != "use":
                continue

            match = _USE_STATEMENT.match(text, tok.start)
            if match is not None:
                if self.config.is_test_only_import(match["name"]):
                    removals.append(self._removal(text, match.start(), match.end(), "use"))
                continue

            match = _GROUPED_USE.match(text, tok.start)
            if match is None:
                continue
            prefix = match["prefix"]
            members = [
                re.split(r"\s+as\s+", m.strip(), flags=re.IGNORECASE)[0]
                for m in match["members"].split(",")
                if m.strip()
            ]
            if members and all(
                self.config.is_test_only_import(f"{prefix}{NAME_SEPARATOR}{m}")
                for m in members
            ):
                removals.append(self._removal(text, match.start(), match.end(), "use group"))
        return removals

    def removals(self, unit: SourceUnit) -> list[Removal]:
        references = self.data_source_references(unit)
        return [
            *self.sentinel_removals(unit),
            *self.declaration_removals(unit),
            *self.data_source_removals(unit, references),
            *self.import_removals(unit.text),
        ]

    def strip(self, text: str) -> str:
        """Strip ``text``, keeping its line endings.

        CRLF text is stripped as LF and converted back; text without
        removals is returned as given.
        """
        if "\r\n" not in text:
            return self._strip(text)
        unix = text.replace("\r\n", "\n")
        result = self._strip(unix)
        if result == unix:
            return text
        return result.replace("\n", "\r\n")

    def _strip(self, text: str) -> str:
        unit = scan(text)
        if not unit.complete:
            logger.debug("Incomplete scan; leaving text unchanged")
            return text

        removals = self.removals(unit)
        if not removals:
            return text

        result = text
        for start, end in reversed(merge_removals(removals)):
            result = result[:start] + result[end:]

        result = normalize(result)
        if text.endswith("\n") and not result.endswith("\n"):
            result += "\n"
        return result


def _unglue_braces(text: str) -> str:
    """Move a NORMAL-state ``}`` glued to preceding content onto its own line.

    Closing braces of grouped imports (``use A\\{B, C};``) stay put.
    """
    tokens = list(tokenize(text).tokens)
    matches, _ = match_braces(tokens)
    grouped = {
        close
        for opening, close in matches.items()
        if opening > 0 and tokens[opening - 1].text.endswith(NAME_SEPARATOR)
    }

    insertions = []
    for index, tok in enumerate(tokens):
        if not tok.is_punct("}") or tok.start == 0 or index in grouped:
            continue
        before = text[tok.start - 1]
        if before.isspace() or before == "{":
            continue
        line_start = text.rfind("\n", 0, tok.start) + 1
        line = text[line_start : tok.start]
        indent = line[: len(line) - len(line.lstrip(" \t"))]
        insertions.append((tok.start, indent))

    for offset, indent in reversed(insertions):
        text = f"{text[:offset]}\n{indent}{text[offset:]}"
    return text


def normalize(text: str) -> str:
    text = _TRAILING_WHITESPACE.sub("", text)
    text = _BLANK_RUNS.sub("\n\n", text)
    return _unglue_braces(text)


def strip(text: str, config: InlineConfig | None = None) -> str:
    """Return ``text`` with every inline test construct removed."""
    return Stripper(config).strip(text)
