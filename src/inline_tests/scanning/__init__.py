"""Tokenizer and structural scanner for inline-test source files."""

from inline_tests.scanning.models import Declaration, Marker, Parameter, ScopeRegion, SourceUnit
from inline_tests.scanning.scanner import find_declarations, find_scopes, is_sentinel, scan
from inline_tests.scanning.tokens import Token, TokenKind, TokenStream, brace_balance, tokenize


__all__ = [
    "Declaration",
    "Marker",
    "Parameter",
    "ScopeRegion",
    "SourceUnit",
    "Token",
    "TokenKind",
    "TokenStream",
    "brace_balance",
    "find_declarations",
    "find_scopes",
    "is_sentinel",
    "scan",
    "tokenize",
]
