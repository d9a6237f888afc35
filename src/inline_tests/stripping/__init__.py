"""Stripping of inline tests from production sources."""

from inline_tests.stripping.driver import (
    FileOutcome,
    FileStatus,
    StripReport,
    iter_source_files,
    strip_file,
    strip_paths,
)
from inline_tests.stripping.stripper import Stripper, normalize, strip
from inline_tests.stripping.validator import (
    BalanceValidator,
    CommandValidator,
    SyntaxValidator,
    ValidationResult,
    build_validator,
)
from inline_tests.stripping.writer import quarantine_path, write_candidate


__all__ = [
    "BalanceValidator",
    "CommandValidator",
    "FileOutcome",
    "FileStatus",
    "StripReport",
    "Stripper",
    "SyntaxValidator",
    "ValidationResult",
    "build_validator",
    "iter_source_files",
    "normalize",
    "quarantine_path",
    "strip",
    "strip_file",
    "strip_paths",
    "write_candidate",
]
