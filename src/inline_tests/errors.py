"""Error taxonomy for inline test scanning, stripping and materializing.

Every failure is scoped to the smallest affected unit: one file or one test.
Only the top-level driver aggregates outcomes.
"""

from __future__ import annotations

from pathlib import Path


class InlineTestsError(Exception):
    """Base class for all inline-tests errors."""


class ScanFailure(InlineTestsError):
    """An unparsable source fragment.

    The scanner never raises this; it records instances on the
    :class:`~inline_tests.scanning.models.SourceUnit` it returns.
    """

    def __init__(self, offset: int, reason: str, path: Path | None = None) -> None:
        self.offset = offset
        self.reason = reason
        self.path = path
        location = f"{path}:{offset}" if path else f"offset {offset}"
        super().__init__(f"{reason} at {location}")


class ConfigurationError(InlineTestsError):
    """A test cannot be set up: missing data source, missing factory or
    ambiguous construction. Fatal to the one affected test only."""

    def __init__(self, test_name: str, message: str) -> None:
        self.test_name = test_name
        super().__init__(f"{test_name}: {message}")


class ValidationFailure(InlineTestsError):
    """A stripped candidate failed the syntax check."""

    def __init__(
        self,
        path: Path,
        candidate_path: Path | None,
        output: str = "",
    ) -> None:
        self.path = path
        self.candidate_path = candidate_path
        self.output = output

        message = f"Stripped output for {path} failed validation."
        if candidate_path is not None:
            message += f" Candidate kept at {candidate_path}."
        if output:
            message += f"\n{output.strip()}"
        super().__init__(message)


class IOFailure(InlineTestsError):
    """A path could not be read or written."""

    def __init__(self, path: Path, cause: Exception | None = None) -> None:
        self.path = path
        self.cause = cause
        message = f"Could not access {path}"
        if cause:
            message += f": {cause}"
        super().__init__(message)


class ConfigFileError(InlineTestsError):
    """Raised when ``[tool.inline-tests]`` is misconfigured (developer error)."""
