"""Directory-level strip driver.

Each file is stripped, validated and written on its own; there is no
cross-file transaction. Outcomes are aggregated into a :class:`StripReport`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from inline_tests.config import DEFAULT_CONFIG, InlineConfig
from inline_tests.errors import IOFailure, ValidationFailure
from inline_tests.stripping.stripper import Stripper
from inline_tests.stripping.validator import SyntaxValidator, build_validator
from inline_tests.stripping.writer import write_candidate


logger = logging.getLogger(__name__)


class FileStatus(Enum):
    UNCHANGED = "unchanged"
    STRIPPED = "stripped"
    WOULD_STRIP = "would-strip"
    INVALID = "invalid"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class FileOutcome:
    path: Path
    status: FileStatus
    quarantined: Path | None = None
    detail: str = ""


@dataclass
class StripReport:
    outcomes: list[FileOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    dry_run: bool = False

    def with_status(self, status: FileStatus) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def failures(self) -> list[FileOutcome]:
        return self.with_status(FileStatus.INVALID)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def counts(self) -> dict[FileStatus, int]:
        return {status: len(self.with_status(status)) for status in FileStatus}


def iter_source_files(root: Path, config: InlineConfig | None = None) -> Iterator[Path]:
    """Files under ``root`` with a configured extension, in sorted order."""
    config = config or DEFAULT_CONFIG
    extensions = {ext.lower() for ext in config.extensions}
    if root.is_file():
        candidates: Iterable[Path] = [root]
    else:
        candidates = sorted(p for p in root.rglob("*") if p.is_file())
    for path in candidates:
        if path.name.endswith(config.quarantine_suffix):
            continue
        if path.suffix.lower() in extensions:
            yield path


def strip_file(
    path: Path,
    stripper: Stripper,
    validator: SyntaxValidator,
    dry_run: bool = False,
) -> FileOutcome:
    try:
        with path.open(encoding="utf-8", newline="") as fh:
            original = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping %s: %s", path, exc)
        return FileOutcome(path, FileStatus.SKIPPED, detail=str(exc))

    candidate = stripper.strip(original)
    if candidate == original:
        logger.debug("No inline tests in %s", path)
        return FileOutcome(path, FileStatus.UNCHANGED)
    if dry_run:
        return FileOutcome(path, FileStatus.WOULD_STRIP)

    try:
        write_candidate(
            path,
            original,
            candidate,
            validator,
            quarantine_suffix=stripper.config.quarantine_suffix,
        )
    except ValidationFailure as exc:
        return FileOutcome(path, FileStatus.INVALID, exc.candidate_path, exc.output)
    except IOFailure as exc:
        logger.warning("%s", exc)
        return FileOutcome(path, FileStatus.SKIPPED, detail=str(exc))
    return FileOutcome(path, FileStatus.STRIPPED)


def strip_paths(
    roots: Iterable[Path],
    config: InlineConfig | None = None,
    validator: SyntaxValidator | None = None,
    dry_run: bool = False,
) -> StripReport:
    """Strip every matching file under ``roots``."""
    config = config or DEFAULT_CONFIG
    stripper = Stripper(config)
    validator = validator or build_validator(config)
    report = StripReport(dry_run=dry_run)

    for root in roots:
        root = Path(root)
        if not root.exists():
            message = f"Directory not found: {root}"
            logger.warning(message)
            report.warnings.append(message)
            continue
        for path in iter_source_files(root, config):
            outcome = strip_file(path, stripper, validator, dry_run=dry_run)
            report.outcomes.append(outcome)

    return report
