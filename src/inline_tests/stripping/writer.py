"""Validated, atomic replacement of a source file with its stripped candidate."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from inline_tests.errors import IOFailure, ValidationFailure
from inline_tests.stripping.validator import SyntaxValidator


logger = logging.getLogger(__name__)


def quarantine_path(path: Path, suffix: str = ".stripped") -> Path:
    return path.with_name(path.name + suffix)


def _write_temporary(path: Path, text: str) -> Path:
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=path.suffix,
    ) as tmp:
        tmp.write(text)
        tmp.flush()
        os.fsync(tmp.fileno())
        return Path(tmp.name)


def write_candidate(
    path: Path,
    original: str,
    candidate: str,
    validator: SyntaxValidator,
    quarantine_suffix: str = ".stripped",
) -> bool:
    """Replace ``path`` with ``candidate`` if it validates.

    Returns False when the candidate equals the original and nothing was
    written. Raises :class:`ValidationFailure` when the candidate is rejected;
    the original is untouched and the candidate is kept under
    ``quarantine_suffix``. Raises :class:`IOFailure` on filesystem errors.
    """
    if candidate == original:
        return False

    tmp_path: Path | None = None
    try:
        tmp_path = _write_temporary(path, candidate)
        result = validator.validate(tmp_path)
        if not result.ok:
            quarantined = quarantine_path(path, quarantine_suffix)
            os.replace(tmp_path, quarantined)
            tmp_path = None
            logger.warning("Validation failed for %s; candidate kept at %s", path, quarantined)
            raise ValidationFailure(path, quarantined, result.output)

        os.chmod(tmp_path, path.stat().st_mode & 0o777)
        os.replace(tmp_path, path)
        tmp_path = None
        logger.info("Stripped %s", path)
        return True
    except OSError as exc:
        raise IOFailure(path, exc) from exc
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
