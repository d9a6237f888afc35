"""Syntax validation of stripped candidates."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from inline_tests.config import DEFAULT_CONFIG, InlineConfig
from inline_tests.scanning.tokens import TokenKind, tokenize


logger = logging.getLogger(__name__)

_PAIRS = {"{": "}", "(": ")", "[": "]"}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    output: str = ""


class SyntaxValidator(Protocol):
    """Checks that a file on disk is syntactically valid."""

    def validate(self, path: Path) -> ValidationResult: ...


class CommandValidator:
    """Runs an external checker, e.g. ``php -l <file>``.

    Success is exit status 0. A timeout or a missing executable counts as a
    failed validation; the output is kept for diagnostics only.
    """

    def __init__(self, command: Sequence[str] = ("php", "-l"), timeout: float | None = 60.0) -> None:
        self.command = list(command)
        self.timeout = timeout

    def validate(self, path: Path) -> ValidationResult:
        argv = [*self.command, str(path)]
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            return ValidationResult(False, f"Validator not found: {self.command[0]}")
        except subprocess.TimeoutExpired:
            return ValidationResult(False, f"Validator timed out after {self.timeout}s")

        output = (result.stdout + result.stderr).strip()
        logger.debug("%s exited with %d", " ".join(argv), result.returncode)
        return ValidationResult(result.returncode == 0, output)


class BalanceValidator:
    """In-process structural check: complete scan and balanced brackets."""

    def check_text(self, text: str) -> ValidationResult:
        stream = tokenize(text)
        if not stream.complete:
            return ValidationResult(False, str(stream.failures[0]))

        stack: list[tuple[str, int]] = []
        for tok in stream.tokens:
            if tok.kind is TokenKind.MARKER_OPEN:
                stack.append(("[", tok.start))
            elif tok.kind is not TokenKind.PUNCT:
                continue
            elif tok.text in _PAIRS:
                stack.append((tok.text, tok.start))
            elif tok.text in _PAIRS.values():
                if not stack or _PAIRS[stack[-1][0]] != tok.text:
                    return ValidationResult(False, f"Unexpected '{tok.text}' at offset {tok.start}")
                stack.pop()

        if stack:
            opener, offset = stack[-1]
            return ValidationResult(False, f"Unclosed '{opener}' at offset {offset}")
        return ValidationResult(True)

    def validate(self, path: Path) -> ValidationResult:
        return self.check_text(path.read_text(encoding="utf-8"))


def build_validator(config: InlineConfig | None = None) -> SyntaxValidator:
    config = config or DEFAULT_CONFIG
    if config.validator == "balance":
        return BalanceValidator()
    return CommandValidator(config.validator_command, config.validator_timeout)
