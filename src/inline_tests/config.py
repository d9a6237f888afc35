"""Configuration for inline-tests.

Settings live in the ``[tool.inline-tests]`` table of the nearest
``pyproject.toml``. Keys may be written with dashes or underscores::

    [tool.inline-tests]
    sentinel = "Tests"
    extensions = [".php"]
    validator-command = ["php", "-l"]
    validator-timeout = 30
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from inline_tests.errors import ConfigFileError
from inline_tests.types import MarkerRole


DEFAULT_MARKERS: dict[str, MarkerRole] = {
    "Test": MarkerRole.TEST,
    "Before": MarkerRole.BEFORE_EACH,
    "After": MarkerRole.AFTER_EACH,
    "BeforeClass": MarkerRole.BEFORE_ALL,
    "AfterClass": MarkerRole.AFTER_ALL,
    "Factory": MarkerRole.FACTORY,
    "DefaultFactory": MarkerRole.DEFAULT_FACTORY,
    "DataProvider": MarkerRole.DATA_SOURCE,
    "State": MarkerRole.STATE,
}

DEFAULT_TEST_ONLY_IMPORTS: tuple[str, ...] = (
    "PHPUnit\\Framework\\Attributes\\Test",
    "PHPUnit\\Framework\\Attributes\\Before",
    "PHPUnit\\Framework\\Attributes\\After",
    "PHPUnit\\Framework\\Attributes\\BeforeClass",
    "PHPUnit\\Framework\\Attributes\\AfterClass",
    "PHPUnit\\Framework\\Attributes\\DataProvider",
    "PHPUnit\\Framework\\Attributes\\TestDox",
    "NSRosenqvist\\PHPUnitInline\\Attributes\\Factory",
    "NSRosenqvist\\PHPUnitInline\\Attributes\\DefaultFactory",
    "NSRosenqvist\\PHPUnitInline\\Attributes\\State",
    "NSRosenqvist\\PHPUnitInline\\test",
    "NSRosenqvist\\PHPUnitInline\\state",
    "test",
    "state",
)

PYPROJECT_TABLE = "inline-tests"


class InlineConfig(BaseModel):
    """Settings shared by the scanner, stripper and materializer.

    Attributes
    ----------
    sentinel
        Scope path segment marking a scope as test-only.
    extensions
        File suffixes the directory walker picks up.
    quarantine_suffix
        Suffix appended to a rejected candidate kept beside its original.
    validator
        ``"command"`` runs ``validator_command``; ``"balance"`` uses the
        in-process structural check.
    validator_command
        External syntax checker; the candidate path is appended.
    validator_timeout
        Seconds before the validator subprocess is abandoned.
    markers
        Marker name to role vocabulary.
    test_only_imports
        Fully qualified names whose ``use`` statements are stripped.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    sentinel: str = "Tests"
    extensions: list[str] = Field(default_factory=lambda: [".php"])
    quarantine_suffix: str = ".stripped"
    validator: Literal["command", "balance"] = "command"
    validator_command: list[str] = Field(default_factory=lambda: ["php", "-l"])
    validator_timeout: float | None = 60.0
    markers: dict[str, MarkerRole] = Field(default_factory=lambda: dict(DEFAULT_MARKERS))
    test_only_imports: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TEST_ONLY_IMPORTS)
    )

    def role_of(self, marker_name: str) -> MarkerRole | None:
        """Return the role for a marker name, ignoring any namespace prefix."""
        return self.markers.get(marker_name.rsplit("\\", 1)[-1])

    def roles(self, marker_names: Iterable[str]) -> set[MarkerRole]:
        roles = set()
        for name in marker_names:
            role = self.role_of(name)
            if role is not None:
                roles.add(role)
        return roles

    def is_test_only_import(self, name: str) -> bool:
        return name.lstrip("\\") in {n.lstrip("\\") for n in self.test_only_imports}


DEFAULT_CONFIG = InlineConfig()


def find_pyproject(start: Path | None = None) -> Path | None:
    """Return the nearest ``pyproject.toml`` at or above ``start``."""
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _normalize_keys(table: dict[str, Any]) -> dict[str, Any]:
    return {key.replace("-", "_"): value for key, value in table.items()}


def load_config(start: Path | None = None) -> InlineConfig:
    """Load ``[tool.inline-tests]`` from the nearest pyproject, or defaults."""
    pyproject = find_pyproject(start)
    if pyproject is None:
        return DEFAULT_CONFIG

    try:
        with pyproject.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {pyproject}: {exc}"
        raise ConfigFileError(msg) from exc

    table = data.get("tool", {}).get(PYPROJECT_TABLE)
    if table is None:
        return DEFAULT_CONFIG

    try:
        return InlineConfig.model_validate(_normalize_keys(table))
    except ValidationError as exc:
        msg = f"Invalid [tool.{PYPROJECT_TABLE}] in {pyproject}:\n{exc}"
        raise ConfigFileError(msg) from exc
