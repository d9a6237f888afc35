"""Shared fixtures for unit tests."""

from pathlib import Path

import pytest

from inline_tests.config import InlineConfig
from inline_tests.pytest_plugin import InlineSurface


FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the sample source files."""
    return FIXTURES


@pytest.fixture
def load_fixture():
    """Read a sample source file by name."""
    return read_fixture


@pytest.fixture
def surface() -> InlineSurface:
    """Assertion surface handed to test bodies through ``test()``."""
    return InlineSurface()


@pytest.fixture
def balance_config() -> InlineConfig:
    """Configuration using the in-process validator, so no interpreter is needed."""
    return InlineConfig(validator="balance")


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """A writable copy of every fixture file."""
    root = tmp_path / "src"
    root.mkdir()
    for path in FIXTURES.glob("*.php"):
        (root / path.name).write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
    return root
