"""Helpers available to inline test bodies while a case runs."""

from __future__ import annotations

from typing import Any

from inline_tests.context.context import current_case


_UNSET: Any = object()


def test() -> Any:
    """Return the host assertion and mocking surface of the running case."""
    return current_case().surface


test.__test__ = False  # type: ignore[attr-defined]


def state(value: Any = _UNSET) -> Any:
    """Read the group's shared state, or replace it when ``value`` is given.

    Returns the current value after any replacement; ``None`` when no
    state initializer exists.
    """
    slot = current_case().state
    if value is not _UNSET:
        slot.set(value)
    return slot.value
