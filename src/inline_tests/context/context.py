from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Iterator


CASE_CONTEXT: ContextVar[CaseContext | None] = ContextVar("case_context", default=None)


@dataclass
class StateSlot:
    """Mutable state shared by every case of one group.

    Holds ``None`` until a state initializer runs. Never reset between cases.
    """

    value: Any = None
    initialized: bool = False

    def set(self, value: Any) -> None:
        self.value = value
        self.initialized = True


@dataclass(frozen=True, slots=True)
class CaseContext:
    """Execution context for a single running case.

    Attributes
    ----------
    case_name
        Display name of the running case.
    subject
        Instance the test body is bound to; None for free-function tests.
    surface
        Host assertion and mocking surface returned by ``test()``.
    state
        The group's shared state slot read and replaced by ``state()``.
    """

    case_name: str
    subject: Any = None
    surface: Any = None
    state: StateSlot = field(default_factory=StateSlot)


@contextmanager
def case_context_scope(ctx: CaseContext) -> Iterator[None]:
    token = CASE_CONTEXT.set(ctx)
    try:
        yield
    finally:
        CASE_CONTEXT.reset(token)


def current_case() -> CaseContext:
    ctx = CASE_CONTEXT.get()
    if ctx is None:
        raise RuntimeError("No inline test is running in this context")
    return ctx
