from inline_tests.context.cache import ArtifactCache
from inline_tests.context.context import (
    CASE_CONTEXT,
    CaseContext,
    StateSlot,
    case_context_scope,
    current_case,
)
from inline_tests.context.run import RunContext


__all__ = [
    "ArtifactCache",
    "CASE_CONTEXT",
    "CaseContext",
    "RunContext",
    "StateSlot",
    "case_context_scope",
    "current_case",
]
