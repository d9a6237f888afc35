"""Discovery, synthesis and execution of inline tests."""

from inline_tests.context.cache import ArtifactCache
from inline_tests.testing.adapter import (
    AdapterCase,
    AdapterUnit,
    CollectingRegistrar,
    Materializer,
    Registrar,
)
from inline_tests.testing.datasets import DataSet, expand
from inline_tests.testing.discovery import (
    TestGroup,
    TestUnit,
    discover,
    discover_file,
    discover_paths,
)
from inline_tests.testing.runner import CaseResult, CaseStatus, GroupSession
from inline_tests.testing.runtime import BindingRuntime, Handle, Runtime


__all__ = [
    "AdapterCase",
    "AdapterUnit",
    "ArtifactCache",
    "BindingRuntime",
    "CaseResult",
    "CaseStatus",
    "CollectingRegistrar",
    "DataSet",
    "GroupSession",
    "Handle",
    "Materializer",
    "Registrar",
    "Runtime",
    "TestGroup",
    "TestUnit",
    "discover",
    "discover_file",
    "discover_paths",
    "expand",
]
