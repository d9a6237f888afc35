"""Bridge from inline-test adapters to pytest.

Registered through the ``pytest11`` entry point. A host test module turns
adapters into parameters and runs them::

    runtime = BindingRuntime({"App\\\\Calculator": Calculator})

    @pytest.mark.parametrize("case", inline_params(["src"], runtime))
    def test_inline(case, inline_sessions, inline_surface):
        run_inline_case(case, inline_sessions, inline_surface)

Cases of one group share a :class:`GroupSession` held by the
session-scoped ``inline_sessions`` pool, so before-all hooks run before
the group's first case and after-all hooks after its last.
"""

from __future__ import annotations

import threading
import unittest
from collections.abc import Iterable
from pathlib import Path
from typing import Any
from unittest import mock

import pytest

from inline_tests.config import InlineConfig, load_config
from inline_tests.context.run import RunContext
from inline_tests.testing import (
    AdapterCase,
    AdapterUnit,
    CaseStatus,
    CollectingRegistrar,
    GroupSession,
    Materializer,
    Runtime,
)


class InlineSurface(unittest.TestCase):
    """Assertion and mocking surface handed to test bodies via ``test()``.

    Exposes every ``unittest.TestCase`` assertion plus ``mock``, ``patch``
    and ``create_mock``.
    """

    __test__ = False  # not collected itself

    mock = mock
    patch = staticmethod(mock.patch)

    def __init__(self) -> None:
        super().__init__(methodName="runTest")
        self._patchers: list[Any] = []

    def runTest(self) -> None:  # pragma: no cover
        pass

    def create_mock(self, spec: Any = None, **kwargs: Any) -> mock.MagicMock:
        return mock.MagicMock(spec=spec, **kwargs)

    def patch_object(self, target: Any, attribute: str, new: Any = mock.DEFAULT, **kwargs: Any) -> Any:
        """Patch ``target.attribute`` until the current case finishes."""
        patcher = mock.patch.object(target, attribute, new, **kwargs)
        self._patchers.append(patcher)
        return patcher.start()

    def stop_patches(self) -> None:
        while self._patchers:
            self._patchers.pop().stop()


class SessionPool:
    """Open group sessions, finished once their last case has run."""

    def __init__(self) -> None:
        self._sessions: dict[int, tuple[GroupSession, int]] = {}
        self._lock = threading.Lock()

    def session_for(self, adapter: AdapterUnit, surface: Any) -> GroupSession:
        with self._lock:
            entry = self._sessions.get(id(adapter))
            if entry is None:
                entry = (GroupSession(adapter, surface), 0)
                self._sessions[id(adapter)] = entry
            return entry[0]

    def case_done(self, adapter: AdapterUnit) -> None:
        with self._lock:
            session, done = self._sessions[id(adapter)]
            done += 1
            if done < len(adapter.cases):
                self._sessions[id(adapter)] = (session, done)
                return
            del self._sessions[id(adapter)]
        session.finish()

    def finish_all(self) -> None:
        with self._lock:
            sessions = [session for session, _ in self._sessions.values()]
            self._sessions.clear()
        for session in sessions:
            session.finish()


def materialize(
    roots: Iterable[Path | str],
    runtime: Runtime,
    config: InlineConfig | None = None,
) -> list[AdapterUnit]:
    context = RunContext(runtime=runtime, config=config or load_config())
    registrar = CollectingRegistrar()
    Materializer(context).materialize([Path(r) for r in roots], registrar)
    return registrar.adapters


def inline_params(
    roots: Iterable[Path | str],
    runtime: Runtime,
    config: InlineConfig | None = None,
) -> list[Any]:
    """One ``pytest.param`` per executable case under ``roots``."""
    params = []
    for adapter in materialize(roots, runtime, config):
        for case in adapter.cases:
            params.append(pytest.param((adapter, case), id=case.name))
    return params


def run_inline_case(
    param: tuple[AdapterUnit, AdapterCase],
    sessions: SessionPool,
    surface: Any = None,
) -> None:
    """Run one case inside its group session and report the outcome to pytest."""
    adapter, case = param
    session = sessions.session_for(adapter, surface)
    session.surface = surface
    try:
        result = session.run_case(case)
    finally:
        sessions.case_done(adapter)

    if result.status is CaseStatus.SKIPPED:
        pytest.skip(str(result.error))
    if result.error is not None:
        raise result.error


@pytest.fixture(scope="session")
def inline_sessions() -> Any:
    """Group sessions of one pytest run; unfinished groups close at teardown."""
    sessions = SessionPool()
    yield sessions
    sessions.finish_all()


@pytest.fixture
def inline_surface() -> Any:
    surface = InlineSurface()
    yield surface
    surface.stop_patches()
