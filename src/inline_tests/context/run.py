from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from inline_tests.config import DEFAULT_CONFIG, InlineConfig
from inline_tests.context.cache import ArtifactCache

if TYPE_CHECKING:
    from inline_tests.testing.adapter import AdapterUnit
    from inline_tests.testing.runtime import Runtime


@dataclass
class RunContext:
    """Everything one materializing run shares, passed explicitly.

    Attributes
    ----------
    runtime
        Host runtime resolving declarations to callables.
    config
        Active configuration.
    cache
        Adapters already synthesized in this run.
    """

    runtime: Runtime
    config: InlineConfig = DEFAULT_CONFIG
    cache: ArtifactCache[AdapterUnit] = field(default_factory=ArtifactCache)
