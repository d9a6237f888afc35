"""inline-tests - tests written beside the code they exercise."""

from .config import InlineConfig, load_config
from .helpers import state, test
from .scanning import scan
from .stripping import strip, strip_paths
from .testing import BindingRuntime, GroupSession, Materializer, discover
from .version import __version__


__all__ = [
    # Configuration
    "InlineConfig",
    "load_config",
    # Scanning and stripping
    "scan",
    "strip",
    "strip_paths",
    # Materializing
    "BindingRuntime",
    "GroupSession",
    "Materializer",
    "discover",
    # Test body helpers
    "state",
    "test",
]
