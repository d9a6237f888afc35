"""Shared types for inline test scanning and materializing."""

from enum import Enum


class MarkerRole(Enum):
    """Role a marker assigns to the declaration it precedes."""

    TEST = "test"
    BEFORE_EACH = "before_each"
    AFTER_EACH = "after_each"
    BEFORE_ALL = "before_all"
    AFTER_ALL = "after_all"
    FACTORY = "factory"
    DEFAULT_FACTORY = "default_factory"
    DATA_SOURCE = "data_source"
    STATE = "state"


# Roles whose declarations only exist for tests and are stripped from production.
TEST_ONLY_ROLES = frozenset(
    {
        MarkerRole.TEST,
        MarkerRole.BEFORE_EACH,
        MarkerRole.AFTER_EACH,
        MarkerRole.BEFORE_ALL,
        MarkerRole.AFTER_ALL,
        MarkerRole.FACTORY,
        MarkerRole.DEFAULT_FACTORY,
        MarkerRole.STATE,
    }
)

LIFECYCLE_ROLES = (
    MarkerRole.BEFORE_ALL,
    MarkerRole.BEFORE_EACH,
    MarkerRole.AFTER_EACH,
    MarkerRole.AFTER_ALL,
)


class ScopeKind(Enum):
    """Kind of lexical container."""

    ROOT = "root"  # Implicit file-level scope
    NAMESPACE = "namespace"
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"


class Visibility(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
