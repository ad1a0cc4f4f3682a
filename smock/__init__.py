"""Mocks, stubs and reversible substitutions verified at the end of each test.

A test runs inside a session: :func:`session_start` opens it and
:func:`session_end` restores every replaced member and verifies every
expectation created in between. :data:`hooks` exposes the pair for wiring into
a runner; :mod:`smock.pytest_plugin` does that for pytest.
"""

from __future__ import annotations

from .api import (
    LifecycleHooks,
    expect,
    hooks,
    mock,
    replace,
    session_scope,
    stub,
    when,
)
from .comparators import (
    Any,
    Comparator,
    Contains,
    Eq,
    IsA,
    Predicate,
    Regex,
    StartsWith,
)
from .doubles import Call, Mock, is_mock
from .errors import (
    LifecycleError,
    ResolutionError,
    RestorationError,
    SmockError,
    UnfulfilledExpectationError,
    UsageError,
    VerificationError,
)
from .expectations import Expectation
from .replacement import ABSENT
from .session import Session, session_end, session_start

__all__ = [
    "ABSENT",
    "Any",
    "Call",
    "Comparator",
    "Contains",
    "Eq",
    "Expectation",
    "IsA",
    "LifecycleError",
    "LifecycleHooks",
    "Mock",
    "Predicate",
    "Regex",
    "ResolutionError",
    "RestorationError",
    "Session",
    "SmockError",
    "StartsWith",
    "UnfulfilledExpectationError",
    "UsageError",
    "VerificationError",
    "expect",
    "hooks",
    "is_mock",
    "mock",
    "replace",
    "session_end",
    "session_scope",
    "session_start",
    "stub",
    "when",
]
