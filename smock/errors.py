"""Exception hierarchy for smock."""

from __future__ import annotations


class SmockError(Exception):
    """Base class for all smock errors."""


class LifecycleError(SmockError):
    """Raised when the session lifecycle is driven out of order."""

    DEFAULT_MESSAGE = "session_start() not called"


class UsageError(SmockError):
    """Raised when the expectation DSL is misused."""


class ResolutionError(UsageError):
    """Raised when no owner can be found for a substituted member."""


class RestorationError(SmockError):
    """Raised when substituted members could not all be restored."""


class VerificationError(SmockError, AssertionError):
    """Base class for failures detected when a session ends."""


class UnfulfilledExpectationError(VerificationError):
    """Raised when an expectation's call count constraint is not met."""


__all__ = [
    "LifecycleError",
    "ResolutionError",
    "RestorationError",
    "SmockError",
    "UnfulfilledExpectationError",
    "UsageError",
    "VerificationError",
]
