"""Public entry points for creating mocks, expectations and substitutions."""

from __future__ import annotations

import contextlib
import typing as t

from .doubles import Mock, is_mock, make_mock
from .expectations import Expectation, begin_expectation
from .session import Session, session_end, session_start


def mock(name: str | None = None, template: object = None) -> Mock:
    """Create a standalone mock; see :func:`smock.doubles.make_mock`."""
    return make_mock(name, template)


def expect(subject: object, name: str | None = None) -> Expectation:
    """Begin an expectation that must be met at least once unless told otherwise."""
    return begin_expectation(subject, name, enforced=True)


def when(subject: object, name: str | None = None) -> Expectation:
    """Begin a stub that may be called any number of times."""
    return begin_expectation(subject, name, enforced=False)


stub = when

T = t.TypeVar("T")


def replace(subject: object, name: str, value: T) -> T:
    """Set *name* on *subject* to *value* until the live session ends."""
    Session.require_active().replace(subject, name, value)
    return value


@contextlib.contextmanager
def session_scope() -> t.Iterator[Session]:
    """Run the enclosed block inside a session.

    Verification is skipped when the block raises, so the original error is
    not masked; substitutions are restored either way.
    """
    session = session_start()
    try:
        yield session
    except BaseException:
        if session.is_live:
            session.end(verify=False)
        raise
    if session.is_live:
        session.end()


class LifecycleHooks(t.NamedTuple):
    """Callables to wire into a test runner's per-test setup and teardown."""

    before_each: t.Callable[[], Session]
    after_each: t.Callable[[], None]


hooks = LifecycleHooks(before_each=session_start, after_each=session_end)


__all__ = [
    "LifecycleHooks",
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
