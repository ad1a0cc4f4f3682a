"""Unit tests for :mod:`smock.session` - lifecycle, restoration and verification."""

from __future__ import annotations

import logging
import threading

import pytest

from smock.doubles import make_mock
from smock.errors import (
    LifecycleError,
    RestorationError,
    UnfulfilledExpectationError,
)
from smock.expectations import Expectation
from smock.session import Session, session_end, session_start


class Target:
    """Plain object used as a substitution subject."""

    def __init__(self) -> None:
        self.value = "original"


class Frozen:
    """Object refusing to have its attributes deleted."""

    def __init__(self) -> None:
        object.__setattr__(self, "locked", False)

    def __delattr__(self, name: str) -> None:
        if self.locked:
            msg = "frozen"
            raise AttributeError(msg)
        object.__delattr__(self, name)


class Guarded:
    """Object whose attribute writes fail with ``ValueError`` once locked."""

    def __init__(self) -> None:
        self.mode = "open"

    def __setattr__(self, name: str, value: object) -> None:
        if self.__dict__.get("locked"):
            msg = f"cannot set {name}"
            raise ValueError(msg)
        object.__setattr__(self, name, value)


def test_start_and_end_toggle_active_session() -> None:
    """A session is live strictly between start and end."""
    assert Session.get_active() is None
    session = session_start()
    assert Session.get_active() is session
    assert session.is_live
    session_end()
    assert Session.get_active() is None
    assert not session.is_live


def test_nested_start_is_rejected() -> None:
    """Starting while a session is live raises and keeps the first session."""
    first = session_start()
    with pytest.raises(LifecycleError, match="already live"):
        session_start()
    assert Session.get_active() is first
    session_end()


def test_end_without_start_is_rejected() -> None:
    """Ending with no live session raises."""
    with pytest.raises(LifecycleError, match="before session_start"):
        session_end()


def test_require_active_without_session() -> None:
    """require_active reports the missing session."""
    with pytest.raises(LifecycleError, match="session_start\\(\\) not called"):
        Session.require_active()


def test_ended_session_cannot_be_reused() -> None:
    """Operations on a discarded session raise."""
    session = session_start()
    session_end()
    with pytest.raises(LifecycleError, match="not live"):
        session.replace(Target(), "value", 1)
    with pytest.raises(LifecycleError, match="not live"):
        session.end()


def test_restores_in_reverse_order() -> None:
    """Replacements of the same member unwind to the original value."""
    target = Target()
    session = session_start()
    session.replace(target, "value", "first")
    session.replace(target, "value", "second")
    session.replace(target, "extra", 1)
    assert target.value == "second"
    session_end()
    assert target.value == "original"
    assert not hasattr(target, "extra")


def test_restores_before_verifying() -> None:
    """Members are restored even when verification fails."""
    target = Target()
    session = session_start()
    session.replace(target, "value", "patched")
    mock = make_mock("never_called")
    session.add_expectation(Expectation(mock))
    with pytest.raises(UnfulfilledExpectationError):
        session_end()
    assert target.value == "original"
    assert Session.get_active() is None


def test_verification_is_fail_fast_in_creation_order() -> None:
    """The first failing expectation raises and later ones are not verified."""
    session = session_start()
    first = Expectation(make_mock("first")).once()
    second = Expectation(make_mock("second")).once()
    session.add_expectation(first)
    session.add_expectation(second)
    with pytest.raises(UnfulfilledExpectationError, match="expected first"):
        session_end()


def test_end_without_verify_skips_expectations() -> None:
    """``end(verify=False)`` only restores."""
    target = Target()
    session = session_start()
    session.replace(target, "value", "patched")
    session.add_expectation(Expectation(make_mock("ignored")))
    session.end(verify=False)
    assert target.value == "original"


def test_reset_active_restores_leftover_session() -> None:
    """reset_active ends a live session without verification."""
    target = Target()
    Session.start().replace(target, "value", "patched")
    Session.reset_active()
    assert target.value == "original"
    assert Session.get_active() is None
    Session.reset_active()


def test_restoration_errors_are_aggregated() -> None:
    """Every replacement is attempted before a restoration error is raised."""
    frozen = Frozen()
    target = Target()
    session = session_start()
    session.replace(target, "value", "patched")
    session.replace(frozen, "added", 1)
    object.__setattr__(frozen, "locked", True)
    with pytest.raises(RestorationError, match="added"):
        session_end()
    assert target.value == "original"
    assert Session.get_active() is None


def test_restoration_continues_past_unexpected_errors() -> None:
    """Errors other than attribute errors do not stop the remaining restores."""
    guarded = Guarded()
    target = Target()
    session = session_start()
    session.replace(target, "value", "patched")
    session.replace(guarded, "mode", "closed")
    object.__setattr__(guarded, "locked", True)
    with pytest.raises(RestorationError, match="cannot set mode") as excinfo:
        session_end()
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert target.value == "original"
    assert Session.get_active() is None


def test_live_session_is_shared_across_threads() -> None:
    """Threads see the one live session and cannot start another."""
    session = session_start()
    target = Target()
    seen: list[object] = []

    def worker() -> None:
        seen.append(Session.get_active())
        Session.require_active().replace(target, "extra", 1)
        try:
            session_start()
        except LifecycleError as exc:
            seen.append(exc)

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()

    assert seen[0] is session
    assert isinstance(seen[1], LifecycleError)
    assert target.extra == 1  # type: ignore[attr-defined]
    session_end()
    assert not hasattr(target, "extra")


def test_lifecycle_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Session start, substitution and end are logged at debug level."""
    with caplog.at_level(logging.DEBUG, logger="smock.session"):
        session = session_start()
        session.replace(Target(), "value", 1)
        session_end()
    messages = [record.getMessage() for record in caplog.records]
    assert any(msg.startswith("Started smock session") for msg in messages)
    assert any(msg.startswith("Replaced value") for msg in messages)
    assert any(msg.startswith("Ended smock session") for msg in messages)
