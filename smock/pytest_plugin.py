"""Pytest plugin providing the ``smock`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .api import hooks
from .session import Session

logger = logging.getLogger(__name__)

_AUTO_VERIFY: t.Final[str] = "smock_auto_verify"
_AUTO_VERIFY_KW: t.Final[str] = "auto_verify"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register ``--[no-]smock-auto-verify`` and the matching ini key."""
    group = parser.getgroup("smock", "smock test doubles")
    for flag, action, verb in (
        ("--smock-auto-verify", "store_true", "Verify"),
        ("--no-smock-auto-verify", "store_false", "Do not verify"),
    ):
        group.addoption(
            flag,
            action=action,
            dest=_AUTO_VERIFY,
            default=None,
            help=f"{verb} expectations when the smock fixture is torn down.",
        )
    parser.addini(
        _AUTO_VERIFY,
        "Verify smock expectations when the smock fixture is torn down.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``smock`` marker."""
    config.addinivalue_line(
        "markers",
        "smock(auto_verify=True): verify smock expectations for this test or not.",
    )


class _SmockItem(t.Protocol):
    """pytest item carrying a deferred verification error."""

    _smock_verify_error: Exception | None


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Keep each phase's report on the item and attach deferred failures.

    The fixture teardown reads ``rep_call`` to decide whether a verification
    failure should fail the test or ride along with an earlier failure.
    """
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
    if rep.when == "teardown":
        _apply_deferred_verify_failure(item, rep)


def _auto_verify_enabled(request: pytest.FixtureRequest) -> bool:
    """Resolve auto-verification: marker, fixture param, CLI, then ini."""
    marker = request.node.get_closest_marker("smock")
    if marker is not None and _AUTO_VERIFY_KW in marker.kwargs:
        return bool(marker.kwargs[_AUTO_VERIFY_KW])

    param = getattr(request, "param", None)
    if param is not None:
        return _auto_verify_from_param(param)

    cli_value = request.config.getoption(_AUTO_VERIFY, default=None)
    if cli_value is None:
        return bool(request.config.getini(_AUTO_VERIFY))
    return bool(cli_value)


def _auto_verify_from_param(param: object) -> bool:
    """Interpret an indirect ``smock`` fixture parameter."""
    match param:
        case bool():
            return param
        case {"auto_verify": value}:
            return bool(value)
        case dict():
            msg = (
                f"smock fixture param dict needs an {_AUTO_VERIFY_KW!r} key, "
                f"got keys: {sorted(param)}"
            )
        case _:
            msg = (
                "smock fixture param must be a bool or a dict with an "
                f"{_AUTO_VERIFY_KW!r} key, got {type(param).__name__}"
            )
    raise TypeError(msg)


def _apply_deferred_verify_failure(
    item: pytest.Item, report: pytest.TestReport
) -> None:
    """Attach a verification error that did not fail teardown to *report*."""
    err: Exception | None = getattr(item, "_smock_verify_error", None)
    if err is None:
        return
    delattr(item, "_smock_verify_error")
    report.sections.append(("smock verification", f"{type(err).__name__}: {err}"))


@pytest.fixture
def smock(request: pytest.FixtureRequest) -> t.Generator[Session, None, None]:
    """Provide a live smock :class:`~smock.session.Session` for one test."""
    auto_verify = _auto_verify_enabled(request)
    session = hooks.before_each()
    try:
        yield session
    finally:
        _teardown_session(request.node, session, auto_verify=auto_verify)


def _teardown_session(
    item: pytest.Item, session: Session, *, auto_verify: bool
) -> None:
    """End *session* unless the test already did, and report failures."""
    if not session.is_live:
        return
    if not auto_verify:
        session.end(verify=False)
        return
    try:
        hooks.after_each()
    except Exception as err:
        logger.exception("Error during smock verification")
        if _call_stage_failed(item):
            t.cast("_SmockItem", item)._smock_verify_error = err
            return
        pytest.fail(f"{type(err).__name__}: {err}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
