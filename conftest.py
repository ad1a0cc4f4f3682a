"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

import smock.session

pytest_plugins = ("smock.pytest_plugin", "pytester")


@pytest.fixture(autouse=True)
def reset_session_state() -> t.Generator[None, None, None]:
    """Ensure no smock session leaks between tests.

    A leftover session is ended without verification so its replaced members
    are restored before the next test runs.
    """
    smock.session.Session.reset_active()
    yield
    smock.session.Session.reset_active()
