"""Step definitions for smock behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from smock import (
    LifecycleError,
    Mock,
    Session,
    SmockError,
    expect,
    mock,
    replace,
    session_end,
    session_start,
    stub,
)


class Subject:
    """Object whose members the scenarios replace."""

    def save(self) -> str:
        return "saved"


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    mock: Mock
    subject: Subject
    result: object
    error: SmockError | None


def _capture(context: BehaveContext, action: t.Callable[[], object]) -> None:
    context.error = None
    try:
        action()
    except SmockError as exc:
        context.error = exc


@given("a live smock session")
def step_live_session(context: BehaveContext) -> None:
    """Start a session, discarding any left over from a previous scenario."""
    Session.reset_active()
    session_start()
    context.error = None


@given('a mock named "{name}"')
def step_named_mock(context: BehaveContext, name: str) -> None:
    """Create a standalone mock."""
    context.mock = mock(name)


@given('the mock is expected to be called once with "{arg}"')
def step_expect_once(context: BehaveContext, arg: str) -> None:
    """Expect exactly one call with *arg*."""
    expect(context.mock).with_args(arg).once()


@given('an object with a "{name}" method')
def step_object_with_method(context: BehaveContext, name: str) -> None:
    """Provide an object defining *name*."""
    assert hasattr(Subject, name)
    context.subject = Subject()


@given('an object without an "{name}" member')
def step_object_without_member(context: BehaveContext, name: str) -> None:
    """Provide an object lacking *name*."""
    context.subject = Subject()
    assert not hasattr(context.subject, name)


@given('"{name}" is stubbed to return {value:d}')
def step_stub_member(context: BehaveContext, name: str, value: int) -> None:
    """Stub *name* on the subject."""
    stub(context.subject, name).and_return(value)


@when('the mock is called with "{arg}"')
def step_call_mock(context: BehaveContext, arg: str) -> None:
    """Invoke the mock."""
    context.mock(arg)


@when('"{name}" is called on the object')
def step_call_member(context: BehaveContext, name: str) -> None:
    """Call *name* on the subject."""
    context.result = getattr(context.subject, name)()


@when('"{name}" is replaced with {value:d} on the object')
def step_replace_member(context: BehaveContext, name: str, value: int) -> None:
    """Replace *name* on the subject."""
    replace(context.subject, name, value)


@when("the session ends")
def step_end_session(context: BehaveContext) -> None:
    """End the session, capturing any error."""
    _capture(context, session_end)


@when("another session is started")
def step_start_again(context: BehaveContext) -> None:
    """Attempt a nested session start."""
    _capture(context, session_start)


@then("the session ended cleanly")
def step_ended_cleanly(context: BehaveContext) -> None:
    """No error was raised and no session is live."""
    assert context.error is None
    assert Session.get_active() is None


@then('verification fails mentioning "{text}"')
def step_verification_mentions(context: BehaveContext, text: str) -> None:
    """The verification error message contains *text*."""
    assert text in str(context.error)


@then("the call returned {value:d}")
def step_call_returned(context: BehaveContext, value: int) -> None:
    """The last member call returned *value*."""
    assert context.result == value


@then('"{name}" on the object behaves as before')
def step_member_restored(context: BehaveContext, name: str) -> None:
    """The member is the class's original method again."""
    assert getattr(context.subject, name)() == "saved"


@then('the object has no "{name}" member')
def step_member_absent(context: BehaveContext, name: str) -> None:
    """The member was removed on restoration."""
    assert not hasattr(context.subject, name)


@then("a lifecycle error is raised")
def step_lifecycle_error(context: BehaveContext) -> None:
    """The captured error is a lifecycle error."""
    assert isinstance(context.error, LifecycleError)
