"""Expectation builder DSL attached to mocks."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as t

from ._validators import validate_call_count
from .comparators import as_comparator
from .doubles import Mock, is_mock, make_mock
from .errors import UnfulfilledExpectationError, UsageError
from .session import Session
from .verifiers import describe_unfulfilled

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .doubles import Call

Action = t.Callable[["Call"], t.Any]


class Option(enum.StrEnum):
    """Set-once option slots of an :class:`Expectation`."""

    COUNT = "call count"
    ARGS = "argument matcher"
    ACTION = "return action"


@dc.dataclass(frozen=True, slots=True)
class CallCount:
    """Constraint on how many matching calls a mock must receive."""

    check: t.Callable[[int], bool]
    description: str

    @classmethod
    def at_least(cls, n: int) -> CallCount:
        """Require ``n`` or more calls."""
        return cls(lambda calls: calls >= n, f"at least {n} times")

    @classmethod
    def at_most(cls, n: int) -> CallCount:
        """Allow up to ``n`` calls."""
        return cls(lambda calls: calls <= n, f"at most {n} times")

    @classmethod
    def exactly(cls, n: int) -> CallCount:
        """Require exactly ``n`` calls."""
        return cls(lambda calls: calls == n, f"exactly {n} times")

    def __call__(self, calls: int) -> bool:
        """Return ``True`` if *calls* satisfies the constraint."""
        return self.check(calls)


@dc.dataclass(frozen=True, slots=True)
class ArgsMatcher:
    """Constraint deciding which calls an expectation applies to."""

    check: t.Callable[[Call], bool]
    description: str

    def __call__(self, call: Call) -> bool:
        """Return ``True`` if *call* is accepted."""
        return self.check(call)


def _describe_callable(func: t.Callable[..., object]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


class Expectation:
    """A behaviour attached to a mock, built up through chained calls.

    Each option slot (call count, argument matcher, return action) may be set
    once; setting it again raises :class:`~smock.errors.UsageError`.
    """

    def __init__(self, mock: Mock) -> None:
        self.mock = mock
        self._options: dict[Option, t.Any] = {}
        mock._mock_behaviours.append(self)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"[Expectation on {self.mock!r}]"

    def _set(self, option: Option, value: object) -> Expectation:
        if option in self._options:
            msg = f"already defined {option} on {self.mock!r}"
            raise UsageError(msg)
        self._options[option] = value
        return self

    def is_set(self, option: Option) -> bool:
        """Return ``True`` if *option* has been given a value."""
        return option in self._options

    @property
    def call_count(self) -> CallCount | None:
        """Return the count constraint, if one was set."""
        return self._options.get(Option.COUNT)

    @property
    def args_matcher(self) -> ArgsMatcher | None:
        """Return the argument matcher, if one was set."""
        return self._options.get(Option.ARGS)

    @property
    def times(self) -> Expectation:
        """Return ``self`` so that ``exactly(2).times`` reads naturally."""
        return self

    # ------------------------------------------------------------------
    # Call counts
    # ------------------------------------------------------------------
    def at_least(self, n: int) -> Expectation:
        """Require at least ``n`` matching calls."""
        validate_call_count(n)
        return self._set(Option.COUNT, CallCount.at_least(n))

    def at_most(self, n: int) -> Expectation:
        """Allow at most ``n`` matching calls."""
        validate_call_count(n)
        return self._set(Option.COUNT, CallCount.at_most(n))

    def exactly(self, n: int) -> Expectation:
        """Require exactly ``n`` matching calls."""
        validate_call_count(n)
        return self._set(Option.COUNT, CallCount.exactly(n))

    def any_number_of_times(self) -> Expectation:
        """Accept any number of matching calls, including none."""
        return self.at_least(0)

    def never(self) -> Expectation:
        """Forbid matching calls."""
        return self.exactly(0)

    def once(self) -> Expectation:
        """Require exactly one matching call."""
        return self.exactly(1)

    def twice(self) -> Expectation:
        """Require exactly two matching calls."""
        return self.exactly(2)

    def thrice(self) -> Expectation:
        """Require exactly three matching calls."""
        return self.exactly(3)

    # ------------------------------------------------------------------
    # Argument matching
    # ------------------------------------------------------------------
    def with_args(self, *expected: object, **expected_kwargs: object) -> Expectation:
        """Match calls whose leading arguments equal or satisfy *expected*.

        Each expected value is a literal compared with ``==`` or a
        :class:`~smock.comparators.Comparator`. Actual positional arguments
        beyond those given are ignored. Every expected keyword must be passed
        and match.
        """
        positional = [as_comparator(value) for value in expected]
        keywords = {key: as_comparator(value) for key, value in expected_kwargs.items()}

        def check(call: Call) -> bool:
            if len(call.args) < len(positional):
                return False
            if not all(
                matcher(actual)
                for matcher, actual in zip(positional, call.args, strict=False)
            ):
                return False
            return all(
                key in call.kwargs and matcher(call.kwargs[key])
                for key, matcher in keywords.items()
            )

        parts = [repr(matcher) for matcher in positional]
        parts.extend(f"{key}={matcher!r}" for key, matcher in keywords.items())
        return self._set(Option.ARGS, ArgsMatcher(check, ", ".join(parts)))

    def where_args(self, predicate: t.Callable[..., object]) -> Expectation:
        """Match calls for which ``predicate(*args, **kwargs)`` is truthy."""

        def check(call: Call) -> bool:
            return bool(predicate(*call.args, **call.kwargs))

        return self._set(
            Option.ARGS, ArgsMatcher(check, _describe_callable(predicate))
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def and_return(self, value: object) -> Expectation:
        """Return *value* from matching calls."""
        return self._set(Option.ACTION, lambda call: value)

    def and_call(self, func: t.Callable[..., object]) -> Expectation:
        """Forward matching calls to *func* and return its result."""
        return self._set(
            Option.ACTION, lambda call: func(*call.args, **call.kwargs)
        )

    def and_raise(self, error: BaseException | type[BaseException]) -> Expectation:
        """Raise *error* from matching calls."""

        def raise_error(call: Call) -> t.NoReturn:
            raise error

        return self._set(Option.ACTION, raise_error)

    then_return = and_return
    then_call = and_call
    then_raise = and_throw = and_raise

    # ------------------------------------------------------------------
    # Dispatch and verification
    # ------------------------------------------------------------------
    def handles(self, call: Call) -> bool:
        """Return ``True`` if this expectation applies to *call*."""
        matcher = self.args_matcher
        return True if matcher is None else matcher(call)

    def invoke(self, call: Call) -> t.Any:  # noqa: ANN401
        """Run the configured action for *call*, or return ``None``."""
        action: Action | None = self._options.get(Option.ACTION)
        if action is None:
            return None
        return action(call)

    def matching_call_count(self) -> int:
        """Count the calls in the mock's whole history this expectation handles."""
        return sum(1 for call in self.mock._mock_calls if self.handles(call))

    def verify(self) -> None:
        """Raise if the number of matching calls violates the count constraint.

        Without an explicit constraint, at least one matching call is required.
        """
        if not self.is_set(Option.COUNT):
            self.at_least(1)
        count = t.cast("CallCount", self.call_count)
        if not count(self.matching_call_count()):
            raise UnfulfilledExpectationError(self.report())

    def report(self) -> str:
        """Describe what was expected and every call the mock received."""
        count = self.call_count
        matcher = self.args_matcher
        return describe_unfulfilled(
            self.mock.name,
            count_description=(
                count.description if count is not None else "any number of times"
            ),
            args_description=matcher.description if matcher is not None else None,
            matching=self.matching_call_count(),
            calls=self.mock._mock_calls,
        )


def begin_expectation(
    subject: object, name: str | None = None, *, enforced: bool
) -> Expectation:
    """Attach a new expectation to *subject*, or to its member *name*.

    Without *name*, *subject* must itself be a mock. With *name*, an existing
    mock at that member is reused; otherwise a new mock is substituted for the
    member until the session ends.
    """
    session = Session.require_active()
    if name is None:
        if not is_mock(subject):
            msg = (
                f"can't use expect() or when() on {subject!r} unless you also "
                "provide a member name"
            )
            raise UsageError(msg)
        target = t.cast("Mock", subject)
    else:
        existing = getattr(subject, name, None)
        if is_mock(existing):
            target = t.cast("Mock", existing)
        else:
            target = make_mock(name)
            session.replace(subject, name, target)
    expectation = Expectation(target)
    session.add_expectation(expectation)
    if not enforced:
        expectation.any_number_of_times()
    return expectation


__all__ = [
    "ArgsMatcher",
    "CallCount",
    "Expectation",
    "Option",
    "begin_expectation",
]
