"""Callable mock objects that record calls and dispatch to behaviours."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import types
import typing as t

from .errors import UsageError

logger = logging.getLogger(__name__)

UNKNOWN_MOCK_NAME: t.Final[str] = "[unknown mock]"


@dc.dataclass(frozen=True, slots=True)
class Call:
    """A single invocation of a :class:`Mock`, captured verbatim."""

    args: tuple[t.Any, ...] = ()
    kwargs: t.Mapping[str, t.Any] = dc.field(
        default_factory=lambda: types.MappingProxyType({})
    )

    @classmethod
    def capture(cls, args: tuple[t.Any, ...], kwargs: dict[str, t.Any]) -> Call:
        """Build a call record that later mutation of *kwargs* cannot affect."""
        return cls(tuple(args), types.MappingProxyType(dict(kwargs)))


class Behaviour(t.Protocol):
    """Dispatch interface a mock expects from its registered behaviours."""

    def handles(self, call: Call) -> bool:
        """Return ``True`` if this behaviour accepts *call*."""
        ...

    def invoke(self, call: Call) -> t.Any:  # noqa: ANN401
        """Produce the outcome of *call*."""
        ...


class Mock:
    """Callable stand-in recording every call it receives.

    Each call is appended to the history and then offered to the registered
    behaviours, most recently registered first. The first behaviour that
    handles the call decides its outcome. A call nobody handles returns
    ``None``; whether that was acceptable is decided later by verification.
    """

    def __init__(self, name: str | None = None, template: object = None) -> None:
        self._mock_name = name or UNKNOWN_MOCK_NAME
        self._mock_calls: list[Call] = []
        self._mock_behaviours: list[Behaviour] = []
        if template is not None:
            for child in _template_names(template):
                setattr(self, child, Mock(child))

    def __call__(self, /, *args: t.Any, **kwargs: t.Any) -> t.Any:  # noqa: ANN401
        """Record the call and return the outcome chosen by a behaviour."""
        call = Call.capture(args, kwargs)
        self._mock_calls.append(call)
        for behaviour in reversed(self._mock_behaviours):
            if behaviour.handles(call):
                return behaviour.invoke(call)
        logger.debug("%r received unmatched call %r", self, call)
        return None

    def __repr__(self) -> str:
        """Return ``<mock: NAME>``."""
        return f"<mock: {self._mock_name}>"

    __str__ = __repr__

    @property
    def name(self) -> str:
        """Display name used in ``repr`` and failure messages."""
        return self._mock_name

    def received_calls(self) -> list[Call]:
        """Return a copy of the recorded call history."""
        return list(self._mock_calls)


def _is_root_member(name: str) -> bool:
    """Return ``True`` for names every Python object carries implicitly."""
    return hasattr(object, name) or (name.startswith("__") and name.endswith("__"))


def _is_mock_member(name: str) -> bool:
    """Return ``True`` for names a child mock would shadow on :class:`Mock`."""
    return name.startswith("_mock_") or hasattr(Mock, name)


def _template_names(template: object) -> list[str]:
    """Return the child mock names described by *template*.

    Names listed explicitly may not collide with the mock's own members.
    Names discovered on an example object, which may itself be a mock, skip
    those members instead.
    """
    if isinstance(template, str):
        names = [template]
    elif isinstance(template, cabc.Mapping):
        names = [str(key) for key in template]
    elif isinstance(template, list | tuple | set | frozenset):
        names = [str(name) for name in template]
    else:
        return [
            name
            for name in dir(template)
            if not _is_root_member(name) and not _is_mock_member(name)
        ]
    clashes = sorted(name for name in names if _is_mock_member(name))
    if clashes:
        msg = f"template names clash with mock members: {', '.join(clashes)}"
        raise UsageError(msg)
    return names


def make_mock(name: str | None = None, template: object = None) -> Mock:
    """Create a :class:`Mock` named *name*, primed with children from *template*.

    *template* may be a single name, a list of names, a mapping whose keys are
    the names, or an example object whose non-root attributes are the names.
    """
    return Mock(name, template)


def is_mock(value: object) -> bool:
    """Return ``True`` if *value* is a :class:`Mock`."""
    return isinstance(value, Mock)


__all__ = [
    "UNKNOWN_MOCK_NAME",
    "Behaviour",
    "Call",
    "Mock",
    "is_mock",
    "make_mock",
]
