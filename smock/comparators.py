"""Comparator classes used for argument matching.

An expected argument given to :meth:`Expectation.with_args` is either a
:class:`Comparator` or a plain literal. Literals are wrapped in :class:`Eq`
by :func:`as_comparator`, so matching only ever deals with comparators.
"""

from __future__ import annotations

import abc
import re
import typing as t


class Comparator(abc.ABC):
    """Callable returning ``True`` when an actual argument matches."""

    @abc.abstractmethod
    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""


class Any(Comparator):
    """Match any value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


class Eq(Comparator):
    """Match values equal to ``expected``."""

    def __init__(self, expected: object) -> None:
        self.expected = expected

    def __call__(self, value: object) -> bool:
        """Return ``True`` when ``value == expected``."""
        return bool(self.expected == value)

    def __repr__(self) -> str:
        """Return the literal's own representation."""
        return repr(self.expected)


class IsA(Comparator):
    """Match instances of ``typ``."""

    def __init__(self, typ: type | tuple[type, ...]) -> None:
        self.typ = typ

    def __call__(self, value: object) -> bool:
        """Return ``True`` when ``value`` is an instance of ``typ``."""
        return isinstance(value, self.typ)

    def __repr__(self) -> str:
        """Return a debug representation."""
        if isinstance(self.typ, tuple):
            names = ", ".join(typ.__name__ for typ in self.typ)
            return f"IsA(({names}))"
        return f"IsA({self.typ.__name__})"


class Regex(Comparator):
    """Match strings in which ``pattern`` is found."""

    def __init__(self, pattern: str) -> None:
        self._pattern = re.compile(pattern)

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* is a string the regex matches."""
        return isinstance(value, str) and bool(self._pattern.search(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex({self._pattern.pattern!r})"


class Contains(Comparator):
    """Match containers holding ``item``."""

    def __init__(self, item: object) -> None:
        self.item = item

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value  # type: ignore[operator]
        except TypeError:
            # *value* does not support membership tests
            return False

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Contains({self.item!r})"


class StartsWith(Comparator):
    """Match strings beginning with ``prefix``."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* is a string starting with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"StartsWith({self.prefix!r})"


class Predicate(Comparator):
    """Use a custom ``func`` to determine a match."""

    def __init__(self, func: t.Callable[[t.Any], object]) -> None:
        self.func = func

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        name = getattr(self.func, "__qualname__", None) or repr(self.func)
        return f"Predicate({name})"


def as_comparator(expected: object) -> Comparator:
    """Return *expected* unchanged if it is a comparator, else wrap it in ``Eq``."""
    if isinstance(expected, Comparator):
        return expected
    return Eq(expected)


__all__ = [
    "Any",
    "Comparator",
    "Contains",
    "Eq",
    "IsA",
    "Predicate",
    "Regex",
    "StartsWith",
    "as_comparator",
]
