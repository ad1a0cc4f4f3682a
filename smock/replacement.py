"""Reversible substitution of members on real objects."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .errors import ResolutionError


class _Absent:
    """Marker for a member that did not exist before substitution."""

    def __repr__(self) -> str:
        return "<absent>"


ABSENT: t.Final = _Absent()


def definition_chain(subject: object) -> t.Iterator[object]:
    """Yield *subject* followed by the classes it inherits members from.

    For a class the chain is its MRO; for anything else it is the object
    itself followed by its type's MRO. The chain always ends with ``object``.
    """
    if isinstance(subject, type):
        yield from subject.__mro__
        return
    yield subject
    yield from type(subject).__mro__


def _own_members(candidate: object) -> t.Mapping[str, t.Any]:
    return getattr(candidate, "__dict__", None) or {}


def find_owner(subject: object, name: str) -> object | None:
    """Return the nearest object along the chain that defines *name* itself.

    Returns ``None`` when *name* is not reachable from *subject* at all.

    Raises
    ------
    ResolutionError
        When *name* resolves on *subject* but nothing short of ``object``
        defines it, e.g. it is inherited from ``object`` or produced by
        ``__getattr__``.
    """
    if not hasattr(subject, name):
        return None
    for candidate in definition_chain(subject):
        if candidate is object:
            break
        if name in _own_members(candidate):
            return candidate
    msg = f"can't determine owner of property: {name!r} on {subject!r}"
    raise ResolutionError(msg)


@dc.dataclass(frozen=True, slots=True)
class Replacement:
    """A member overwritten on ``owner``, with its previous raw value."""

    owner: object
    name: str
    prior: t.Any

    @classmethod
    def for_member(cls, subject: object, name: str) -> Replacement:
        """Capture the state needed to later undo a substitution of *name*."""
        owner = find_owner(subject, name)
        if owner is None:
            return cls(subject, name, ABSENT)
        # Raw value, so descriptors such as staticmethod survive restoration.
        return cls(owner, name, _own_members(owner)[name])

    def apply(self, value: object) -> None:
        """Install *value* on the owner."""
        setattr(self.owner, self.name, value)

    def restore(self) -> None:
        """Put the owner back into the state captured by :meth:`for_member`."""
        if self.prior is ABSENT:
            delattr(self.owner, self.name)
        else:
            setattr(self.owner, self.name, self.prior)


__all__ = ["ABSENT", "Replacement", "definition_chain", "find_owner"]
