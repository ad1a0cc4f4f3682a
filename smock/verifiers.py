"""Diagnostic formatting for failed expectations."""

from __future__ import annotations

import typing as t
from textwrap import indent

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .doubles import Call


def format_args(call: Call) -> str:
    """Return the arguments of *call* as they would appear in source."""
    parts = [repr(arg) for arg in call.args]
    parts.extend(f"{key}={value!r}" for key, value in call.kwargs.items())
    return ", ".join(parts)


def describe_call(name: str, call: Call) -> str:
    """Return ``name(args)`` for *call*."""
    return f"{name}({format_args(call)})"


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    return "\n".join(
        f"{index}) {entry}" for index, entry in enumerate(entries, start=start)
    )


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def describe_unfulfilled(
    name: str,
    *,
    count_description: str,
    args_description: str | None,
    matching: int,
    calls: t.Sequence[Call],
) -> str:
    """Return the message for an expectation whose count was not met.

    The transcript lists every call the mock received, not only the ones
    the expectation's argument matcher accepted.
    """
    title = f"expected {name} to be called {count_description}"
    if args_description is not None:
        title += f" with ({args_description})"
    title += f", but that happened {matching} times."
    transcript = [describe_call(name, call) for call in calls]
    return _format_sections(
        title, [("All calls were", _numbered(transcript) if transcript else "")]
    )


__all__ = ["describe_call", "describe_unfulfilled", "format_args"]
