"""Shared validation helpers."""

from __future__ import annotations


def validate_call_count(count: int) -> None:
    """Ensure *count* is usable as an expected number of calls."""
    if isinstance(count, bool) or not isinstance(count, int):
        msg = f"call count must be an int, got {type(count).__name__}"
        raise TypeError(msg)

    if count < 0:
        msg = f"call count must be >= 0, got {count}"
        raise ValueError(msg)
