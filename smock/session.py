"""Session bookkeeping for substitutions and expectations."""

from __future__ import annotations

import logging
import threading
import typing as t

from .errors import LifecycleError, RestorationError
from .replacement import Replacement

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .expectations import Expectation

logger = logging.getLogger(__name__)

RestoreError = tuple[str, Exception]


class Session:
    """Track every substitution and expectation made during one test.

    At most one session is live in the process, and every thread sees it.
    Sessions cannot be nested; starting a second one while another is live
    raises :class:`~smock.errors.LifecycleError`. Ending a session undoes the
    substitutions in reverse order and then verifies the expectations in the
    order they were created, stopping at the first failure.
    """

    _active: t.ClassVar[Session | None] = None
    _lock: t.ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def get_active(cls) -> Session | None:
        """Return the live session, if any."""
        return Session._active

    @classmethod
    def require_active(cls) -> Session:
        """Return the live session or raise :class:`LifecycleError`."""
        session = cls.get_active()
        if session is None:
            raise LifecycleError(LifecycleError.DEFAULT_MESSAGE)
        return session

    @classmethod
    def start(cls) -> Session:
        """Create a new session and make it the live one."""
        with Session._lock:
            if Session._active is not None:
                msg = "session_start() called while a session is already live"
                raise LifecycleError(msg)
            session = cls()
            Session._active = session
        logger.debug("Started smock session %#x", id(session))
        return session

    @classmethod
    def reset_active(cls) -> None:
        """Restore and discard any live session without verifying it."""
        session = cls.get_active()
        if session is not None:
            session.end(verify=False)

    def __init__(self) -> None:
        self.replacements: list[Replacement] = []
        self.expectations: list[Expectation] = []

    @property
    def is_live(self) -> bool:
        """Return ``True`` while this session is the live one."""
        return type(self).get_active() is self

    def _require_live(self, action: str) -> None:
        if not self.is_live:
            msg = f"Cannot call {action}(): session is not live"
            raise LifecycleError(msg)

    def add_expectation(self, expectation: Expectation) -> None:
        """Register *expectation* for verification when the session ends."""
        self._require_live("add_expectation")
        self.expectations.append(expectation)

    def replace(self, subject: object, name: str, value: object) -> object:
        """Overwrite *name* on *subject* with *value* until the session ends."""
        self._require_live("replace")
        replacement = Replacement.for_member(subject, name)
        self.replacements.append(replacement)
        replacement.apply(value)
        logger.debug(
            "Replaced %s on %r (previously %r)",
            name,
            replacement.owner,
            replacement.prior,
        )
        return value

    def end(self, *, verify: bool = True) -> None:
        """Restore substitutions, optionally verify, and discard the session.

        The session stops being live even when restoration or verification
        raises.
        """
        self._require_live("session_end")
        try:
            self._restore_replacements()
            if verify:
                self._verify_expectations()
        finally:
            with Session._lock:
                Session._active = None
            logger.debug("Ended smock session %#x", id(self))

    def _restore_replacements(self) -> None:
        """Undo substitutions, most recent first."""
        errors: list[RestoreError] = []
        while self.replacements:
            replacement = self.replacements.pop()
            try:
                replacement.restore()
            except Exception as exc:  # noqa: BLE001 - reported together below
                errors.append(
                    (f"{replacement.name} on {replacement.owner!r}: {exc}", exc)
                )
        if errors:
            error_msg = "; ".join(msg for msg, _ in errors)
            logger.error("smock could not restore replaced members: %s", error_msg)
            msg = f"Restoration failed: {error_msg}"
            raise RestorationError(msg) from errors[0][1]

    def _verify_expectations(self) -> None:
        """Verify expectations in creation order; the first failure propagates."""
        for expectation in self.expectations:
            expectation.verify()


def session_start() -> Session:
    """Start a new session; raises if one is already live."""
    return Session.start()


def session_end() -> None:
    """End the live session, restoring substitutions and verifying expectations."""
    session = Session.get_active()
    if session is None:
        msg = "session_end() called before session_start()"
        raise LifecycleError(msg)
    session.end()


__all__ = ["Session", "session_end", "session_start"]
