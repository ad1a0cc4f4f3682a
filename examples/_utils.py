"""Small application code exercised by the runnable examples."""

from __future__ import annotations

import time


class Mailer:
    """Sends mail through a real transport in production."""

    def send(self, to: str, subject: str) -> bool:
        msg = "no network access in examples"
        raise RuntimeError(msg)


class UserRepository:
    """Stores users; the examples never touch real storage."""

    def exists(self, email: str) -> bool:
        raise NotImplementedError

    def add(self, email: str) -> int:
        raise NotImplementedError


def register_user(repo: UserRepository, mailer: Mailer, email: str) -> int | None:
    """Add *email* unless already present and send a welcome message."""
    if repo.exists(email):
        return None
    user_id = repo.add(email)
    mailer.send(email, subject="Welcome")
    return user_id


def stamp() -> str:
    """Return the current time as an ISO-like string."""
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime())
