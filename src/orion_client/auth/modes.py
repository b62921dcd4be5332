"""Supported authentication modes."""
from __future__ import annotations

from enum import Enum


class AuthMode(str, Enum):
    """How requests authenticate against the API.

    ``DEFAULT`` relies on a bearer token alone. ``STATEFUL_SESSION`` uses
    Laravel Sanctum's cookie based session, which sends credentials with
    every request and requires a CSRF cookie handshake first.
    """

    DEFAULT = "default"
    STATEFUL_SESSION = "sanctum"

    def __str__(self) -> str:
        return self.value
