"""Custom exception hierarchy for the Orion client."""
from __future__ import annotations

from typing import Any

DOMAIN_CONFIGURATION_HINT = (
    "Please ensure that SANCTUM_STATEFUL_DOMAINS and SESSION_DOMAIN environment "
    "variables are configured correctly on the API side."
)


class OrionError(RuntimeError):
    """Base error for Orion client failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ConfigurationError(OrionError):
    """Raised when an operation is invalid for the current configuration."""


class RequestError(OrionError):
    """Raised when an HTTP request cannot be fulfilled."""


class UnexpectedResponseError(OrionError):
    """Raised when the API returns an unexpected payload structure."""


class CsrfError(OrionError):
    """Base error for CSRF cookie handshake failures."""


class CsrfNetworkError(CsrfError):
    """Raised when the CSRF cookie request never completed."""


class CsrfCookieMissingError(CsrfError):
    """Raised when the CSRF cookie request completed without setting the cookie."""
