"""Orion API client configuration entrypoints."""
from .auth.modes import AuthMode
from .config import RequestConfig
from .exceptions import (
    ConfigurationError,
    CsrfCookieMissingError,
    CsrfError,
    CsrfNetworkError,
    OrionError,
)
from .http import HttpClient, Transport
from .registry import Orion

# Process-wide registry; call ``orion.init(...)`` before building clients.
orion = Orion()

__all__ = [
    "AuthMode",
    "ConfigurationError",
    "CsrfCookieMissingError",
    "CsrfError",
    "CsrfNetworkError",
    "HttpClient",
    "Orion",
    "OrionError",
    "RequestConfig",
    "Transport",
    "orion",
]
