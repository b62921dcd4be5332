"""Configuration helpers for the Orion client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .auth.bearer import BearerAuth
from .auth.modes import AuthMode

DEFAULT_PREFIX = "api"
CSRF_COOKIE_PATH = "sanctum/csrf-cookie"

ENV_BASE_URL = "ORION_BASE_URL"
ENV_PREFIX = "ORION_PREFIX"
ENV_AUTH_MODE = "ORION_AUTH_MODE"
ENV_TOKEN = "ORION_TOKEN"


@dataclass(frozen=True, slots=True)
class RequestConfig:
    """Per-request settings derived from the auth mode and token."""

    with_credentials: bool = False
    headers: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if self.headers is not None:
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def __hash__(self) -> int:
        headers = frozenset(self.headers.items()) if self.headers is not None else None
        return hash((self.with_credentials, headers))

    def resolved_headers(self, *, json_body: bool = False) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"
        if self.headers:
            headers.update(self.headers)
        return headers


def build_request_config(auth_mode: AuthMode, token: str | None) -> RequestConfig:
    """Derive a fresh `RequestConfig`; the header field is omitted without a token."""

    headers: dict[str, str] | None = None
    if token:
        headers = {}
        BearerAuth(token).apply(headers)
    return RequestConfig(
        with_credentials=auth_mode is AuthMode.STATEFUL_SESSION,
        headers=headers,
    )
