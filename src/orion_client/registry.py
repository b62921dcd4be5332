"""Connection registry, HTTP client factory and CSRF handshake."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Mapping

from requests import Session
from requests.cookies import RequestsCookieJar

from .auth.modes import AuthMode
from .config import (
    CSRF_COOKIE_PATH,
    DEFAULT_PREFIX,
    ENV_AUTH_MODE,
    ENV_BASE_URL,
    ENV_PREFIX,
    ENV_TOKEN,
    RequestConfig,
    build_request_config,
)
from .exceptions import (
    DOMAIN_CONFIGURATION_HINT,
    ConfigurationError,
    CsrfCookieMissingError,
    CsrfNetworkError,
)
from .http import HttpClient, Transport, cookie_string, find_cookie, xsrf_cookie_name

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], Session]


def coerce_auth_mode(value: AuthMode | str, *, source: str = "auth mode") -> AuthMode:
    """Accept an `AuthMode` or its value in any letter case."""

    if isinstance(value, AuthMode):
        return value
    try:
        return AuthMode(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(mode.value for mode in AuthMode)
        raise ConfigurationError(
            f"{source}={value!r} is not supported (expected one of: {choices})."
        ) from None


class Orion:
    """Hold connection settings and build HTTP clients from them.

    `init` must be called before any client is built. Every change to the
    token or auth mode replaces the derived request configuration.
    """

    def __init__(self, *, transport_factory: TransportFactory | None = None) -> None:
        self._base_url: str | None = None
        self._prefix = DEFAULT_PREFIX
        self._auth_mode = AuthMode.DEFAULT
        self._token: str | None = None
        self._transport_factory = transport_factory
        self._cookies = RequestsCookieJar()
        self._http_client_config = self.build_http_client_config()

    # Setup -------------------------------------------------------------------
    def init(
        self,
        base_url: str,
        prefix: str = DEFAULT_PREFIX,
        auth_mode: AuthMode | str = AuthMode.DEFAULT,
        token: str | None = None,
    ) -> Orion:
        self.set_base_url(base_url)
        if token:
            self._token = token
        self._prefix = prefix
        self._auth_mode = coerce_auth_mode(auth_mode)
        self._http_client_config = self.build_http_client_config()
        return self

    def init_from_env(self, environ: Mapping[str, str] | None = None) -> Orion:
        env = os.environ if environ is None else environ
        base_url = env.get(ENV_BASE_URL)
        if not base_url:
            raise ConfigurationError(f"{ENV_BASE_URL} must be set to initialize Orion.")
        auth_mode = coerce_auth_mode(
            env.get(ENV_AUTH_MODE) or AuthMode.DEFAULT, source=ENV_AUTH_MODE
        )
        return self.init(
            base_url,
            prefix=env.get(ENV_PREFIX, DEFAULT_PREFIX),
            auth_mode=auth_mode,
            token=env.get(ENV_TOKEN) or None,
        )

    # Connection parameters ---------------------------------------------------
    def set_base_url(self, base_url: str) -> Orion:
        self._base_url = base_url
        return self

    def get_base_url(self) -> str:
        if self._base_url is None:
            raise ConfigurationError("Orion.init() must be called before using the base URL.")
        return self._base_url if self._base_url.endswith("/") else f"{self._base_url}/"

    def set_prefix(self, prefix: str) -> Orion:
        self._prefix = prefix
        return self

    def get_prefix(self) -> str:
        return self._prefix

    def get_api_url(self) -> str:
        return self.get_base_url() + self.get_prefix()

    # Authentication ------------------------------------------------------------
    def set_auth_mode(self, auth_mode: AuthMode | str) -> Orion:
        self._auth_mode = coerce_auth_mode(auth_mode)
        self._http_client_config = self.build_http_client_config()
        return self

    def get_auth_mode(self) -> AuthMode:
        return self._auth_mode

    def set_token(self, token: str) -> Orion:
        self._token = token
        self._http_client_config = self.build_http_client_config()
        return self

    def without_token(self) -> Orion:
        self._token = None
        self._http_client_config = self.build_http_client_config()
        return self

    def get_token(self) -> str | None:
        return self._token

    # Request configuration ---------------------------------------------------
    def get_http_client_config(self) -> RequestConfig:
        return self._http_client_config

    def set_http_client_config(self, config: RequestConfig) -> Orion:
        # Replaced again by the next token or auth mode change.
        self._http_client_config = config
        return self

    def build_http_client_config(self) -> RequestConfig:
        return build_request_config(self._auth_mode, self._token)

    # Client factory ------------------------------------------------------------
    def make_http_client_using(self, callback: TransportFactory | None) -> Orion:
        self._transport_factory = callback
        return self

    def make_http_client(self, base_url: str | None = None, with_prefix: bool = True) -> HttpClient:
        if not base_url:
            base_url = self.get_api_url() if with_prefix else self.get_base_url()
        transport = self._transport_factory() if self._transport_factory else Transport()
        # Every transport shares the registry's cookie jar.
        transport.cookies = self._cookies
        return HttpClient(base_url, transport)

    def get_cookies(self) -> RequestsCookieJar:
        return self._cookies

    # CSRF handshake ------------------------------------------------------------
    async def csrf(self, client: HttpClient | None = None) -> None:
        """Fetch the Sanctum CSRF cookie into the shared cookie jar.

        Clients built by `make_http_client` afterwards send the cookie and
        its ``X-XSRF-TOKEN`` header on credentialed requests. Raises
        `ConfigurationError` outside stateful session mode,
        `CsrfNetworkError` when the request does not complete and
        `CsrfCookieMissingError` when the response did not set the cookie.
        """

        auth_mode = self._auth_mode
        if auth_mode is not AuthMode.STATEFUL_SESSION:
            raise ConfigurationError(
                f'Current auth mode is set to "{auth_mode.value}". Fetching CSRF cookie can only '
                f'be used with "{AuthMode.STATEFUL_SESSION.value}" mode.'
            )

        base_url = self.get_base_url()
        http_client = client or self.make_http_client()
        try:
            await self._fetch_csrf_cookie(http_client, base_url)
        finally:
            if client is None:
                http_client.close()

    async def _fetch_csrf_cookie(self, http_client: HttpClient, base_url: str) -> None:
        transport = http_client.get_transport()
        url = http_client.url_for(CSRF_COOKIE_PATH, base_url=base_url)
        logger.debug("Requesting CSRF cookie from %s", url)

        try:
            response = await asyncio.to_thread(
                transport.get, url, timeout=getattr(transport, "timeout", None)
            )
        except Exception:
            raise CsrfNetworkError(
                "Unable to retrieve XSRF token cookie due to network error. "
                + DOMAIN_CONFIGURATION_HINT
            ) from None

        cookies = cookie_string(transport.cookies)
        if find_cookie(cookies, xsrf_cookie_name(transport)) is None:
            logger.warning("Response status: %s", response.status_code)
            logger.warning("Response headers: %s", dict(response.headers))
            logger.warning("Cookies: %s", cookies)
            raise CsrfCookieMissingError(
                "XSRF token cookie is missing in the response. " + DOMAIN_CONFIGURATION_HINT,
                status_code=response.status_code,
            )
