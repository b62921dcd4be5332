"""HTTP utilities for Orion API access."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping
from dataclasses import dataclass
from http.cookiejar import Cookie
from typing import Any
from urllib.parse import unquote, urljoin, urlparse

import requests
from requests import Response, Session

from .config import RequestConfig
from .exceptions import RequestError, UnexpectedResponseError

logger = logging.getLogger(__name__)

DEFAULT_XSRF_COOKIE_NAME = "XSRF-TOKEN"
DEFAULT_XSRF_HEADER_NAME = "X-XSRF-TOKEN"
DEFAULT_TIMEOUT = 30.0


class Transport(Session):
    """Cookie-aware session used to issue Orion requests."""

    def __init__(
        self,
        *,
        xsrf_cookie_name: str = DEFAULT_XSRF_COOKIE_NAME,
        xsrf_header_name: str = DEFAULT_XSRF_HEADER_NAME,
        timeout: float | tuple[float, float] | None = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__()
        self.xsrf_cookie_name = xsrf_cookie_name
        self.xsrf_header_name = xsrf_header_name
        self.timeout = timeout


def xsrf_cookie_name(transport: Session) -> str:
    return getattr(transport, "xsrf_cookie_name", None) or DEFAULT_XSRF_COOKIE_NAME


def xsrf_header_name(transport: Session) -> str:
    return getattr(transport, "xsrf_header_name", None) or DEFAULT_XSRF_HEADER_NAME


def cookie_string(cookies: Iterable[Cookie]) -> str:
    """Render a cookie jar as a ``name=value; name=value`` string."""

    return "; ".join(f"{cookie.name}={cookie.value}" for cookie in cookies)


def find_cookie(cookies: str, name: str) -> str | None:
    """Look up a cookie value by exact name in a semicolon-delimited string."""

    for chunk in cookies.split(";"):
        key, sep, value = chunk.strip().partition("=")
        if sep and key == name:
            return value
    return None


@dataclass(slots=True)
class HttpResponse:
    """Typed response wrapper with helper accessors."""

    status_code: int
    data: Any
    headers: Mapping[str, str]


def ensure_success(response: Response) -> None:
    """Raise `RequestError` if the response signals a failure."""

    if 200 <= response.status_code < 300:
        return
    message = f"Orion API error {response.status_code}: {response.text[:200]}"
    raise RequestError(message, status_code=response.status_code, details=response.text)


def parse_json(response: Response) -> Any:
    """Parse JSON with helpful error context."""

    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedResponseError(
            "Response did not contain valid JSON", status_code=response.status_code
        ) from exc


def request(
    session: Session,
    method: str,
    url: str,
    *,
    params: Mapping[str, str] | None = None,
    headers: MutableMapping[str, str] | None = None,
    json_payload: Mapping[str, Any] | None = None,
    expect_json: bool = True,
    timeout: float | tuple[float, float] | None = None,
    with_credentials: bool = True,
) -> HttpResponse:
    """Make a request and return a parsed response envelope.

    Without credentials the request is prepared outside the session so that
    none of the stored cookies are attached to it.
    """

    if with_credentials:
        response = session.request(
            method=method,
            url=url,
            params=params,
            headers=headers,
            json=json_payload,
            timeout=timeout,
        )
    else:
        prepared = requests.Request(
            method=method.upper(),
            url=url,
            params=params,
            headers=headers,
            json=json_payload,
        ).prepare()
        response = session.send(prepared, timeout=timeout)
    ensure_success(response)

    data: Any = None
    if response.content:
        data = parse_json(response) if expect_json else response.text

    return HttpResponse(status_code=response.status_code, data=data, headers=response.headers)


class HttpClient:
    """Bind a base URL to a transport and issue requests against it."""

    def __init__(self, base_url: str, transport: Session) -> None:
        self._base_url = base_url
        self._transport = transport

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    def get_transport(self) -> Session:
        return self._transport

    def url_for(self, path: str, *, base_url: str | None = None) -> str:
        parsed = urlparse(path)
        if parsed.scheme and parsed.netloc:
            return path
        base = base_url or self._base_url
        if not base.endswith("/"):
            base = f"{base}/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        config: RequestConfig | None = None,
        params: Mapping[str, str] | None = None,
        json_payload: Mapping[str, Any] | None = None,
        base_url: str | None = None,
        expect_json: bool = True,
    ) -> HttpResponse:
        config = config or RequestConfig()
        url = self.url_for(path, base_url=base_url)
        headers = config.resolved_headers(json_body=json_payload is not None)
        if config.with_credentials:
            self._apply_xsrf_header(headers)
        logger.info(
            "Orion request %s %s (credentials=%s)",
            method.upper(),
            url,
            config.with_credentials,
        )
        try:
            return request(
                self._transport,
                method,
                url,
                params=params,
                headers=headers,
                json_payload=json_payload,
                expect_json=expect_json,
                timeout=getattr(self._transport, "timeout", DEFAULT_TIMEOUT),
                with_credentials=config.with_credentials,
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise RequestError(
                f"Failed to communicate with Orion API: {reason}", details=reason
            ) from exc

    def close(self) -> None:
        self._transport.close()

    def _apply_xsrf_header(self, headers: MutableMapping[str, str]) -> None:
        token = find_cookie(
            cookie_string(self._transport.cookies), xsrf_cookie_name(self._transport)
        )
        if token is not None:
            headers.setdefault(xsrf_header_name(self._transport), unquote(token))
