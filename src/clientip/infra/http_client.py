"""Blocking HTTP client factory and requester on top of ``httpx``.

Pure infra — no resolver imports.

``HttpClientFactory`` turns a handful of settings into an
``httpx.Client``:

* request / connect timeouts in milliseconds (default 5000 each)
* redirects handled by ``HttpRequester`` so circular chains can be refused
* no cookie persistence, no retries
* TLS trust material; by default **any certificate is trusted**

``HttpRequester`` owns the client and its connection pool.  Release it
with ``close()`` or a ``with`` block::

    with HttpClientFactory(connect_timeout_ms=2000).create_requester() as http:
        body = http.get_text("https://example.com/", params={"q": "ip"})
"""

from __future__ import annotations

import logging
import ssl
from collections.abc import Mapping, Sequence
from pathlib import Path
from types import TracebackType
from typing import Any, Optional, Union

import httpx

from clientip.configs.system import HttpClientConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_MAX_REDIRECTS = 20
DEFAULT_CHARSET = "utf-8"

Params = Optional[Union[Mapping[str, Any], Sequence[tuple[str, Any]]]]


class CircularRedirectError(httpx.TooManyRedirects):
    """Raised when a redirect chain revisits a URL and that is not allowed."""


def trust_any_ssl_context() -> ssl.SSLContext:
    """Client context that accepts every certificate and host name."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class HttpClientFactory:
    """Builds ``httpx.Client`` instances.  Not thread-safe; clients are."""

    def __init__(
        self,
        *,
        request_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        connect_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        allow_circular_redirect: bool = False,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        ssl_context: ssl.SSLContext | None = None,
    ) -> None:
        self.request_timeout_ms = request_timeout_ms
        self.connect_timeout_ms = connect_timeout_ms
        self.allow_circular_redirect = allow_circular_redirect
        self.max_redirects = max_redirects
        self.ssl_context = ssl_context

    @classmethod
    def from_config(cls, config: HttpClientConfig) -> HttpClientFactory:
        factory = cls(
            request_timeout_ms=config.request_timeout_ms,
            connect_timeout_ms=config.connect_timeout_ms,
            allow_circular_redirect=config.allow_circular_redirect,
            max_redirects=config.max_redirects,
        )
        if config.ca_bundle is not None:
            factory.set_ca_bundle(config.ca_bundle)
        elif config.verify_tls:
            factory.ssl_context = ssl.create_default_context()
        return factory

    def set_ca_bundle(self, path: str | Path) -> None:
        """Trust only the certificates in the PEM bundle at *path*."""
        self.ssl_context = ssl.create_default_context(cafile=str(path))

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.request_timeout_ms / 1000,
            connect=self.connect_timeout_ms / 1000,
        )

    def create(self, transport: httpx.BaseTransport | None = None) -> httpx.Client:
        """Build a client from the current settings.

        *transport* replaces the network transport (tests pass
        ``httpx.MockTransport``).
        """
        if self.ssl_context is None:
            self.ssl_context = trust_any_ssl_context()
        return httpx.Client(
            timeout=self.timeout,
            verify=self.ssl_context,
            follow_redirects=False,
            max_redirects=self.max_redirects,
            transport=transport,
        )

    def create_requester(
        self, transport: httpx.BaseTransport | None = None
    ) -> HttpRequester:
        return HttpRequester(
            self.create(transport),
            allow_circular_redirect=self.allow_circular_redirect,
            max_redirects=self.max_redirects,
        )


class HttpRequester:
    """Sends requests and reads whole response bodies."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        allow_circular_redirect: bool = False,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self._client = client if client is not None else HttpClientFactory().create()
        self._allow_circular_redirect = allow_circular_redirect
        self._max_redirects = max_redirects

    def __enter__(self) -> HttpRequester:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -----------------------------------------------------------------
    # Convenience methods
    # -----------------------------------------------------------------

    def get(self, url: str, params: Params = None) -> bytes:
        """GET *url*; *params* are appended to any existing query string."""
        return self.request(self._build_get(url, params))

    def get_text(
        self,
        url: str,
        params: Params = None,
        default_encoding: str = DEFAULT_CHARSET,
    ) -> str:
        request = self._build_get(url, params)
        return self.request_text(request, default_encoding)

    def post(self, url: str, data: Params = None) -> bytes:
        """POST *data* as ``application/x-www-form-urlencoded``."""
        return self.request(self._build_post(url, data))

    def post_text(
        self,
        url: str,
        data: Params = None,
        default_encoding: str = DEFAULT_CHARSET,
    ) -> str:
        return self.request_text(self._build_post(url, data), default_encoding)

    # -----------------------------------------------------------------
    # Core
    # -----------------------------------------------------------------

    def request(self, request: httpx.Request) -> bytes:
        return self._send(request).content

    def request_text(
        self, request: httpx.Request, default_encoding: str = DEFAULT_CHARSET
    ) -> str:
        """Body decoded with the response charset, else *default_encoding*."""
        response = self._send(request)
        encoding = response.charset_encoding or default_encoding
        return response.content.decode(encoding, errors="replace")

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def _build_get(self, url: str, params: Params) -> httpx.Request:
        target = httpx.URL(url)
        if params:
            target = target.copy_merge_params(params)
        return self._client.build_request("GET", target)

    def _build_post(self, url: str, data: Params) -> httpx.Request:
        if data is not None and not isinstance(data, Mapping):
            # httpx only form-encodes mappings; keep repeated keys as lists.
            grouped: dict[str, list[Any]] = {}
            for key, value in data:
                grouped.setdefault(key, []).append(value)
            data = grouped
        return self._client.build_request("POST", url, data=data or None)

    def _send(self, request: httpx.Request) -> httpx.Response:
        visited = {str(request.url)}
        redirects = 0
        try:
            response = self._client.send(request)
            while response.next_request is not None:
                next_request = response.next_request
                url = str(next_request.url)
                if url in visited and not self._allow_circular_redirect:
                    raise CircularRedirectError(
                        f"Circular redirect to {url}", request=next_request
                    )
                redirects += 1
                if redirects > self._max_redirects:
                    raise httpx.TooManyRedirects(
                        f"Exceeded maximum allowed redirects ({self._max_redirects})",
                        request=next_request,
                    )
                visited.add(url)
                logger.debug("HTTP redirect %d -> %s", response.status_code, url)
                response = self._client.send(next_request)
        finally:
            self._client.cookies.clear()

        logger.debug(
            "HTTP %s %s -> %d", request.method, request.url, response.status_code
        )
        return response
