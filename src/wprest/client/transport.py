"""Synchronous HTTP transport for request builders, with auth and retry.

Request builders never talk to the network themselves; their verbs hand
the builder to a transport. :class:`HttpTransport` is the default one. It
wraps :class:`httpx.Client` and layers on:

- **Auth injection** -- ``X-WP-Nonce`` when a nonce is set, otherwise HTTP
  basic auth. Reads only send credentials when the request asked for them
  with ``auth()``; writes always send them when present.
- **Custom headers** from the request's options.
- **File uploads** -- ``create()`` on a request with ``file()`` attached is
  sent as multipart form data.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Error mapping** -- 401/403 to :class:`~wprest.exceptions.AuthError`,
  404 to :class:`~wprest.exceptions.NotFoundError`, anything else to
  :class:`~wprest.exceptions.ServerError`.
- **Pagination** -- collection bodies come back as
  :class:`~wprest.client.pagination.PagedList`.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

import httpx

from wprest.client.pagination import extract_response_data, paginate
from wprest.exceptions import AuthError, ConnectionError_, NotFoundError, ServerError
from wprest.models import ClientOptions, RequestConfig
from wprest.request import WPRequest

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """What a request builder needs from whatever sends it."""

    def get(self, request: WPRequest) -> Any: ...

    def head(self, request: WPRequest) -> Any: ...

    def post(self, request: WPRequest, data: Optional[Mapping[str, Any]] = None) -> Any: ...

    def put(self, request: WPRequest, data: Optional[Mapping[str, Any]] = None) -> Any: ...

    def delete(self, request: WPRequest, data: Optional[Mapping[str, Any]] = None) -> Any: ...


class HttpTransport:
    """Default :class:`Transport` backed by :class:`httpx.Client`.

    The underlying client is created on first use and closed by
    :meth:`close` (or on leaving a ``with`` block). Pass *client* to reuse
    an existing :class:`httpx.Client`, which is then left open.

    Args:
        config: Timeout, SSL verification and retry settings.
        client: Optional pre-built client.

    Example::

        with HttpTransport(RequestConfig(max_retries=1)) as transport:
            wp = WPAPI("https://example.com/wp-json", transport=transport)
            posts = wp.posts().get()
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._client = client
        self._owns_client = client is None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._config.timeout,
                verify=self._config.verify_ssl,
                follow_redirects=True,
            )
        return self._client

    # ------------------------------------------------------------------ #
    # Transport verbs
    # ------------------------------------------------------------------ #

    def get(self, request: WPRequest) -> Any:
        """GET *request*; returns the decoded body, paginated when applicable."""
        response = self.send("GET", request)
        return paginate(extract_response_data(response), response, request, self)

    def head(self, request: WPRequest) -> httpx.Headers:
        """HEAD *request*; returns the (case-insensitive) response headers."""
        return self.send("HEAD", request).headers

    def post(self, request: WPRequest, data: Optional[Mapping[str, Any]] = None) -> Any:
        return extract_response_data(self.send("POST", request, data))

    def put(self, request: WPRequest, data: Optional[Mapping[str, Any]] = None) -> Any:
        return extract_response_data(self.send("PUT", request, data))

    def delete(self, request: WPRequest, data: Optional[Mapping[str, Any]] = None) -> Any:
        return extract_response_data(self.send("DELETE", request, data))

    def send(
        self,
        method: str,
        request: WPRequest,
        data: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """Send *request* with *method* and return the raw response.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other error status, after retries for 5xx.
            ConnectionError_: On network / timeout errors after all retries.
        """
        method = method.upper()
        url = request.to_url()
        options = request.options
        headers: dict[str, str] = {"Accept": "application/json", **options.headers}
        auth = _authenticate(options, headers, force=method not in ("GET", "HEAD"))

        kwargs: dict[str, Any] = {"headers": headers}
        if auth is not None:
            kwargs["auth"] = auth
        attachment = request.attachment
        if method == "POST" and attachment is not None:
            kwargs["files"] = {"file": _file_part(*attachment)}
            if data:
                kwargs["data"] = {key: _form_value(value) for key, value in data.items()}
        elif data is not None:
            kwargs["json"] = dict(data)

        response = self._execute_with_retry(method, url, kwargs)
        self._map_response_error(response)
        return response

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _execute_with_retry(
        self,
        method: str,
        url: str,
        kwargs: dict[str, Any],
    ) -> httpx.Response:
        """Execute the HTTP request with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        max_retries = self._config.max_retries
        client = self._http()

        for attempt in range(max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    logger.debug(
                        "Connection error: %s, retrying in %ss (attempt %d/%d)",
                        exc, delay, attempt + 1, max_retries,
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                logger.debug(
                    "Server error %d, retrying in %ss (attempt %d/%d)",
                    response.status_code, delay, attempt + 1, max_retries,
                )
                time.sleep(delay)
                continue

            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        detail = extract_response_data(response)
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("code") or ""
        else:
            msg = str(detail)[:200] if detail else ""

        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg, status_code=status, body=detail)


def _authenticate(
    options: ClientOptions,
    headers: dict[str, str],
    force: bool,
) -> Optional[httpx.BasicAuth]:
    """Add nonce auth to *headers*, or return basic auth credentials."""
    if not force and not options.auth and not options.nonce:
        return None
    if options.nonce:
        headers["X-WP-Nonce"] = options.nonce
        return None
    if not options.username or not options.password:
        return None
    return httpx.BasicAuth(options.username, options.password)


def _file_part(file: Any, name: Optional[str]) -> Any:
    if isinstance(file, (str, Path)):
        path = Path(file)
        return (name or path.name, path.read_bytes())
    return (name or "file", file)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
