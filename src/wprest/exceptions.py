"""Exception hierarchy for wprest.

All exceptions inherit from :class:`WPRestError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`wprest.exit_codes`.
Library callers catch the specific subclasses; the ``wprest`` command line
entry point in :func:`wprest.app.main` catches ``WPRestError`` and exits with
the appropriate code.

Subclass hierarchy::

    WPRestError (exit 1)
    +-- InvalidUsageError         (exit 2)
    |   +-- InvalidPathError
    |   +-- IncompletePathError
    |   +-- UnsupportedMethodError
    |   +-- NamespaceError
    +-- AuthError                 (exit 3)
    +-- NotFoundError             (exit 4)
    +-- ServerError               (exit 5)
    +-- ConnectionError_          (exit 6)
    +-- RouteParseError           (exit 7)
    +-- DiscoveryError            (exit 8)
    +-- ConfigError               (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from wprest.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DISCOVERY_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_ROUTE_PARSE_ERROR,
    EXIT_SERVER_ERROR,
)


class WPRestError(Exception):
    """Base exception for all wprest errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`wprest.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(WPRestError):
    """Raised when a request builder or the client is used incorrectly."""

    exit_code = EXIT_INVALID_USAGE


class InvalidPathError(InvalidUsageError):
    """Raised when a path slot value does not match any component accepted at its level."""


class IncompletePathError(InvalidUsageError):
    """Raised when a request path skips a level that a deeper slot depends on."""


class UnsupportedMethodError(InvalidUsageError):
    """Raised when an HTTP verb is not in the builder's allowed-method set.

    Attributes:
        method: The rejected lower-case method name.
        supported: The methods the endpoint does accept.
    """

    def __init__(self, method: str, supported: tuple[str, ...] | list[str]):
        self.method = method
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported method; supported methods are: {', '.join(self.supported)}"
        )


class NamespaceError(InvalidUsageError):
    """Raised when a namespace was never bootstrapped on the client."""


class AuthError(WPRestError):
    """Raised when the API rejects the credentials (HTTP 401 / 403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(WPRestError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(WPRestError):
    """Raised when the API returns an error status other than 401, 403 or 404.

    Attributes:
        status_code: The HTTP status, when one was received.
        body: The decoded error payload, when one was received.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ConnectionError_(WPRestError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RouteParseError(WPRestError):
    """Raised when a route document cannot be loaded, validated, or compiled."""

    exit_code = EXIT_ROUTE_PARSE_ERROR


class DiscoveryError(WPRestError):
    """Raised when autodiscovery cannot locate an API root for a site."""

    exit_code = EXIT_DISCOVERY_FAILURE


class ConfigError(WPRestError):
    """Raised for configuration problems (invalid project file, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
