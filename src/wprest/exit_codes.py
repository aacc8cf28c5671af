"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~wprest.exceptions.WPRestError` subclass.
Shell wrappers around the ``wprest`` command can inspect the exit code to
tell a bad route document from an unreachable site without parsing stderr.

Example::

    $ wprest discover https://example.com
    $ echo $?
    8   # EXIT_DISCOVERY_FAILURE -- no API root link was advertised
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The request builder or command was used incorrectly (bad path, unknown namespace)."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an error status the client could not recover from."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_ROUTE_PARSE_ERROR = 7
"""A route document could not be loaded, parsed, or compiled."""

EXIT_DISCOVERY_FAILURE = 8
"""The API root could not be located from a site URL."""
