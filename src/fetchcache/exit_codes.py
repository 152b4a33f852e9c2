"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a fetch failure category and is referenced by the
corresponding :class:`~fetchcache.exceptions.FetchcacheError` subclass.
Shell wrappers can inspect the exit code to tell a timeout from a 404
without parsing stderr.

Example::

    $ fetchcache get https://example.com/missing
    $ echo $?
    5   # EXIT_HTTP_STATUS -- the server answered with a non-2xx status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments, including unsupported URLs."""

EXIT_HTTP_STATUS = 5
"""The server returned a non-2xx HTTP status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_EMPTY_CONTENT = 7
"""The server answered successfully but the body was empty."""
