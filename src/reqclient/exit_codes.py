"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~reqclient.exceptions.RequestClientError` subclass.
Shell wrappers can inspect the exit code of the ``reqclient`` command to
determine the failure class without parsing stderr.

Example::

    $ reqclient get https://api.example.com/missing
    $ echo $?
    5   # EXIT_HTTP_ERROR -- the server answered with a non-2xx status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (bad header, param, or JSON body)."""

EXIT_HTTP_ERROR = 5
"""The server answered with a non-2xx status after all retries were used."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_ABORTED = 8
"""The request was cancelled before it completed."""

EXIT_TRANSPORT_UNAVAILABLE = 9
"""No usable request transport could be constructed."""
