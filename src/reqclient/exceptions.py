"""Exception hierarchy for reqclient.

All exceptions inherit from :class:`RequestClientError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`reqclient.exit_codes`.
Library callers catch the specific subclasses; the CLI entry point in
:func:`reqclient.app.main` catches ``RequestClientError`` and exits with the
appropriate code.

Subclass hierarchy::

    RequestClientError             (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ConfigError                (exit 1)
    +-- HTTPResponseError          (exit 5)
    +-- NetworkError               (exit 6)
    |   +-- RequestTimeoutError    (exit 6)
    +-- RequestAbortedError        (exit 8)
    +-- TransportUnavailableError  (exit 9)

The transport layer reports its own low-level failures with
:class:`TransportNetworkError`, :class:`TransportTimeoutError` and
:class:`TransportAbortedError`; :class:`~reqclient.client.RequestClient`
translates those into the public classes above.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reqclient.exit_codes import (
    EXIT_ABORTED,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_UNAVAILABLE,
)

if TYPE_CHECKING:
    from reqclient.client.response import Response


class RequestClientError(Exception):
    """Base exception for all reqclient errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`reqclient.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RequestClientError):
    """Raised for malformed CLI input (header or param syntax, unparsable body)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(RequestClientError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE


class HTTPResponseError(RequestClientError):
    """Raised when the server answers with a non-2xx status and retries are exhausted.

    The final response (after every response interceptor ran) is attached
    so callers can inspect the status, headers and body.

    Attributes:
        response: The normalized :class:`~reqclient.client.response.Response`.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, response: Response, message: str | None = None):
        if message is None:
            message = f"HTTP {response.status}"
            if response.status_text:
                message = f"{message} {response.status_text}"
        super().__init__(message)
        self.response = response

    @property
    def status(self) -> int:
        """Shortcut for ``self.response.status``."""
        return self.response.status


class NetworkError(RequestClientError):
    """Raised when the request never reached the server or no reply came back.

    Network failures are not retried.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RequestTimeoutError(NetworkError):
    """Raised when the transport gives up after the configured timeout."""


class RequestAbortedError(RequestClientError):
    """Raised when a request is cancelled by its token or by ``abort_all()``."""

    exit_code = EXIT_ABORTED


class TransportUnavailableError(RequestClientError):
    """Raised on first use when no compatible transport could be constructed."""

    exit_code = EXIT_TRANSPORT_UNAVAILABLE


# --- Transport-level signals ---


class TransportError(Exception):
    """Base class for failures reported by a :class:`~reqclient.transport.TransportHandle`."""


class TransportNetworkError(TransportError):
    """The transport could not complete the exchange (DNS, refused, reset)."""


class TransportTimeoutError(TransportError):
    """The transport hit its timeout before a response was available."""


class TransportAbortedError(TransportError):
    """The handle was aborted while the exchange was in progress."""
