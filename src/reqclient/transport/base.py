"""Abstract transport capability consumed by :class:`~reqclient.client.RequestClient`.

The client never talks to the network directly. For every attempt it asks
its :class:`Transport` for a fresh :class:`TransportHandle`, configures it
(method, URL, headers, timeout, progress listeners), sends the body and
then reads status, headers and body text back from the same handle.

Any object that implements this interface can be plugged in -- the bundled
:class:`~reqclient.transport.httpx_transport.HttpxTransport` is the default.

Example:
    Minimal transport that always answers ``204``::

        class NoContentHandle(TransportHandle):
            async def send(self, body):
                self.status = 204
                self.status_text = "No Content"

            def abort(self):
                self.aborted = True

        class NoContentTransport(Transport):
            def open_handle(self):
                return NoContentHandle()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Union

from reqclient.models import DEFAULT_TIMEOUT_MS, ProgressCallback

Body = Union[str, bytes, None]


class TransportHandle(ABC):
    """A single request/response exchange.

    A handle is used for exactly one attempt. After :meth:`send` returns
    normally the response accessors are populated. :meth:`send` signals
    failures by raising :class:`~reqclient.exceptions.TransportNetworkError`,
    :class:`~reqclient.exceptions.TransportTimeoutError` or, after
    :meth:`abort`, :class:`~reqclient.exceptions.TransportAbortedError`.

    Attributes:
        method: HTTP method set by :meth:`open`.
        url: Absolute request URL set by :meth:`open`.
        timeout: Budget in milliseconds for the whole exchange, from
            connecting to the last body byte.
        on_upload_progress: Called as the request body is written.
        on_download_progress: Called as the response body is read.
        status: Response status code; ``0`` until a response arrives.
        status_text: Response reason phrase.
        response_text: Decoded response body.
        aborted: Set once :meth:`abort` has been called.
    """

    def __init__(self) -> None:
        self.method = "GET"
        self.url = ""
        self.timeout: int = DEFAULT_TIMEOUT_MS
        self.on_upload_progress: Optional[ProgressCallback] = None
        self.on_download_progress: Optional[ProgressCallback] = None
        self.status = 0
        self.status_text = ""
        self.response_text = ""
        self.aborted = False
        self._request_headers: dict[str, str] = {}
        self._response_headers: list[tuple[str, str]] = []

    def open(self, method: str, url: str) -> None:
        """Prepare the handle for *method* against *url*."""
        self.method = method.upper()
        self.url = url

    def set_header(self, name: str, value: str) -> None:
        """Set one outgoing request header, replacing any previous value."""
        self._request_headers[name] = value

    @property
    def request_headers(self) -> dict[str, str]:
        """A copy of the headers that will be sent."""
        return dict(self._request_headers)

    @abstractmethod
    async def send(self, body: Body) -> None:
        """Send the request and wait until the response is available."""
        ...

    @abstractmethod
    def abort(self) -> None:
        """Cancel the exchange. A pending :meth:`send` raises ``TransportAbortedError``."""
        ...

    def get_response_header(self, name: str) -> Optional[str]:
        """Return the first response header called *name* (case-insensitive)."""
        wanted = name.lower()
        for key, value in self._response_headers:
            if key.lower() == wanted:
                return value
        return None

    def get_all_response_headers(self) -> str:
        """Return the raw header block, one ``Name: value`` per CRLF-terminated line."""
        return "".join(f"{key}: {value}\r\n" for key, value in self._response_headers)


class Transport(ABC):
    """Factory for :class:`TransportHandle` objects."""

    @abstractmethod
    def open_handle(self) -> TransportHandle:
        """Return a new, unopened handle."""
        ...

    async def aclose(self) -> None:
        """Release any pooled resources. The default implementation does nothing."""
        return None
