"""Pluggable request transports.

:class:`~reqclient.transport.base.Transport` and
:class:`~reqclient.transport.base.TransportHandle` describe the capability
set the client consumes (open, set header, set timeout, send, progress,
abort, read status/headers/body). :class:`HttpxTransport` is the default
implementation.
"""

from __future__ import annotations

from reqclient.exceptions import TransportUnavailableError
from reqclient.transport.base import Body, Transport, TransportHandle
from reqclient.transport.httpx_transport import HttpxTransport, HttpxTransportHandle


def create_default_transport() -> Transport:
    """Build the default :class:`HttpxTransport`.

    Raises:
        TransportUnavailableError: If the httpx client cannot be constructed
            (for example an unusable SSL context on this platform).
    """
    try:
        return HttpxTransport()
    except Exception as exc:
        raise TransportUnavailableError(f"No compatible transport available: {exc}") from exc


__all__ = [
    "Body",
    "HttpxTransport",
    "HttpxTransportHandle",
    "Transport",
    "TransportHandle",
    "create_default_transport",
]
