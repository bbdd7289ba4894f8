"""Response normalization and the bridge to the output system.

:func:`normalize_response` turns a completed
:class:`~reqclient.transport.base.TransportHandle` into a :class:`Response`:
status, status text, body (JSON-decoded when the server says it is JSON),
a lower-cased header mapping, and the handle itself for advanced access.

:func:`format_api_response` is used by the CLI after a call completes: it
writes the status line to stderr and routes the body through
:meth:`~reqclient.output.OutputManager.format_response`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from reqclient.output import get_output
from reqclient.transport.base import TransportHandle


@dataclass
class Response:
    """A normalized HTTP response.

    Response interceptors receive and return instances of this class; they
    may mutate it in place or build a new one.

    Attributes:
        status: HTTP status code.
        status_text: Reason phrase (e.g. ``"OK"``).
        data: Decoded JSON for JSON responses, otherwise the raw body text.
        headers: Response headers keyed by lower-cased name.
        handle: The transport handle the response was read from.
    """

    status: int
    status_text: str = ""
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    handle: Optional[TransportHandle] = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        """``True`` for 2xx statuses."""
        return 200 <= self.status < 300


def normalize_response(handle: TransportHandle) -> Response:
    """Build a :class:`Response` from a handle whose exchange has completed.

    A body that claims to be JSON but does not parse is kept as text and a
    warning is emitted; this is never fatal.
    """
    content_type = handle.get_response_header("Content-Type")
    data: Any = handle.response_text

    if content_type and "application/json" in content_type.lower():
        try:
            data = json.loads(data)
        except ValueError as exc:
            get_output().warning(f"Failed to parse JSON response from {handle.url}: {exc}")

    return Response(
        status=handle.status,
        status_text=handle.status_text,
        data=data,
        headers=parse_headers(handle.get_all_response_headers()),
        handle=handle,
    )


def parse_headers(raw: str) -> dict[str, str]:
    """Parse a CRLF-delimited ``Name: value`` block into a lower-cased mapping.

    Lines without a name are skipped. When a name repeats, the last value
    wins.

    Example::

        >>> parse_headers("Content-Type: application/json\\r\\nX-Id: 7\\r\\n")
        {'content-type': 'application/json', 'x-id': '7'}
    """
    headers: dict[str, str] = {}
    for line in raw.split("\r\n"):
        name, sep, value = line.partition(":")
        name = name.strip()
        if not name or not sep:
            continue
        headers[name.lower()] = value.strip()
    return headers


def format_api_response(response: Response) -> None:
    """Format and print a :class:`Response` using the global output system.

    Writes the status line (e.g. ``HTTP 200 OK``) to stderr via
    :meth:`~reqclient.output.OutputManager.info`, then renders the body to
    stdout via :meth:`~reqclient.output.OutputManager.format_response`.
    Responses with an empty body print nothing to stdout.
    """
    output = get_output()
    output.info(f"HTTP {response.status} {response.status_text}".rstrip())

    content_type = response.headers.get("content-type", "application/json")
    if response.data is None or response.data == "":
        return
    output.format_response(response.data, content_type)
