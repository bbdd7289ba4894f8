"""Default transport backed by :class:`httpx.AsyncClient`.

Each :class:`HttpxTransportHandle` runs its exchange in a child task so
that :meth:`~HttpxTransportHandle.abort` can cancel it from outside. The
response is read with ``stream=True`` so that download progress can be
reported chunk by chunk, but the full body is buffered before
:meth:`~HttpxTransportHandle.send` returns. Upload progress is reported
by feeding the body to httpx as an async iterator with an explicit
``Content-Length``.

httpx exceptions are translated to the transport-level signals in
:mod:`reqclient.exceptions`:

* :class:`httpx.TimeoutException` -> :class:`~reqclient.exceptions.TransportTimeoutError`
* any other :class:`httpx.RequestError` (transport failures, redirect
  loops, undecodable bodies) -> :class:`~reqclient.exceptions.TransportNetworkError`

The handle's ``timeout`` bounds the whole exchange, not just each phase.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Optional

import httpx

from reqclient.exceptions import (
    TransportAbortedError,
    TransportNetworkError,
    TransportTimeoutError,
)
from reqclient.models import ProgressEvent
from reqclient.transport.base import Body, Transport, TransportHandle

DEFAULT_CHUNK_SIZE = 64 * 1024


class HttpxTransportHandle(TransportHandle):
    """One request/response exchange over a shared :class:`httpx.AsyncClient`."""

    def __init__(self, client: httpx.AsyncClient, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        super().__init__()
        self._client = client
        self._chunk_size = chunk_size
        self._task: Optional[asyncio.Future[None]] = None

    async def send(self, body: Body) -> None:
        if self.aborted:
            raise TransportAbortedError("Request aborted")

        self._task = asyncio.ensure_future(self._exchange_within_timeout(body))
        try:
            await self._task
        except asyncio.CancelledError:
            if self.aborted:
                raise TransportAbortedError("Request aborted") from None
            raise
        finally:
            self._task = None

    def abort(self) -> None:
        if self.aborted:
            return
        self.aborted = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _exchange_within_timeout(self, body: Body) -> None:
        """Run :meth:`_exchange` under one overall deadline.

        httpx timeouts apply per phase (connect, read, write, pool), so a
        body that trickles in could otherwise outlive :attr:`timeout`.
        """
        try:
            await asyncio.wait_for(self._exchange(body), timeout=self.timeout / 1000)
        except asyncio.TimeoutError as exc:
            raise TransportTimeoutError(f"Request timeout after {self.timeout}ms") from exc

    async def _exchange(self, body: Body) -> None:
        content: Optional[bytes] = body.encode("utf-8") if isinstance(body, str) else body
        headers = dict(self._request_headers)
        stream_content: Optional[AsyncIterator[bytes]] = None
        if content and self.on_upload_progress is not None:
            headers.setdefault("Content-Length", str(len(content)))
            stream_content = self._upload_stream(content)

        request = self._client.build_request(
            self.method,
            self.url,
            headers=headers,
            content=stream_content if stream_content is not None else content,
            timeout=httpx.Timeout(self.timeout / 1000),
        )

        try:
            response = await self._client.send(request, stream=True)
            try:
                raw = await self._read_body(response)
            finally:
                await response.aclose()
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(f"Request timeout after {self.timeout}ms") from exc
        except httpx.TransportError as exc:
            raise TransportNetworkError(f"Network Error: {exc}") from exc
        except httpx.RequestError as exc:
            # Redirect loops and undecodable bodies
            raise TransportNetworkError(f"Network Error: {exc}") from exc

        self.status = response.status_code
        self.status_text = response.reason_phrase
        self._response_headers = [
            (key.decode("latin-1"), value.decode("latin-1"))
            for key, value in response.headers.raw
        ]
        self.response_text = raw.decode(response.encoding or "utf-8", errors="replace")

    async def _read_body(self, response: httpx.Response) -> bytes:
        """Buffer the streamed body, reporting download progress per chunk."""
        total = _content_length(response)
        loaded = 0
        chunks: list[bytes] = []
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            loaded += len(chunk)
            if self.on_download_progress is not None:
                self.on_download_progress(
                    ProgressEvent(
                        loaded=loaded,
                        total=total,
                        length_computable=total > 0,
                        direction="download",
                    )
                )
        return b"".join(chunks)

    async def _upload_stream(self, content: bytes) -> AsyncIterator[bytes]:
        total = len(content)
        loaded = 0
        for start in range(0, total, self._chunk_size):
            chunk = content[start:start + self._chunk_size]
            loaded += len(chunk)
            if self.on_upload_progress is not None:
                self.on_upload_progress(
                    ProgressEvent(
                        loaded=loaded,
                        total=total,
                        length_computable=True,
                        direction="upload",
                    )
                )
            yield chunk


class HttpxTransport(Transport):
    """:class:`~reqclient.transport.base.Transport` built on :class:`httpx.AsyncClient`.

    Args:
        client: An existing client to share. When omitted a new one is
            created and closed again by :meth:`aclose`.
        transport: Optional low-level httpx transport for the created
            client, e.g. :class:`httpx.MockTransport` in tests.
        verify: Verify TLS certificates.
        follow_redirects: Follow 3xx responses transparently.

    Example::

        transport = HttpxTransport(transport=httpx.MockTransport(handler))
        client = RequestClient(base_url="https://api.test", transport=transport)
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        verify: bool = True,
        follow_redirects: bool = True,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport,
            verify=verify,
            follow_redirects=follow_redirects,
        )

    def open_handle(self) -> HttpxTransportHandle:
        return HttpxTransportHandle(self._client)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _content_length(response: httpx.Response) -> int:
    value = response.headers.get("content-length")
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0
