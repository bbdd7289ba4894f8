"""Registry of in-flight transport handles.

Every dispatch attempt registers its handle just before sending and
deregisters it on the terminal transition (response, error or abort).
:meth:`PendingRequests.abort_all` is the bulk-cancellation entry point
behind :meth:`~reqclient.client.RequestClient.abort_all`.
"""

from __future__ import annotations

import uuid

from reqclient.transport.base import TransportHandle


class PendingRequests:
    """Mapping of opaque request ids to live :class:`TransportHandle` objects."""

    def __init__(self) -> None:
        self._handles: dict[str, TransportHandle] = {}

    def register(self, handle: TransportHandle) -> str:
        """Track *handle* and return its freshly generated id."""
        request_id = uuid.uuid4().hex
        self._handles[request_id] = handle
        return request_id

    def deregister(self, request_id: str) -> None:
        """Stop tracking *request_id*. Unknown ids are ignored."""
        self._handles.pop(request_id, None)

    def abort_all(self) -> int:
        """Abort every tracked handle, clear the registry, and return how many were aborted."""
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            handle.abort()
        return len(handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._handles
