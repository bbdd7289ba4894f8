"""HTTP client module for reqclient.

Provides :class:`RequestClient`, an asyncio client layered over a pluggable
transport with request/response interceptors, an in-memory GET cache,
linear-backoff retry, progress callbacks and cooperative cancellation.

Example::

    from reqclient.client import RequestClient

    async with RequestClient(base_url="https://api.example.com") as client:
        resp = await client.get("/users")
"""

from reqclient.client.request_client import RequestClient
from reqclient.client.response import Response

__all__ = ["RequestClient", "Response"]
