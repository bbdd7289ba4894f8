"""reqclient -- a small asyncio HTTP request helper.

:class:`RequestClient` wraps a pluggable transport (httpx by default) with
convenience verbs, default headers, timeouts, retry with linear backoff, an
in-memory GET cache, request/response interceptor chains, progress
callbacks and cooperative cancellation. A ``reqclient`` console script
drives the same client from the shell.

Typical use::

    from reqclient import RequestClient

    async with RequestClient(base_url="https://api.example.com", retry_attempts=2) as client:
        response = await client.post("/users", {"name": "a"})

Modules:
    client: The request pipeline, interceptors, registry and response model.
    cache: In-memory response cache and cache-key derivation.
    transport: Transport capability set and the httpx implementation.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration files and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI entry point.
"""

from reqclient.cancellation import CancellationToken
from reqclient.client import RequestClient, Response
from reqclient.exceptions import (
    HTTPResponseError,
    NetworkError,
    RequestAbortedError,
    RequestClientError,
    RequestTimeoutError,
    TransportUnavailableError,
)
from reqclient.models import ClientConfig, ProgressEvent, RequestOptions

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "ClientConfig",
    "HTTPResponseError",
    "NetworkError",
    "ProgressEvent",
    "RequestAbortedError",
    "RequestClient",
    "RequestClientError",
    "RequestOptions",
    "RequestTimeoutError",
    "Response",
    "TransportUnavailableError",
    "__version__",
]
