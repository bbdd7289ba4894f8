"""In-memory response caching for GET requests.

Entries live for the lifetime of the owning
:class:`~reqclient.client.RequestClient`: there is no TTL, no eviction and
no persistence. Only successful (2xx) GET responses are stored; every
other method and status is passed through.

Cache keys are SHA-256 hashes of ``METHOD|URL|data|params`` where *data*
and *params* are JSON-encoded with sorted keys, so identical requests
resolve to the same entry regardless of how their mappings were built.
An absent body or absent params both encode as ``{}``.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from reqclient.client.response import Response

_EMPTY = "{}"


class ResponseCache:
    """Instance-scoped cache of normalized GET responses.

    Example::

        cache = ResponseCache()
        cache.set("GET", "/users", None, {"page": 1}, response)
        hit = cache.get("GET", "/users", None, {"page": 1})
    """

    def __init__(self) -> None:
        self._entries: dict[str, Response] = {}

    def get(
        self,
        method: Optional[str],
        url: str,
        data: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[Response]:
        """Look up a cached response.

        Returns:
            The stored :class:`~reqclient.client.response.Response`, or
            ``None`` on a miss or for non-GET methods.
        """
        if _normalize_method(method) != "GET":
            return None
        return self._entries.get(make_cache_key(method, url, data, params))

    def set(
        self,
        method: Optional[str],
        url: str,
        data: Any,
        params: Optional[dict[str, Any]],
        response: Response,
    ) -> None:
        """Store *response* if it is a 2xx answer to a GET request."""
        if _normalize_method(method) != "GET":
            return
        if not (200 <= response.status < 300):
            return
        self._entries[make_cache_key(method, url, data, params)] = response

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics (currently just ``size``)."""
        return {"size": len(self._entries)}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


def make_cache_key(
    method: Optional[str],
    url: str,
    data: Any = None,
    params: Optional[dict[str, Any]] = None,
) -> str:
    """Generate a cache key from method, URL, body and query params."""
    parts = [
        _normalize_method(method),
        url,
        _encode(data),
        _encode(params),
    ]
    raw = "|".join(parts)
    return hashlib.sha256(raw.encode()).hexdigest()


def _normalize_method(method: Optional[str]) -> str:
    return (method or "GET").upper()


def _encode(value: Any) -> str:
    if value is None:
        return _EMPTY
    if isinstance(value, (bytes, bytearray)):
        return "hex:" + bytes(value).hex()
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
