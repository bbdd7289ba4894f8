"""In-memory response caching for reqclient.

This package provides :class:`ResponseCache`, the per-client store for
successful GET responses, and :func:`make_cache_key`, the deterministic
request signature it is keyed by.

The cache is consumed by :class:`~reqclient.client.RequestClient` when a
call passes ``cache=True``.
"""

from reqclient.cache.cache import ResponseCache, make_cache_key

__all__ = ["ResponseCache", "make_cache_key"]
