"""Tests for the ResponseCache module."""

from __future__ import annotations

import pytest

from reqclient.cache import ResponseCache, make_cache_key
from reqclient.client.response import Response


@pytest.fixture()
def cache() -> ResponseCache:
    return ResponseCache()


def _make_response(status: int = 200) -> Response:
    return Response(status=status, status_text="OK", data={"id": 1, "name": "test"})


# ------------------------------------------------------------------ #
# Core get/set behaviour
# ------------------------------------------------------------------ #


class TestGetSet:
    def test_set_and_get_for_get_request(self, cache: ResponseCache) -> None:
        resp = _make_response()
        cache.set("GET", "/users", None, {"page": 1}, resp)
        assert cache.get("GET", "/users", None, {"page": 1}) is resp

    def test_miss_returns_none(self, cache: ResponseCache) -> None:
        assert cache.get("GET", "/nothing") is None

    def test_method_defaults_to_get(self, cache: ResponseCache) -> None:
        resp = _make_response()
        cache.set(None, "/users", None, None, resp)
        assert cache.get("get", "/users") is resp

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_non_get_not_stored(self, cache: ResponseCache, method: str) -> None:
        cache.set(method, "/users", None, None, _make_response())
        assert len(cache) == 0
        assert cache.get(method, "/users") is None

    @pytest.mark.parametrize("status", [301, 404, 500])
    def test_non_2xx_not_stored(self, cache: ResponseCache, status: int) -> None:
        cache.set("GET", "/users", None, None, _make_response(status))
        assert len(cache) == 0

    def test_clear(self, cache: ResponseCache) -> None:
        cache.set("GET", "/a", None, None, _make_response())
        cache.set("GET", "/b", None, None, _make_response())
        assert cache.stats() == {"size": 2}
        cache.clear()
        assert len(cache) == 0
        assert cache.get("GET", "/a") is None


# ------------------------------------------------------------------ #
# Cache key generation
# ------------------------------------------------------------------ #


class TestCacheKey:
    def test_key_is_sha256_hex(self) -> None:
        key = make_cache_key("GET", "/users")
        assert len(key) == 64
        int(key, 16)

    def test_param_order_does_not_matter(self) -> None:
        assert make_cache_key("GET", "/u", None, {"a": 1, "b": 2}) == make_cache_key(
            "GET", "/u", None, {"b": 2, "a": 1}
        )

    def test_nested_order_does_not_matter(self) -> None:
        assert make_cache_key("GET", "/u", {"x": {"b": 1, "a": 2}}) == make_cache_key(
            "GET", "/u", {"x": {"a": 2, "b": 1}}
        )

    def test_different_params_differ(self) -> None:
        assert make_cache_key("GET", "/u", None, {"page": 1}) != make_cache_key(
            "GET", "/u", None, {"page": 2}
        )

    def test_url_and_method_are_part_of_key(self) -> None:
        assert make_cache_key("GET", "/a") != make_cache_key("GET", "/b")
        assert make_cache_key("GET", "/a") != make_cache_key("HEAD", "/a")

    def test_absent_and_empty_params_match(self) -> None:
        assert make_cache_key("GET", "/u", None, None) == make_cache_key("GET", "/u", {}, {})

    def test_key_in_cache(self, cache: ResponseCache) -> None:
        cache.set("GET", "/users", None, {"q": "x"}, _make_response())
        assert make_cache_key("GET", "/users", None, {"q": "x"}) in cache

    def test_bytes_body_hashable(self) -> None:
        assert make_cache_key("GET", "/u", b"\x01") != make_cache_key("GET", "/u", b"\x02")
