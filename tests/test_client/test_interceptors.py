"""Tests for InterceptorChain and PendingRequests."""

from __future__ import annotations

import pytest

from reqclient.client.interceptors import InterceptorChain
from reqclient.client.registry import PendingRequests
from reqclient.transport import TransportHandle


class _Handle(TransportHandle):
    async def send(self, body):
        return None

    def abort(self):
        self.aborted = True


# ---------------------------------------------------------------------------
# InterceptorChain
# ---------------------------------------------------------------------------


class TestInterceptorChain:
    @pytest.mark.asyncio
    async def test_empty_chain_returns_input(self) -> None:
        chain: InterceptorChain[int] = InterceptorChain()
        assert await chain.run(5) == 5
        assert len(chain) == 0

    @pytest.mark.asyncio
    async def test_sync_and_async_run_in_order(self) -> None:
        chain: InterceptorChain[list] = InterceptorChain()

        def first(value: list) -> list:
            return value + ["first"]

        async def second(value: list) -> list:
            return value + ["second"]

        chain.add(first)
        chain.add(second)
        chain.add(lambda value: value + ["third"])

        assert await chain.run([]) == ["first", "second", "third"]
        assert len(chain) == 3

    @pytest.mark.asyncio
    async def test_each_interceptor_sees_previous_output(self) -> None:
        chain: InterceptorChain[int] = InterceptorChain()
        chain.add(lambda n: n * 10)
        chain.add(lambda n: n + 1)
        assert await chain.run(2) == 21

    @pytest.mark.asyncio
    async def test_exception_stops_chain(self) -> None:
        chain: InterceptorChain[int] = InterceptorChain()
        called = []

        def fail(n: int) -> int:
            raise ValueError("bad")

        chain.add(fail)
        chain.add(lambda n: called.append(n) or n)

        with pytest.raises(ValueError, match="bad"):
            await chain.run(1)
        assert called == []

    def test_add_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError, match="must be callable"):
            InterceptorChain().add(123)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# PendingRequests
# ---------------------------------------------------------------------------


class TestPendingRequests:
    def test_register_returns_unique_ids(self) -> None:
        registry = PendingRequests()
        first = registry.register(_Handle())
        second = registry.register(_Handle())
        assert first != second
        assert first in registry
        assert len(registry) == 2

    def test_deregister(self) -> None:
        registry = PendingRequests()
        request_id = registry.register(_Handle())
        registry.deregister(request_id)
        assert request_id not in registry
        assert len(registry) == 0

    def test_deregister_unknown_is_ignored(self) -> None:
        registry = PendingRequests()
        registry.deregister("missing")
        assert len(registry) == 0

    def test_abort_all_aborts_and_clears(self) -> None:
        registry = PendingRequests()
        handles = [_Handle(), _Handle()]
        for handle in handles:
            registry.register(handle)

        assert registry.abort_all() == 2
        assert all(handle.aborted for handle in handles)
        assert len(registry) == 0

    def test_abort_all_empty(self) -> None:
        assert PendingRequests().abort_all() == 0
