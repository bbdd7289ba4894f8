"""Ordered interceptor chains for the request/response lifecycle.

:class:`InterceptorChain` holds the callables registered through
:meth:`~reqclient.client.RequestClient.add_request_interceptor` and
:meth:`~reqclient.client.RequestClient.add_response_interceptor`.

The chain follows a pipeline pattern: each interceptor receives the output
of the previous one, enabling additive transformations (injecting auth
headers, logging, unwrapping response envelopes). Interceptors may be plain
functions or coroutine functions; an awaitable result is awaited before the
next interceptor runs, so the chain never fans out concurrently.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

T = TypeVar("T")

Interceptor = Callable[[T], Union[T, Awaitable[T]]]


class InterceptorChain(Generic[T]):
    """Executes interceptors in registration order.

    There is no removal operation: once added, an interceptor stays for
    the lifetime of the chain.
    """

    def __init__(self) -> None:
        self._interceptors: list[Interceptor[T]] = []

    def add(self, interceptor: Interceptor[T]) -> None:
        """Append *interceptor* to the end of the chain."""
        if not callable(interceptor):
            raise TypeError(f"Interceptor must be callable, got {type(interceptor).__name__}")
        self._interceptors.append(interceptor)

    async def run(self, value: T) -> T:
        """Thread *value* through every interceptor and return the final result.

        Exceptions raised by an interceptor propagate to the caller and stop
        the chain.
        """
        for interceptor in self._interceptors:
            result: Any = interceptor(value)
            if inspect.isawaitable(result):
                result = await result
            value = result
        return value

    def __len__(self) -> int:
        return len(self._interceptors)
