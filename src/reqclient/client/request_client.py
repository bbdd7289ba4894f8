"""Asynchronous request client with interceptors, cache, retry and cancellation.

This module provides :class:`RequestClient`, the single public entry point
of the library. For every call it:

1. **Runs request interceptors** over the per-call
   :class:`~reqclient.models.RequestOptions` (sequential await).
2. **Checks the cache** for cacheable GET calls and returns a hit without
   touching the network.
3. **Dispatches with retry** -- opens a fresh
   :class:`~reqclient.transport.base.TransportHandle` per attempt, registers
   it as pending, sends, normalizes the response and runs the response
   interceptors. Non-2xx answers are retried with *linear* backoff
   (``retry_delay * attempt``); network failures and timeouts are not.
4. **Stores** successful cacheable GET responses.

Cancellation is cooperative: a
:class:`~reqclient.cancellation.CancellationToken` passed as ``signal``
aborts the live handle (or interrupts the backoff wait), and
:meth:`RequestClient.abort_all` aborts every pending handle. In both cases
the affected calls raise :class:`~reqclient.exceptions.RequestAbortedError`.

See Also:
    :mod:`reqclient.transport` for the transport capability set and the
    default httpx implementation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from reqclient.cache import ResponseCache
from reqclient.cancellation import DEFAULT_REASON, CancellationToken
from reqclient.client.interceptors import Interceptor, InterceptorChain
from reqclient.client.registry import PendingRequests
from reqclient.client.response import Response, normalize_response
from reqclient.client.serialization import (
    build_url,
    header_value,
    merge_headers,
    serialize_body,
)
from reqclient.exceptions import (
    HTTPResponseError,
    NetworkError,
    RequestAbortedError,
    RequestTimeoutError,
    TransportAbortedError,
    TransportNetworkError,
    TransportTimeoutError,
)
from reqclient.models import DEFAULT_CONTENT_TYPE, ClientConfig, RequestOptions
from reqclient.output import get_output
from reqclient.transport import Transport, TransportHandle, create_default_transport

OptionsLike = Union[RequestOptions, Mapping[str, Any], None]


@dataclass
class _CallState:
    """Tracks the handle a single call currently owns, for token-driven aborts."""

    handle: Optional[TransportHandle] = None

    def abort(self) -> None:
        if self.handle is not None:
            self.handle.abort()


class RequestClient:
    """Asynchronous HTTP client with interceptors, caching and retry.

    Args:
        config: Client configuration. When omitted one is built from
            *config_fields*.
        transport: The transport to send requests through. Defaults to an
            :class:`~reqclient.transport.HttpxTransport` created on first
            use. The client takes ownership and closes it in :meth:`aclose`.
        **config_fields: Shortcuts for :class:`~reqclient.models.ClientConfig`
            fields (``base_url``, ``headers``, ``timeout``,
            ``retry_attempts``, ``retry_delay``), layered over *config*.

    Example::

        async with RequestClient(base_url="https://api.example.com", retry_attempts=2) as client:
            client.add_request_interceptor(add_auth)
            response = await client.get("/users", params={"page": 2}, cache=True)
            print(response.status, response.data)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        **config_fields: Any,
    ) -> None:
        if config is None:
            config = ClientConfig(**config_fields)
        elif config_fields:
            config = ClientConfig.model_validate({**config.model_dump(), **config_fields})

        self._config = config
        self._default_headers = merge_headers(
            {"Content-Type": DEFAULT_CONTENT_TYPE}, config.headers
        )
        self._transport = transport
        self._cache = ResponseCache()
        self._pending = PendingRequests()
        self._request_interceptors: InterceptorChain[RequestOptions] = InterceptorChain()
        self._response_interceptors: InterceptorChain[Response] = InterceptorChain()

    @property
    def config(self) -> ClientConfig:
        """The immutable configuration this client was built with."""
        return self._config

    @property
    def cache(self) -> ResponseCache:
        """The client's response cache."""
        return self._cache

    @property
    def pending_count(self) -> int:
        """Number of transport handles currently in flight."""
        return len(self._pending)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> RequestClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Abort anything still pending and close the transport."""
        self._pending.abort_all()
        if self._transport is not None:
            await self._transport.aclose()
            self._transport = None

    # ------------------------------------------------------------------ #
    # Interceptors, cache, bulk abort
    # ------------------------------------------------------------------ #

    def add_request_interceptor(self, interceptor: Interceptor[RequestOptions]) -> None:
        """Append an ``options -> options`` transform (sync or async)."""
        self._request_interceptors.add(interceptor)

    def add_response_interceptor(self, interceptor: Interceptor[Response]) -> None:
        """Append a ``response -> response`` transform (sync or async)."""
        self._response_interceptors.add(interceptor)

    def abort_all(self) -> None:
        """Abort every in-flight request and clear the pending registry.

        Each affected call raises :class:`~reqclient.exceptions.RequestAbortedError`.
        A call that is sleeping between retries owns no handle and is not
        affected.
        """
        count = self._pending.abort_all()
        if count:
            get_output().debug(f"Aborted {count} pending request(s)")

    def clear_cache(self) -> None:
        """Drop every cached response."""
        self._cache.clear()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(self, url: str, options: OptionsLike = None, **overrides: Any) -> Response:
        """Send a request through the interceptor, cache and retry pipeline.

        Args:
            url: Path appended to the configured ``base_url`` (or an
                absolute URL when ``base_url`` is empty).
            options: A :class:`~reqclient.models.RequestOptions` or a mapping
                of its fields.
            **overrides: Individual option fields layered over *options*.

        Returns:
            The final :class:`~reqclient.client.response.Response` after every
            response interceptor ran (or the cached one).

        Raises:
            HTTPResponseError: On a non-2xx status after all retries.
            NetworkError: When the request never completed (not retried).
            RequestTimeoutError: When the transport timed out (not retried).
            RequestAbortedError: When cancelled by ``signal`` or :meth:`abort_all`.
            TransportUnavailableError: When no transport can be constructed.
        """
        initial = _build_options(options, overrides)
        effective = _coerce_options(await self._request_interceptors.run(initial))

        method = effective.resolved_method
        cacheable = effective.cache and method == "GET"
        if cacheable:
            cached = self._cache.get(method, url, effective.data, effective.params)
            if cached is not None:
                get_output().debug(f"Cache hit for {method} {url}")
                return cached

        signal = effective.signal
        state = _CallState()
        unsubscribe = signal.subscribe(state.abort) if signal is not None else None
        try:
            response = await self._dispatch_with_retry(url, method, effective, state)
        finally:
            if unsubscribe is not None:
                unsubscribe()

        # A signal fired after the last suspension point still wins.
        _raise_if_cancelled(signal)
        if cacheable:
            self._cache.set(method, url, effective.data, effective.params, response)
        return response

    async def get(self, url: str, options: OptionsLike = None, **kwargs: Any) -> Response:
        """Send a GET request. See :meth:`request`."""
        return await self.request(url, options, **{**kwargs, "method": "GET"})

    async def post(
        self, url: str, data: Any = None, options: OptionsLike = None, **kwargs: Any
    ) -> Response:
        """Send a POST request with *data* as the body. See :meth:`request`."""
        return await self.request(url, options, **{**kwargs, "method": "POST", "data": data})

    async def put(
        self, url: str, data: Any = None, options: OptionsLike = None, **kwargs: Any
    ) -> Response:
        """Send a PUT request with *data* as the body. See :meth:`request`."""
        return await self.request(url, options, **{**kwargs, "method": "PUT", "data": data})

    async def patch(
        self, url: str, data: Any = None, options: OptionsLike = None, **kwargs: Any
    ) -> Response:
        """Send a PATCH request with *data* as the body. See :meth:`request`."""
        return await self.request(url, options, **{**kwargs, "method": "PATCH", "data": data})

    async def delete(self, url: str, options: OptionsLike = None, **kwargs: Any) -> Response:
        """Send a DELETE request. See :meth:`request`."""
        return await self.request(url, options, **{**kwargs, "method": "DELETE"})

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_transport(self) -> Transport:
        if self._transport is None:
            self._transport = create_default_transport()
        return self._transport

    async def _dispatch_with_retry(
        self,
        url: str,
        method: str,
        options: RequestOptions,
        state: _CallState,
    ) -> Response:
        """Dispatch until a 2xx response or until the attempt budget is spent.

        The wait before attempt ``k + 1`` is ``retry_delay * k`` milliseconds.
        """
        retries = self._config.retry_attempts
        attempt = 1
        while True:
            response = await self._dispatch(url, method, options, state)
            if response.ok:
                return response
            if response.status == 0:
                raise RequestAbortedError(f"{DEFAULT_REASON}: no response received")
            if attempt > retries:
                raise HTTPResponseError(response)

            delay = self._config.retry_delay * attempt
            get_output().debug(
                f"HTTP {response.status}, retrying in {delay}ms "
                f"(attempt {attempt}/{retries + 1})"
            )
            await self._backoff(delay, options.signal)
            attempt += 1

    async def _dispatch(
        self,
        url: str,
        method: str,
        options: RequestOptions,
        state: _CallState,
    ) -> Response:
        """Run one attempt on a fresh handle and return the intercepted response."""
        _raise_if_cancelled(options.signal)

        handle = self._get_transport().open_handle()
        handle.open(method, build_url(self._config.base_url, url, options.params))

        headers = merge_headers(self._default_headers, options.headers)
        for name, value in headers.items():
            if value is not None:
                handle.set_header(name, value)
        handle.timeout = options.timeout or self._config.timeout

        if options.on_progress is not None:
            handle.on_upload_progress = options.on_progress
            handle.on_download_progress = options.on_progress

        content_type = header_value(headers, "Content-Type") or DEFAULT_CONTENT_TYPE
        body = serialize_body(options.data, content_type)

        request_id = self._pending.register(handle)
        state.handle = handle
        try:
            await handle.send(body)
        except TransportAbortedError as exc:
            raise RequestAbortedError(_abort_reason(options.signal)) from exc
        except TransportTimeoutError as exc:
            raise RequestTimeoutError(str(exc)) from exc
        except TransportNetworkError as exc:
            raise NetworkError(str(exc)) from exc
        finally:
            self._pending.deregister(request_id)
            state.handle = None

        response = await self._response_interceptors.run(normalize_response(handle))
        _raise_if_cancelled(options.signal)
        return response

    async def _backoff(self, delay_ms: int, signal: Optional[CancellationToken]) -> None:
        """Sleep *delay_ms* milliseconds, waking early if *signal* fires."""
        seconds = delay_ms / 1000
        if signal is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(signal.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise RequestAbortedError(_abort_reason(signal))


def _build_options(options: OptionsLike, overrides: Mapping[str, Any]) -> RequestOptions:
    """Return a fresh :class:`RequestOptions` so interceptors never mutate the caller's copy."""
    if options is None:
        fields: dict[str, Any] = {}
    elif isinstance(options, RequestOptions):
        fields = {name: getattr(options, name) for name in RequestOptions.model_fields}
    else:
        fields = dict(options)
    fields.update(overrides)
    return RequestOptions.model_validate(fields)


def _coerce_options(value: Any) -> RequestOptions:
    if isinstance(value, RequestOptions):
        return value
    if isinstance(value, Mapping):
        return RequestOptions.model_validate(dict(value))
    raise TypeError(
        f"Request interceptors must return RequestOptions or a mapping, got {type(value).__name__}"
    )


def _raise_if_cancelled(signal: Optional[CancellationToken]) -> None:
    if signal is not None and signal.cancelled:
        raise RequestAbortedError(_abort_reason(signal))


def _abort_reason(signal: Optional[CancellationToken]) -> str:
    if signal is not None and signal.reason:
        return signal.reason
    return DEFAULT_REASON
