"""Cooperative cancellation for in-flight requests.

A :class:`CancellationToken` is handed to
:meth:`~reqclient.client.RequestClient.request` through the ``signal``
option. Cancelling the token aborts whichever transport handle the call
currently owns and makes the call raise
:class:`~reqclient.exceptions.RequestAbortedError`. One token may be
shared by several calls; cancelling it aborts all of them.

Example::

    token = CancellationToken()
    task = asyncio.create_task(client.get("/slow", signal=token))
    token.cancel()
    await task  # raises RequestAbortedError
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

DEFAULT_REASON = "Request aborted"


class CancellationToken:
    """One-shot cancellation signal with listener callbacks.

    Listeners registered through :meth:`subscribe` run synchronously, in
    registration order, the first time :meth:`cancel` is called. Later
    calls are no-ops.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._listeners: list[Callable[[], None]] = []
        self._event: Optional[asyncio.Event] = None

    @property
    def cancelled(self) -> bool:
        """Whether :meth:`cancel` has been called."""
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        """The reason passed to :meth:`cancel`, or ``None`` while active."""
        return self._reason

    def cancel(self, reason: str = DEFAULT_REASON) -> None:
        """Fire the signal and notify every subscribed listener.

        Args:
            reason: Message used for the resulting
                :class:`~reqclient.exceptions.RequestAbortedError`.
        """
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        for listener in list(self._listeners):
            listener()
        self._listeners.clear()
        if self._event is not None:
            self._event.set()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register *listener* to run on cancellation.

        Returns:
            A zero-argument callable that removes the listener again. Calling
            it more than once is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"<CancellationToken {state}>"
