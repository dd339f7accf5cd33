"""Advisory cancellation tokens threaded through request handlers.

A token only reports that the client lost interest; handlers may poll
:attr:`CancellationToken.is_cancellation_requested` or await
:meth:`CancellationToken.wait` to abort early. The router never interrupts a
handler that ignores its token.
"""

from __future__ import annotations

import anyio


class CancellationToken:
    def __init__(self, event: anyio.Event | None = None) -> None:
        self._event = event

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event is not None and self._event.is_set()

    async def wait(self) -> None:
        if self._event is None:
            await anyio.sleep_forever()
        else:
            await self._event.wait()


class CancellationTokenSource:
    """Owns the event behind a token; the transport cancels through it."""

    def __init__(self) -> None:
        self._event = anyio.Event()
        self.token = CancellationToken(self._event)

    def cancel(self) -> None:
        self._event.set()


NONE = CancellationToken()


__all__ = ["CancellationToken", "CancellationTokenSource", "NONE"]
