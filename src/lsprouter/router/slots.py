# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Per-verb handler slots and the handled/unhandled dispatch result."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, NamedTuple, TypeVar

from ..utils import maybe_await_with_args

HandlerT = TypeVar("HandlerT", bound=Callable[..., Any])


class DispatchResult(NamedTuple):
    """Outcome of routing one call.

    ``handled`` is ``False`` when no server owns the call; an owner returning
    ``None`` or an empty value is still ``handled=True``.
    """

    handled: bool
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "DispatchResult":
        return cls(True, value)


UNHANDLED = DispatchResult(False, None)


class HandlerSlot(Generic[HandlerT]):
    """One overridable handler for one protocol verb, either set or unset."""

    __slots__ = ("verb", "_handler")

    def __init__(self, verb: str) -> None:
        self.verb = verb
        self._handler: HandlerT | None = None

    @property
    def is_set(self) -> bool:
        return self._handler is not None

    def set(self, handler: HandlerT | None) -> None:
        """Replace the current handler; ``None`` returns the slot to unset."""
        self._handler = handler

    async def invoke(self, *args: Any) -> DispatchResult:
        if self._handler is None:
            return UNHANDLED
        return DispatchResult.of(await maybe_await_with_args(self._handler, *args))

    def __repr__(self) -> str:
        state = "set" if self.is_set else "unset"
        return f"HandlerSlot({self.verb!r}, {state})"


__all__ = ["DispatchResult", "HandlerSlot", "UNHANDLED"]
