# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Helpers for calling handlers that may be sync or async."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import inspect
from typing import Any


async def maybe_await_with_args(fn: Callable[..., Any | Awaitable[Any]] | Any, *args: Any, **kwargs: Any) -> Any:
    """Call *fn* with the given arguments and await the result when needed.

    Non-callables (plain values, already-created coroutines) are resolved as
    is and the arguments are ignored.
    """
    result = fn(*args, **kwargs) if callable(fn) else fn
    if inspect.isawaitable(result):
        return await result
    return result


__all__ = ["maybe_await_with_args"]
