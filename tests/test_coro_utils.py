# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tests for coroutine utility functions.

Handlers registered on a facade may be plain functions or coroutines; the
slots resolve both through these helpers.
"""

from __future__ import annotations

import anyio
import pytest

from lsprouter.utils import maybe_await_with_args


@pytest.mark.anyio
async def test_maybe_await_with_args_sync_and_async() -> None:
    def add(a: int, b: int) -> int:
        return a + b

    async def add_async(a: int, b: int = 10) -> int:
        await anyio.sleep(0)
        return a + b

    assert await maybe_await_with_args(add, 2, 3) == 5
    assert await maybe_await_with_args(add_async, 4, b=7) == 11


@pytest.mark.anyio
async def test_maybe_await_with_args_direct_value() -> None:
    """Non-callables resolve as is; arguments are ignored."""
    assert await maybe_await_with_args(42, "ignored", "args") == 42


@pytest.mark.anyio
async def test_maybe_await_with_args_coroutine() -> None:
    async def async_fn(x: int) -> int:
        await anyio.sleep(0)
        return x * 2

    assert await maybe_await_with_args(async_fn(5), "ignored") == 10
