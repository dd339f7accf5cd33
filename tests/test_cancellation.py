from __future__ import annotations

import anyio
import pytest

from lsprouter.cancellation import NONE, CancellationTokenSource


@pytest.mark.anyio
async def test_cancel_sets_token() -> None:
    source = CancellationTokenSource()
    token = source.token

    assert not token.is_cancellation_requested
    source.cancel()

    assert token.is_cancellation_requested
    with anyio.fail_after(1):
        await token.wait()


@pytest.mark.anyio
async def test_none_token_never_fires() -> None:
    assert not NONE.is_cancellation_requested

    with anyio.move_on_after(0.01) as scope:
        await NONE.wait()

    assert scope.cancelled_caught
