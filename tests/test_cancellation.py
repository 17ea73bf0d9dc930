import asyncio

import pytest

from async_broadcaster import CancellationToken


def test_cancel_runs_callbacks_once():
    token = CancellationToken()
    calls = []
    token.add_callback(lambda: calls.append("a"))
    token.add_callback(lambda: calls.append("b"))

    token.cancel("done")
    token.cancel("again")

    assert calls == ["a", "b"]
    assert token.cancelled is True
    assert token.reason == "done"


def test_callback_added_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel()
    calls = []

    token.add_callback(lambda: calls.append(1))

    assert calls == [1]


def test_removed_callback_is_not_called():
    token = CancellationToken()
    calls = []

    def callback():
        calls.append(1)

    token.add_callback(callback)
    token.remove_callback(callback)
    token.remove_callback(callback)
    token.cancel()

    assert calls == []


def test_failing_callback_does_not_stop_others(caplog):
    token = CancellationToken()
    calls = []

    def explode():
        raise RuntimeError("boom")

    token.add_callback(explode)
    token.add_callback(lambda: calls.append(1))
    token.cancel()

    assert calls == [1]
    assert "Cancellation callback" in caplog.text


@pytest.mark.asyncio
async def test_wait_returns_after_cancel():
    token = CancellationToken()
    waiter = asyncio.create_task(token.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    token.cancel()
    await asyncio.wait_for(waiter, timeout=1)

    # Already cancelled tokens return straight away.
    await asyncio.wait_for(token.wait(), timeout=1)
