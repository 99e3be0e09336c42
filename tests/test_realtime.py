import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from chat_api.app.core.realtime import MESSAGE_UPDATE_EVENT, Notifier


def _subscriber(fail=False):
    ws = MagicMock()
    ws.send_json = AsyncMock(side_effect=RuntimeError("closed") if fail else None)
    return ws


def _stalled_subscriber():
    async def never_completes(frame):
        await asyncio.Event().wait()

    ws = MagicMock()
    ws.send_json = AsyncMock(side_effect=never_completes)
    return ws


@pytest.mark.asyncio
async def test_emit_reaches_every_subscriber():
    notifier = Notifier()
    first, second = _subscriber(), _subscriber()
    notifier.subscribe(first)
    notifier.subscribe(second)

    await notifier.emit(MESSAGE_UPDATE_EVENT, {"msg": {"msg": "Hello"}})

    expected = {"event": "messageUpdate", "data": {"msg": {"msg": "Hello"}}}
    first.send_json.assert_awaited_once_with(expected)
    second.send_json.assert_awaited_once_with(expected)


@pytest.mark.asyncio
async def test_failed_subscriber_is_dropped_without_raising():
    notifier = Notifier()
    healthy, broken = _subscriber(), _subscriber(fail=True)
    notifier.subscribe(healthy)
    notifier.subscribe(broken)

    await notifier.emit(MESSAGE_UPDATE_EVENT, {"msg": {}})

    assert notifier.subscribers == {healthy}
    healthy.send_json.assert_awaited_once()


@pytest.mark.asyncio
async def test_emit_without_subscribers():
    await Notifier().emit(MESSAGE_UPDATE_EVENT, {"msg": {}})


def test_unsubscribe_unknown_socket_is_ignored():
    notifier = Notifier()

    notifier.unsubscribe(_subscriber())

    assert notifier.subscribers == set()


@pytest.mark.asyncio
async def test_stalled_subscriber_does_not_block_emit():
    notifier = Notifier(send_timeout=0.05)
    healthy, stalled = _subscriber(), _stalled_subscriber()
    notifier.subscribe(healthy)
    notifier.subscribe(stalled)

    await asyncio.wait_for(notifier.emit(MESSAGE_UPDATE_EVENT, {"msg": {}}), 1.0)

    assert notifier.subscribers == {healthy}
    healthy.send_json.assert_awaited_once_with({"event": "messageUpdate", "data": {"msg": {}}})
