"""Tests for the per-window watchers."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from dyndesk.adapters.proxy import BackendProxy
from dyndesk.subscriptions import WindowSubscriptions

from .testtools import wait_called


@pytest.fixture
def on_event():
    return AsyncMock()


@pytest.fixture
def subs(host, on_event, test_logger):
    return WindowSubscriptions(BackendProxy(host, test_logger), on_event, test_logger)


@pytest.mark.asyncio
async def test_forwards_desktop_changes(host, subs, on_event):
    await subs.subscribe("w")
    assert "w" in subs

    host.watchers["w"].feed("ignored")
    host.watchers["w"].feed("moved")
    await wait_called(on_event)

    on_event.assert_awaited_once_with("windowdesktopchanged", "w")
    await subs.clear()


@pytest.mark.asyncio
async def test_subscribe_once(host, subs, mocker):
    watch = mocker.spy(host, "watch_window")

    await subs.subscribe("w")
    await subs.subscribe("w")

    assert watch.call_count == 1
    assert len(subs) == 1
    await subs.clear()


@pytest.mark.asyncio
async def test_unsubscribe(host, subs, mocker):
    forget = mocker.spy(host, "forget_window")
    await subs.subscribe("w")
    proc = host.watchers["w"]

    assert await subs.unsubscribe("w")

    assert proc.stopped
    assert "w" not in subs
    forget.assert_called_once_with("w")
    assert not await subs.unsubscribe("w")


@pytest.mark.asyncio
async def test_watcher_ending_keeps_subscription(host, subs, on_event):
    """A watcher exits with its window; the entry stays until the window is removed."""
    await subs.subscribe("w")
    host.watchers["w"].close()
    await subs.unsubscribe("w")
    on_event.assert_not_awaited()


@pytest.mark.asyncio
async def test_clear(host, subs):
    await subs.subscribe("a")
    await subs.subscribe("b")

    await subs.clear()

    assert len(subs) == 0
    assert host.watchers["a"].stopped
    assert host.watchers["b"].stopped


@pytest.mark.asyncio
async def test_unsubscribe_after_watcher_failure(host, subs, mocker):
    mocker.patch.object(host, "parse_window_event", side_effect=RuntimeError("bad line"))
    forget = mocker.spy(host, "forget_window")
    await subs.subscribe("w")
    host.watchers["w"].feed("garbage")
    _, task = subs._watchers["w"]
    await asyncio.wait([task], timeout=1)
    assert task.done()

    assert await subs.unsubscribe("w")

    assert host.watchers["w"].stopped
    forget.assert_called_once_with("w")
