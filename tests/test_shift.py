"""Tests for shifting window memberships to the left."""

import pytest

from .testtools import FakeHost


async def _window(desktops, window_id):
    return await desktops.backend.get_window(window_id)


@pytest.mark.asyncio
async def test_shift_past_threshold(host, desktops):
    """Memberships at or after the threshold move one desktop left."""
    for _ in range(2):
        host.add_desktop()
    host.add_window("w", 0, 2, 3)

    await desktops.shift_window_left_from(await _window(desktops, "w"), 2)

    assert host.membership("w") == [0, 1, 2]
    assert host.writes == [("w", [0, 1, 2])]


@pytest.mark.asyncio
async def test_shift_keeps_memberships_below_threshold(host, desktops):
    host.add_desktop()
    host.add_window("low", 0)
    host.add_window("high", 2)

    for window in await desktops.backend.get_windows():
        await desktops.shift_window_left_from(window, 1)

    assert host.membership("low") == [0]
    assert host.membership("high") == [1]
    # no write for the unchanged window
    assert host.writes == [("high", [1])]


@pytest.mark.asyncio
async def test_threshold_zero_is_a_no_op(host, desktops):
    host.add_window("w", 1)

    await desktops.shift_window_left_from(await _window(desktops, "w"), 0)

    assert host.membership("w") == [1]
    assert host.writes == []


@pytest.mark.asyncio
async def test_shift_merges_adjacent_memberships(host, desktops):
    """A window on both sides of the threshold ends up once on the left one."""
    host.add_desktop()
    host.add_window("w", 1, 2)

    await desktops.shift_window_left_from(await _window(desktops, "w"), 2)

    assert host.membership("w") == [1]


@pytest.mark.asyncio
async def test_shift_updates_window_snapshot(host, desktops):
    host.add_desktop()
    host.add_window("w", 2)
    window = await _window(desktops, "w")

    await desktops.shift_window_left_from(window, 1)

    assert [d.index for d in window.desktops] == [1]


@pytest.mark.asyncio
async def test_shift_window_on_all_desktops_untouched(host, desktops):
    host.add_window("sticky", on_all=True)

    await desktops.shift_window_left_from(await _window(desktops, "sticky"), 1)

    assert host.writes == []


@pytest.mark.asyncio
async def test_shift_with_opaque_desktop_ids(config, subscriptions, test_logger):
    """Desktops identified by opaque ids are matched by identity, not position."""
    from dyndesk.adapters.proxy import BackendProxy
    from dyndesk.desktops import DynamicDesktops

    host = FakeHost(desktops=4, opaque_keys=True)
    host.add_window("w", 0, 3)
    controller = DynamicDesktops(BackendProxy(host, test_logger), subscriptions, config, test_logger)

    await controller.shift_window_left_from(await controller.backend.get_window("w"), 1)

    assert host.membership("w") == [0, 2]
    assert host.windows["w"]["keys"] == ["uuid-0", "uuid-2"]
