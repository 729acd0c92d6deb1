"""Tests for the desktop count controller."""

import pytest

from dyndesk.models import DyndeskError


@pytest.fixture
def five_desktops(host):
    for _ in range(3):
        host.add_desktop()
    return host


# Removal


@pytest.mark.asyncio
async def test_remove_refused_at_minimum(host, desktops):
    host.add_window("w", 1)
    assert not await desktops.remove_desktop(0)
    assert host.count == 2
    assert host.writes == []


@pytest.mark.asyncio
async def test_remove_refused_for_last_desktop(host, desktops, config):
    config["min_desktops"] = 1
    host.add_desktop()
    assert not await desktops.remove_desktop(2)
    assert not await desktops.remove_desktop(3)
    assert host.count == 3


@pytest.mark.asyncio
async def test_remove_shifts_following_windows(host, desktops, five_desktops):
    host.add_window("a", 0)
    host.add_window("d", 1)
    host.add_window("b", 2)
    host.add_window("c", 3)

    assert await desktops.remove_desktop(1)

    assert host.count == 4
    assert host.membership("a") == [0]
    assert host.membership("d") == [0]
    assert host.membership("b") == [1]
    assert host.membership("c") == [2]


@pytest.mark.asyncio
async def test_remove_first_desktop_merges_the_second(host, desktops):
    host.add_desktop()
    host.add_window("a", 1)
    host.add_window("b", 2)

    assert await desktops.remove_desktop(0)

    assert host.count == 2
    assert host.membership("a") == [0]
    assert host.membership("b") == [1]


@pytest.mark.asyncio
async def test_remove_with_min_one(host, desktops, config):
    config["min_desktops"] = 1
    host.add_window("w", 1)

    assert await desktops.remove_desktop(0)

    assert host.count == 1
    assert host.membership("w") == [0]


# Growth


@pytest.mark.asyncio
async def test_append_uses_label(host, desktops, config):
    config["desktop_label"] = "Work"
    await desktops.append_desktop()
    assert host.count == 3
    assert host.names[host.keys[-1]] == "Work"


@pytest.mark.asyncio
async def test_ensure_minimum(host, desktops, config):
    config["min_desktops"] = 4
    await desktops.ensure_minimum()
    assert host.count == 4
    await desktops.ensure_minimum()
    assert host.count == 4


@pytest.mark.asyncio
async def test_window_added_on_last_desktop(host, desktops, subscriptions):
    """Scenario: a window appears on the last of two empty desktops."""
    host.add_window("w", 1)

    await desktops.event_windowadded("w")

    assert host.count == 3
    assert host.membership("w") == [1]
    subscriptions.subscribe.assert_awaited_once_with("w")


@pytest.mark.asyncio
async def test_window_added_elsewhere(host, desktops, subscriptions):
    host.add_window("w", 0)

    await desktops.event_windowadded("w")

    assert host.count == 2
    subscriptions.subscribe.assert_awaited_once_with("w")


@pytest.mark.asyncio
async def test_hidden_window_added(host, desktops, subscriptions):
    host.add_window("dock", 1, skip_pager=True)

    await desktops.event_windowadded("dock")

    assert host.count == 2
    subscriptions.subscribe.assert_not_awaited()


@pytest.mark.asyncio
async def test_vanished_window_added(host, desktops, subscriptions):
    await desktops.event_windowadded("gone")

    assert host.count == 2
    subscriptions.subscribe.assert_not_awaited()


@pytest.mark.asyncio
async def test_window_moved_to_last_desktop(host, desktops):
    host.add_window("w", 0)
    await desktops.event_windowdesktopchanged("w")
    assert host.count == 2

    host.move("w", 1)
    await desktops.event_windowdesktopchanged("w")
    assert host.count == 3


@pytest.mark.asyncio
async def test_window_removed(desktops, subscriptions):
    await desktops.event_windowremoved("w")
    subscriptions.unsubscribe.assert_awaited_once_with("w")


# Desktop switch


@pytest.mark.asyncio
async def test_switch_keeps_trailing_empty_desktop(host, desktops):
    """Scenario: leaving the empty last desktop for the first one.

    The trailing desktop is never removed directly, only through a shift.
    """
    host.add_desktop()
    host.add_window("w", 1)
    host.current = 2

    await desktops.event_desktopswitch(host.switch(0))

    assert host.count == 3
    assert host.membership("w") == [1]


@pytest.mark.asyncio
async def test_switch_away_from_empty_first_desktop(host, desktops):
    """Scenario: the first desktop is left empty, the second one takes its place."""
    host.add_desktop()
    host.add_window("w", 1)
    host.add_window("dock", 0, skip_pager=True)

    await desktops.event_desktopswitch(host.switch(2))

    assert host.count == 2
    assert host.membership("w") == [0]
    assert host.membership("dock") == [0]


@pytest.mark.asyncio
async def test_switch_removes_empty_desktops_on_the_right(host, desktops, five_desktops):
    host.add_window("a", 0)
    host.add_window("b", 2)
    host.current = 3

    await desktops.event_desktopswitch(host.switch(0))

    assert host.count == 3
    assert host.membership("a") == [0]
    assert host.membership("b") == [1]


@pytest.mark.asyncio
async def test_switch_removes_empty_desktops_on_the_left(host, desktops, five_desktops):
    host.add_window("a", 0)
    host.add_window("b", 3)
    host.current = 4

    await desktops.event_desktopswitch(host.switch(3))

    assert host.membership("a") == [0]
    assert host.membership("b") == [1]
    assert host.count == 3
    assert host.appended == 0


@pytest.mark.asyncio
async def test_switch_appends_when_last_desktop_is_occupied(host, desktops):
    host.add_window("a", 0)
    host.add_window("b", 1)
    host.current = 1

    await desktops.event_desktopswitch(host.switch(0))

    assert host.count == 3
    assert host.appended == 1


@pytest.mark.asyncio
async def test_switch_with_unknown_current_desktop(host, desktops):
    host.current = 7
    await desktops.event_desktopswitch(0)
    assert host.count == 2
    assert host.writes == []


@pytest.mark.asyncio
async def test_switch_from_vanished_desktop(host, desktops):
    host.add_window("w", 0)
    await desktops.event_desktopswitch(6)
    assert host.count == 2


# Commands


@pytest.mark.asyncio
async def test_compact(host, desktops, five_desktops):
    host.add_window("a", 0)
    host.add_window("b", 4)
    host.current = 0

    await desktops.run_compact()

    assert host.membership("a") == [0]
    assert host.membership("b") == [1]
    assert host.count == 3


@pytest.mark.asyncio
async def test_status(host, desktops):
    host.add_window("w", 1, title="Terminal")
    host.add_window("sticky", on_all=True, title="Clock")

    status = await desktops.run_status()

    assert "backend: ewmh" in status
    assert "minimum: 2" in status
    assert "* 0: Desktop (0 windows)" in status
    assert "1: Desktop (1 windows) Terminal" in status
    assert "on all desktops: Clock" in status


@pytest.mark.asyncio
async def test_right_scan_follows_the_current_desktop(host, desktops, five_desktops, mocker):
    """The current desktop is read again once desktops on its left are gone."""
    host.add_desktop()
    host.add_window("a", 0)
    host.add_window("b", 3)
    host.current = 3
    remove = host.remove_last_desktop

    async def remove_keeping_focus(*, log):
        # this host keeps the user on the same windows
        host.current -= 1
        return await remove(log=log)

    mocker.patch.object(host, "remove_last_desktop", side_effect=remove_keeping_focus)

    await desktops.run_compact()

    assert host.membership("a") == [0]
    assert host.membership("b") == [1]
    assert host.count == 3


# Host failures


@pytest.mark.asyncio
async def test_unreadable_windows_keep_the_desktops(host, desktops, five_desktops, mocker):
    host.add_window("a", 0)
    host.add_window("b", 3)
    mocker.patch.object(host, "get_windows", return_value=None)

    with pytest.raises(DyndeskError):
        await desktops.run_compact()
    with pytest.raises(DyndeskError):
        await desktops.remove_desktop(1)
    with pytest.raises(DyndeskError):
        await desktops.is_desktop_empty(1)

    assert host.count == 5
    assert host.removed == 0
    assert host.appended == 0
    assert host.writes == []


@pytest.mark.asyncio
async def test_unreadable_windows_on_switch(host, desktops, five_desktops, mocker):
    host.add_window("a", 2)
    mocker.patch.object(host, "get_windows", return_value=None)

    with pytest.raises(DyndeskError):
        await desktops.event_desktopswitch(host.switch(2))

    assert host.count == 5
    assert host.writes == []


@pytest.mark.asyncio
async def test_failed_removal_stops_compaction(host, desktops, five_desktops, mocker):
    host.add_window("a", 0)
    host.add_window("b", 4)
    mocker.patch.object(host, "remove_last_desktop", return_value=False)

    with pytest.raises(DyndeskError):
        await desktops.run_compact()

    assert host.count == 5
    assert host.appended == 0
    assert host.membership("b") == [3]
