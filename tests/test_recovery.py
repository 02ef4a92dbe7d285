import logging

import pytest

from inetmon.network_monitor.recovery import (
    RecoveryAttemptRecord,
    RecoveryManager,
    RecoveryPolicy,
)
from inetmon.network_monitor.services import NetworkManagerKind


def make_manager(controller, clock, **policy):
    return RecoveryManager(controller, clock=clock, policy=RecoveryPolicy(**policy))


@pytest.mark.asyncio
async def test_first_attempt_restarts_and_resets(controller, clock):
    manager = make_manager(controller, clock)

    assert await manager.try_reconnect() is True
    assert controller.calls == [
        "detect",
        "stop NetworkManager",
        "start NetworkManager",
        "is_active NetworkManager",
        "is_failed NetworkManager",
        "interfaces_up",
    ]
    assert clock.sleeps == [5.0, 10.0, 2.0]
    assert manager.record.consecutive_failures == 0
    assert manager.record.cooldown == 300


@pytest.mark.asyncio
async def test_cooldown_blocks_restart(controller, clock):
    manager = make_manager(controller, clock)
    start = clock.now()
    manager.record.last_attempt = start

    clock.current = start + 100
    assert await manager.try_reconnect() is False
    assert controller.calls == []
    assert manager.record.last_attempt == start

    clock.current = start + 301
    assert await manager.try_reconnect() is True
    assert controller.restarts == 1


@pytest.mark.asyncio
async def test_slot_claimed_before_restart(controller, clock):
    controller.stop_ok = False
    manager = make_manager(controller, clock)
    now = clock.now()

    assert await manager.try_reconnect() is False
    assert manager.record.last_attempt == now


@pytest.mark.asyncio
async def test_slot_claimed_even_if_restart_raises(controller, clock):
    async def explode(name):
        raise RuntimeError("dbus went away")

    controller.stop = explode
    manager = make_manager(controller, clock)
    now = clock.now()

    assert await manager.try_reconnect() is False
    assert manager.record.last_attempt == now
    assert manager.record.consecutive_failures == 1


async def fail_after_cooldown(manager, clock):
    clock.current = manager.record.last_attempt + manager.record.cooldown + 1
    return await manager.try_reconnect()


@pytest.mark.asyncio
async def test_backoff_doubles_after_three_failures(controller, clock):
    controller.start_ok = False
    manager = make_manager(controller, clock)

    assert await manager.try_reconnect() is False
    assert await fail_after_cooldown(manager, clock) is False
    assert manager.record.cooldown == 300
    assert manager.record.consecutive_failures == 2

    assert await fail_after_cooldown(manager, clock) is False
    assert manager.record.cooldown == 600

    assert await fail_after_cooldown(manager, clock) is False
    assert manager.record.cooldown == 1200
    assert manager.record.consecutive_failures == 4


@pytest.mark.asyncio
async def test_backoff_capped(controller, clock):
    controller.active = False
    manager = make_manager(controller, clock)

    await manager.try_reconnect()
    for _ in range(10):
        await fail_after_cooldown(manager, clock)
        assert manager.record.cooldown <= 3600
    assert manager.record.cooldown == 3600
    assert manager.record.consecutive_failures == 11


@pytest.mark.asyncio
async def test_success_resets_backoff(controller, clock):
    controller.interfaces = False
    manager = make_manager(controller, clock)

    await manager.try_reconnect()
    for _ in range(3):
        await fail_after_cooldown(manager, clock)
    assert manager.record.cooldown == 1200

    controller.make_healthy()
    assert await fail_after_cooldown(manager, clock) is True
    assert manager.record.consecutive_failures == 0
    assert manager.record.cooldown == 300


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "attr,value",
    [("stop_ok", False), ("start_ok", False), ("active", False), ("failed", True), ("interfaces", False)],
)
async def test_any_verification_step_failing_fails_attempt(controller, clock, attr, value):
    setattr(controller, attr, value)
    manager = make_manager(controller, clock)

    assert await manager.try_reconnect() is False
    assert manager.record.consecutive_failures == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind",
    [NetworkManagerKind.SYSTEMD_NETWORKD, NetworkManagerKind.NETPLAN, NetworkManagerKind.UNKNOWN],
)
async def test_unsupported_manager_skips_restart(controller, clock, kind):
    controller.manager = kind
    manager = make_manager(controller, clock)

    assert await manager.try_reconnect() is False
    assert controller.calls == ["detect"]
    assert manager.record.consecutive_failures == 0
    assert manager.record.last_attempt == clock.now()


@pytest.mark.asyncio
async def test_custom_service_name(controller, clock):
    manager = RecoveryManager(controller, clock=clock, service_name="network-manager")

    assert await manager.try_reconnect() is True
    assert "stop network-manager" in controller.calls
    assert controller.detected_with == "network-manager"
    assert "start network-manager" in controller.calls


@pytest.mark.asyncio
async def test_cooldown_warning_logged_once_per_attempt(controller, clock, caplog):
    controller.stop_ok = False
    manager = make_manager(controller, clock)
    await manager.try_reconnect()

    with caplog.at_level(logging.DEBUG, logger="inetmon.network_monitor.recovery"):
        clock.current += 60
        await manager.try_reconnect()
        clock.current += 60
        await manager.try_reconnect()

    cooldown = [r for r in caplog.records if "In cooldown period" in r.message]
    assert [r.levelno for r in cooldown] == [logging.WARNING, logging.DEBUG]
    assert "Next restart attempt in 240 seconds" in cooldown[0].message


def test_remaining_cooldown():
    record = RecoveryAttemptRecord(last_attempt=1000, cooldown=300)

    assert record.remaining_cooldown(1100) == 200
    assert record.remaining_cooldown(1400) == 0
    assert RecoveryAttemptRecord().remaining_cooldown(5) == 0
