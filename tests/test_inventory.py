"""Tests for the lock-guarded inventory registry."""

from __future__ import annotations

import asyncio

import pytest

from helpers import devices
from smartctl_exporter.core.inventory import InventoryRegistry


@pytest.mark.asyncio
async def test_replace_returns_previous_inventory() -> None:
    registry = InventoryRegistry(devices("sda"))

    previous = await registry.replace(devices("sdb", "sdc"))

    assert [device.canonical_name for device in previous] == ["sda"]
    assert [device.canonical_name for device in registry.peek()] == ["sdb", "sdc"]


@pytest.mark.asyncio
async def test_replace_stores_an_immutable_copy() -> None:
    registry = InventoryRegistry()
    source = list(devices("sda"))

    await registry.replace(source)
    source.append(devices("sdb")[0])

    assert isinstance(registry.peek(), tuple)
    assert len(registry.peek()) == 1


@pytest.mark.asyncio
async def test_with_devices_accepts_sync_and_async_callables() -> None:
    registry = InventoryRegistry(devices("sda", "sdb"))

    async def _count(inventory):
        await asyncio.sleep(0)
        return len(inventory)

    assert await registry.with_devices(len) == 2
    assert await registry.with_devices(_count) == 2


@pytest.mark.asyncio
async def test_with_devices_releases_lock_on_error() -> None:
    registry = InventoryRegistry(devices("sda"))

    def _fail(inventory):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await registry.with_devices(_fail)

    assert registry.locked is False


@pytest.mark.asyncio
async def test_replace_waits_for_in_progress_pass() -> None:
    old = devices("sda", "sdb", "sdc")
    new = devices("nvme0")
    registry = InventoryRegistry(old)
    started = asyncio.Event()
    release = asyncio.Event()
    observed: list[str] = []

    async def _slow_pass(inventory):
        started.set()
        for device in inventory:
            await release.wait()
            observed.append(device.canonical_name)
        return inventory

    pass_task = asyncio.create_task(registry.with_devices(_slow_pass))
    await started.wait()

    replace_task = asyncio.create_task(registry.replace(new))
    await asyncio.sleep(0)
    assert not replace_task.done()
    assert registry.peek() == old

    release.set()
    seen = await pass_task
    await replace_task

    assert seen == old
    assert observed == ["sda", "sdb", "sdc"]
    assert registry.peek() == new


@pytest.mark.asyncio
async def test_passes_see_whole_old_or_whole_new_inventory() -> None:
    old = devices("sda", "sdb")
    new = devices("sdc", "sdd", "sde")
    registry = InventoryRegistry(old)
    snapshots: list[list[str]] = []

    async def _record(inventory):
        names = []
        for device in inventory:
            await asyncio.sleep(0)
            names.append(device.canonical_name)
        snapshots.append(names)

    await asyncio.gather(
        *(registry.with_devices(_record) for _ in range(5)),
        registry.replace(new),
        *(registry.with_devices(_record) for _ in range(5)),
    )

    assert len(snapshots) == 10
    for names in snapshots:
        assert names in (["sda", "sdb"], ["sdc", "sdd", "sde"])
