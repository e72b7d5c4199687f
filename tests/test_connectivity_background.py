# tests/test_connectivity_background.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from offline_tasks.core.events import ConnectivityChanged, EventBus, SyncRequested
from offline_tasks.sync.background import SYNC_TASKS_TAG, BackgroundSyncRegistry
from offline_tasks.sync.connectivity import ConnectivityMonitor


def _record(bus: EventBus, event_type: type) -> list:
    seen: list = []

    async def handler(event) -> None:
        seen.append(event)

    bus.subscribe(event_type, handler)
    return seen


@pytest.mark.asyncio
async def test_connectivity_publishes_only_on_edges() -> None:
    bus = EventBus()
    seen = _record(bus, ConnectivityChanged)
    mon = ConnectivityMonitor(bus, initial_online=False)

    assert await mon.set_online(False) is False
    assert await mon.set_online(True) is True
    assert await mon.set_online(True) is False
    assert await mon.set_online(False) is True

    assert seen == [ConnectivityChanged(online=True), ConnectivityChanged(online=False)]


@pytest.mark.asyncio
async def test_probe_reports_offline_for_unreachable_endpoint() -> None:
    # Port 9 on localhost is almost never listening; connection is refused quickly.
    mon = ConnectivityMonitor(EventBus(), probe_host="127.0.0.1", probe_port=9, probe_timeout_seconds=1.0)

    assert await mon.probe() is False


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others() -> None:
    bus = EventBus()

    async def broken(_event) -> None:
        raise RuntimeError("boom")

    bus.subscribe(ConnectivityChanged, broken)
    seen = _record(bus, ConnectivityChanged)

    await bus.publish(ConnectivityChanged(online=True))

    assert seen == [ConnectivityChanged(online=True)]


@pytest.mark.asyncio
async def test_registration_fires_once_on_reconnect(tmp_path: Path) -> None:
    bus = EventBus()
    reg = BackgroundSyncRegistry(bus, tmp_path / "bg.json")
    seen = _record(bus, SyncRequested)

    reg.register()
    reg.register()  # duplicates collapse
    await bus.publish(ConnectivityChanged(online=False))
    assert seen == []

    await bus.publish(ConnectivityChanged(online=True))
    await bus.publish(ConnectivityChanged(online=True))

    assert seen == [SyncRequested(tag=SYNC_TASKS_TAG)]
    assert reg.pending_tags == []


@pytest.mark.asyncio
async def test_registrations_survive_restart(tmp_path: Path) -> None:
    path = tmp_path / "bg.json"
    BackgroundSyncRegistry(EventBus(), path).register(SYNC_TASKS_TAG)

    assert json.loads(path.read_text("utf-8")) == {"tags": [SYNC_TASKS_TAG]}

    bus = EventBus()
    reg = BackgroundSyncRegistry(bus, path)
    seen = _record(bus, SyncRequested)

    assert reg.pending_tags == [SYNC_TASKS_TAG]
    assert await reg.fire(SYNC_TASKS_TAG) == 1
    assert seen == [SyncRequested(tag=SYNC_TASKS_TAG)]
    assert await reg.fire() == 0
    assert BackgroundSyncRegistry(EventBus(), path).pending_tags == []


def test_corrupt_registration_file_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "bg.json"
    path.write_text("{not json", "utf-8")

    assert BackgroundSyncRegistry(EventBus(), path).pending_tags == []
