# tests/test_triggers.py

from __future__ import annotations

import pytest

from offline_tasks.auth.identity import StaticIdentityProvider
from offline_tasks.core.events import EventBus, SyncRequested
from offline_tasks.core.ports import Identity
from offline_tasks.sync.background import SYNC_TASKS_TAG, BackgroundSyncRegistry
from offline_tasks.sync.connectivity import ConnectivityMonitor
from offline_tasks.sync.orchestrator import SingleFlightSync, SyncOrchestrator
from offline_tasks.sync.triggers import TriggerSubsystem

from .fakes import FakeLocalStore, FakeRemote, RecordingNotifier, make_task


class Harness:
    """Trigger subsystem wired to in-memory fakes."""

    def __init__(self, tasks, *, online: bool = False) -> None:
        self.bus = EventBus()
        self.local = FakeLocalStore(tasks)
        self.remote = FakeRemote()
        self.notifier = RecordingNotifier()
        self.connectivity = ConnectivityMonitor(self.bus, initial_online=online)
        self.background = BackgroundSyncRegistry(self.bus)
        self.sync = SingleFlightSync(
            SyncOrchestrator(
                self.local, self.remote, StaticIdentityProvider(Identity("u1", "t")), self.notifier
            )
        )
        self.triggers = TriggerSubsystem(
            bus=self.bus,
            local=self.local,
            sync=self.sync,
            connectivity=self.connectivity,
            notifier=self.notifier,
            background=self.background,
        )


@pytest.mark.asyncio
async def test_startup_offline_loads_list_without_syncing() -> None:
    h = Harness(
        [make_task("a", done=False, last_updated=2), make_task("b", done=True, last_updated=1)],
        online=False,
    )

    assert await h.triggers.startup() is None

    assert h.remote.attempts == []
    assert h.notifier.pending_counts == [1]
    assert [t.id for t in h.triggers.tasks] == ["a", "b"]


@pytest.mark.asyncio
async def test_startup_online_syncs_and_reloads() -> None:
    h = Harness([make_task("a")], online=True)

    summary = await h.triggers.startup()

    assert summary is not None and summary.synced_count == 1
    assert h.local.tasks["a"].synced is True
    assert all(t.synced for t in h.triggers.tasks)
    assert len(h.notifier.pending_counts) == 2


@pytest.mark.asyncio
async def test_offline_to_online_edge_triggers_one_run() -> None:
    h = Harness([make_task("a")], online=False)

    await h.connectivity.set_online(True)
    await h.connectivity.set_online(True)  # no edge, no run

    assert h.sync.runs_completed == 1
    assert h.local.tasks["a"].synced is True


@pytest.mark.asyncio
async def test_going_offline_only_reloads() -> None:
    h = Harness([make_task("a")], online=True)

    await h.connectivity.set_online(False)

    assert h.sync.runs_completed == 0
    assert h.notifier.pending_counts == [1]


@pytest.mark.asyncio
async def test_task_created_online_syncs_opportunistically() -> None:
    h = Harness([], online=True)
    task = make_task("new")
    h.local.put(task)

    summary = await h.triggers.after_task_created(task)

    assert summary is not None and summary.synced_count == 1
    assert h.background.pending_tags == []


@pytest.mark.asyncio
async def test_task_created_offline_defers_to_background_sync() -> None:
    h = Harness([], online=False)
    task = make_task("new")
    h.local.put(task)

    assert await h.triggers.after_task_created(task) is None
    assert h.background.pending_tags == [SYNC_TASKS_TAG]
    assert h.remote.attempts == []

    await h.connectivity.set_online(True)

    # Background fire and the connectivity edge each ran once, sequentially.
    assert h.sync.runs_completed == 2
    assert h.remote.attempts == ["new"]
    assert h.background.pending_tags == []
    assert h.local.tasks["new"].synced is True


@pytest.mark.asyncio
async def test_background_message_runs_sync_entry_point() -> None:
    h = Harness([make_task("a")], online=False)

    await h.bus.publish(SyncRequested(tag=SYNC_TASKS_TAG))
    await h.bus.publish(SyncRequested(tag="something-else"))

    assert h.sync.runs_completed == 1
    assert h.local.tasks["a"].synced is True


@pytest.mark.asyncio
async def test_storage_failure_on_reconnect_is_contained() -> None:
    h = Harness([make_task("a")], online=False)
    h.local.fail = True

    await h.connectivity.set_online(True)

    assert h.connectivity.is_online is True
    assert h.remote.attempts == []


@pytest.mark.asyncio
async def test_pending_count_tracks_done_flag_after_each_mutation() -> None:
    h = Harness([], online=False)
    h.triggers.load_tasks()

    for i, done in enumerate([False, True, False, False]):
        t = make_task(str(i), done=done, last_updated=i)
        h.local.put(t)
        h.triggers.load_tasks()

    assert h.notifier.pending_counts == [0, 1, 1, 2, 3]
