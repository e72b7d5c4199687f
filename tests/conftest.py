# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from offline_tasks.auth.identity import StaticIdentityProvider
from offline_tasks.core.events import EventBus
from offline_tasks.core.ports import Identity
from offline_tasks.core.state import AppState
from offline_tasks.sync.background import BackgroundSyncRegistry
from offline_tasks.sync.connectivity import ConnectivityMonitor
from offline_tasks.sync.orchestrator import SingleFlightSync, SyncOrchestrator
from offline_tasks.sync.triggers import TriggerSubsystem
from offline_tasks.tasks.task_store import TaskStore

from .fakes import FakeRemote, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        background_sync_path=tmp_path / "background_sync.json",
        user_id="u1",
        auth_token="tok",
        notifications_enabled=False,
        probe_interval_seconds=0.0,
    )


@pytest.fixture()
def task_store(settings: SimpleNamespace):
    store = TaskStore(settings.tasks_db_path).open()
    yield store
    store.close()


@pytest.fixture()
def state(settings: SimpleNamespace, task_store: TaskStore) -> AppState:
    """
    AppState wired with deterministic fakes for the remote side.

    NOTE: We keep the real SQLite TaskStore here because its correctness is
    part of what we want to test.
    """
    bus = EventBus()
    identity = StaticIdentityProvider(Identity(user_id=settings.user_id, token=settings.auth_token))
    notifier = RecordingNotifier()
    remote = FakeRemote()
    connectivity = ConnectivityMonitor(bus, initial_online=False)
    background = BackgroundSyncRegistry(bus, settings.background_sync_path)
    sync = SingleFlightSync(SyncOrchestrator(task_store, remote, identity, notifier))
    triggers = TriggerSubsystem(
        bus=bus,
        local=task_store,
        sync=sync,
        connectivity=connectivity,
        notifier=notifier,
        background=background,
    )
    return AppState(
        settings=settings,
        bus=bus,
        task_store=task_store,
        remote=remote,  # type: ignore[arg-type]
        identity=identity,
        notifier=notifier,  # type: ignore[arg-type]
        connectivity=connectivity,
        background=background,
        sync=sync,
        triggers=triggers,
    )
