# src/offline_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (SQLite store, HTTP remote, identity,
  notifier, connectivity, background registry, sync engine) into AppState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..auth.identity import StaticIdentityProvider
from ..config import get_settings
from ..core.events import EventBus
from ..core.state import AppState
from ..notify.notifier import ConsoleNotifier
from ..remote.remote_store import HttpRemoteTaskStore
from ..sync.background import BackgroundSyncRegistry
from ..sync.connectivity import ConnectivityMonitor
from ..sync.orchestrator import SingleFlightSync, SyncOrchestrator
from ..sync.triggers import TriggerSubsystem
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.background_sync_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, emit: Callable[[str], None] | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().

    The task store is constructed but not opened; the engine runner opens it
    on the event loop.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    bus = EventBus()
    task_store = TaskStore(settings.tasks_db_path)
    remote = HttpRemoteTaskStore(
        settings.remote_base_url,
        timeout_seconds=settings.remote_timeout_seconds,
    )
    identity = StaticIdentityProvider.from_settings(settings)
    notifier = ConsoleNotifier(emit=emit, notifications_enabled=settings.notifications_enabled)
    connectivity = ConnectivityMonitor(
        bus,
        initial_online=settings.start_online,
        probe_host=settings.probe_host,
        probe_port=settings.probe_port,
        probe_timeout_seconds=settings.probe_timeout_seconds,
    )
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

    logger.debug("AppState wired (remote=%s, online=%s)", remote.base_url, connectivity.is_online)
    return AppState(
        settings=settings,
        bus=bus,
        task_store=task_store,
        remote=remote,
        identity=identity,
        notifier=notifier,
        connectivity=connectivity,
        background=background,
        sync=sync,
        triggers=triggers,
    )
