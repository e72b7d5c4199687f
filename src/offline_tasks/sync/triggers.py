# src/offline_tasks/sync/triggers.py

from __future__ import annotations

"""
Trigger subsystem: decides when the sync entry point runs.

Sources:
- offline -> online edge (ConnectivityChanged)
- application startup (always loads the list; syncs if already online)
- a task was just created (syncs if online, otherwise registers a
  deferred background sync)
- SyncRequested messages posted by the background registry

Every run goes through SingleFlightSync, so overlapping sources never
produce two concurrent runs. After a run the local list is reloaded and the
pending count republished.
"""

import logging

from ..core.errors import StorageError
from ..core.events import ConnectivityChanged, EventBus, SyncRequested, TasksChanged
from ..core.ports import LocalTaskRepo, Notifier
from ..tasks.task_models import SyncSummary, Task, pending_count
from .background import SYNC_TASKS_TAG, BackgroundSyncRegistry
from .connectivity import ConnectivityMonitor
from .orchestrator import SingleFlightSync

logger = logging.getLogger(__name__)


class TriggerSubsystem:
    def __init__(
        self,
        *,
        bus: EventBus,
        local: LocalTaskRepo,
        sync: SingleFlightSync,
        connectivity: ConnectivityMonitor,
        notifier: Notifier | None = None,
        background: BackgroundSyncRegistry | None = None,
    ) -> None:
        self._local = local
        self._sync = sync
        self._connectivity = connectivity
        self._notifier = notifier
        self._background = background
        self.tasks: list[Task] = []

        bus.subscribe(ConnectivityChanged, self._on_connectivity)
        bus.subscribe(SyncRequested, self._on_sync_requested)
        bus.subscribe(TasksChanged, self._on_tasks_changed)

    @property
    def is_online(self) -> bool:
        return self._connectivity.is_online

    # ---- entry points ----

    def load_tasks(self) -> list[Task]:
        """Reload the display list (newest first) and push the pending count."""
        self.tasks = self._local.list_for_display()
        if self._notifier is not None:
            try:
                self._notifier.pending_count_changed(pending_count(self.tasks))
            except Exception:
                logger.exception("Notifier.pending_count_changed failed")
        return self.tasks

    async def startup(self) -> SyncSummary | None:
        self.load_tasks()
        logger.info("Startup: %d task(s) loaded, online=%s", len(self.tasks), self.is_online)
        if self.is_online:
            return await self.sync_and_reload("startup")
        return None

    async def after_task_created(self, task: Task) -> SyncSummary | None:
        if self.is_online:
            return await self.sync_and_reload("task-created")
        if self._background is not None:
            self._background.register(SYNC_TASKS_TAG)
        logger.info("Task %s stored offline; sync deferred", task.id)
        return None

    async def sync_and_reload(self, reason: str) -> SyncSummary:
        """Run (or join) a sync, then reload the list. StorageError propagates."""
        summary = await self._sync.request(reason)
        self.load_tasks()
        return summary

    # ---- bus handlers ----

    async def _on_connectivity(self, event: ConnectivityChanged) -> None:
        try:
            if event.online:
                await self.sync_and_reload("online")
            else:
                self.load_tasks()
        except StorageError:
            logger.exception("Local store failure while handling connectivity change")

    async def _on_sync_requested(self, event: SyncRequested) -> None:
        if event.tag != SYNC_TASKS_TAG:
            logger.debug("Ignoring sync request for unknown tag=%s", event.tag)
            return
        try:
            await self.sync_and_reload(f"background:{event.tag}")
        except StorageError:
            logger.exception("Local store failure during background sync")

    async def _on_tasks_changed(self, event: TasksChanged) -> None:
        try:
            self.load_tasks()
        except StorageError:
            logger.exception("Local store failure while reloading tasks")
