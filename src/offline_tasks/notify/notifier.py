# src/offline_tasks/notify/notifier.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable

from ..core.errors import PermissionDeniedError
from ..tasks.task_models import SyncSummary, Task

logger = logging.getLogger(__name__)

Emitter = Callable[[str], None]


class ConsoleNotifier:
    """
    Console-side observer of the sync engine.

    - pending_count_changed: keeps the "badge" value (tasks not done)
    - sync_completed: analytics-style log line on every run, plus a
      best-effort user notification when something was synced
    - task_created: analytics-style log line

    User notifications need permission; without it they are dropped silently.
    """

    def __init__(self, *, emit: Emitter | None = None, notifications_enabled: bool = False) -> None:
        self._emit = emit
        self.notifications_enabled = notifications_enabled
        self.badge: int | None = None

    def pending_count_changed(self, count: int) -> None:
        if count == self.badge:
            return
        self.badge = count
        logger.debug("Pending badge -> %d", count)

    def sync_completed(self, summary: SyncSummary) -> None:
        logger.info(
            "sync_completed synced_count=%d total_unsynced=%d",
            summary.synced_count,
            summary.total_unsynced,
        )
        if summary.synced_count <= 0:
            return
        try:
            self._notify("Task sync", f"{summary.synced_count} task(s) synced successfully!")
        except PermissionDeniedError:
            logger.debug("Notification suppressed (no permission).")

    def task_created(self, task: Task) -> None:
        logger.info(
            "task_created has_time=%s has_location=%s is_completed=%s",
            bool(task.scheduled_time),
            task.location is not None,
            task.done,
        )
        with contextlib.suppress(PermissionDeniedError):
            self._notify("New task created", f"Task: {task.title}")

    def _notify(self, title: str, body: str) -> None:
        if not self.notifications_enabled:
            raise PermissionDeniedError("notifications are not permitted")
        if self._emit is None:
            return
        try:
            self._emit(f"[{title}] {body}")
        except Exception:
            logger.debug("Notification emit failed.", exc_info=True)
