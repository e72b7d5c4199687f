# src/offline_tasks/sync/background.py

from __future__ import annotations

"""
Deferred background sync registrations.

A named routine (normally "sync-tasks") is registered while offline and
fired once when connectivity comes back, or when the host calls fire().
Firing posts a SyncRequested message on the bus; whichever app context is
alive picks it up and runs the sync entry point. Registrations are one-shot
and survive restarts (JSON file next to the task database).
"""

import contextlib
import json
import logging
import os
from pathlib import Path

from ..core.events import ConnectivityChanged, EventBus, SyncRequested

logger = logging.getLogger(__name__)

SYNC_TASKS_TAG = "sync-tasks"


class BackgroundSyncRegistry:
    def __init__(self, bus: EventBus, path: str | Path | None = None) -> None:
        self._bus = bus
        self._path = Path(path) if path is not None else None
        self._tags: list[str] = self._load()
        bus.subscribe(ConnectivityChanged, self._on_connectivity)

    @property
    def pending_tags(self) -> list[str]:
        return list(self._tags)

    def register(self, tag: str = SYNC_TASKS_TAG) -> None:
        if tag in self._tags:
            return
        self._tags.append(tag)
        self._save()
        logger.info("Background sync registered tag=%s", tag)

    async def fire(self, tag: str | None = None) -> int:
        """Deliver pending registrations (all, or just `tag`). Returns how many fired."""
        due = [t for t in self._tags if tag is None or t == tag]
        if not due:
            return 0
        self._tags = [t for t in self._tags if t not in due]
        self._save()
        for t in due:
            logger.info("Background sync firing tag=%s", t)
            await self._bus.publish(SyncRequested(tag=t))
        return len(due)

    async def _on_connectivity(self, event: ConnectivityChanged) -> None:
        if event.online:
            await self.fire()

    # ---- persistence ----

    def _load(self) -> list[str]:
        if self._path is None or not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to load background sync registrations from %s", self._path)
            return []
        tags = data.get("tags", []) if isinstance(data, dict) else []
        return [t for t in tags if isinstance(t, str) and t]

    def _save(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps({"tags": self._tags}, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except OSError:
            logger.exception("Failed to save background sync registrations to %s", self._path)
            with contextlib.suppress(OSError):
                self._path.with_suffix(".tmp").unlink()
