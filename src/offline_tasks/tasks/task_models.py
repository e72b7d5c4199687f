# src/offline_tasks/tasks/task_models.py

from __future__ import annotations

import re
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True, frozen=True)
class Location:
    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: Any) -> Location | None:
        if not isinstance(data, dict):
            return None
        try:
            return cls(lat=float(data["lat"]), lng=float(data["lng"]))
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(slots=True, frozen=True)
class Task:
    """
    A single to-do item.

    Content fields never change after creation. The only transition is
    synced False -> True, done by the sync orchestrator after the remote
    store acknowledged this exact record.
    """

    id: str
    title: str
    scheduled_time: str
    done: bool
    last_updated: int  # ms since epoch, display ordering only
    synced: bool = False
    location: Location | None = None

    def mark_synced(self) -> Task:
        return replace(self, synced=True)

    def to_record(self) -> dict[str, Any]:
        """Wire shape shared by the local and the remote store."""
        return {
            "id": self.id,
            "title": self.title,
            "scheduledTime": self.scheduled_time,
            "done": self.done,
            "lastUpdated": self.last_updated,
            "synced": self.synced,
            "location": self.location.to_dict() if self.location else None,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> Task:
        task_id = data.get("id")
        title = data.get("title")
        if not task_id or not isinstance(task_id, str):
            raise ValueError("task record has no id")
        if title is None:
            raise ValueError(f"task record {task_id} has no title")
        return cls(
            id=task_id,
            title=str(title),
            scheduled_time=str(data.get("scheduledTime") or ""),
            done=bool(data.get("done", False)),
            last_updated=int(data.get("lastUpdated") or 0),
            synced=bool(data.get("synced", False)),
            location=Location.from_dict(data.get("location")),
        )


@dataclass(slots=True, frozen=True)
class SyncSummary:
    synced_count: int
    total_unsynced: int

    @property
    def failed_count(self) -> int:
        return self.total_unsynced - self.synced_count

    def to_dict(self) -> dict[str, int]:
        return {"syncedCount": self.synced_count, "totalUnsynced": self.total_unsynced}


def validate_scheduled_time(value: str) -> str:
    """Accept "" or a 24h "HH:MM" string; return it stripped."""
    value = (value or "").strip()
    if value and not _HHMM_RE.match(value):
        raise ValueError(f"scheduled time must be HH:MM, got {value!r}")
    return value


def new_task(
    title: str,
    *,
    scheduled_time: str = "",
    done: bool = False,
    location: Location | None = None,
    created_ms: int | None = None,
) -> Task:
    if not title or not title.strip():
        raise ValueError("title is required")
    return Task(
        id=str(uuid.uuid4()),
        title=title.strip(),
        scheduled_time=validate_scheduled_time(scheduled_time),
        done=bool(done),
        last_updated=now_ms() if created_ms is None else int(created_ms),
        synced=False,
        location=location,
    )


def pending_count(tasks: Iterable[Task]) -> int:
    return sum(1 for t in tasks if not t.done)


def sort_for_display(tasks: Iterable[Task]) -> list[Task]:
    """Newest first by last_updated."""
    return sorted(tasks, key=lambda t: t.last_updated, reverse=True)
