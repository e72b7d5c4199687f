# src/offline_tasks/tasks/task_api.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..core.events import TasksChanged
from ..core.state import AppState
from .task_models import Location, SyncSummary, Task, new_task, sort_for_display

logger = logging.getLogger(__name__)


async def create_task(
    state: AppState,
    *,
    title: str,
    scheduled_time: str = "",
    done: bool = False,
    location: Location | None = None,
) -> tuple[Task, SyncSummary | None]:
    """
    Creation flow: persist locally (unsynced), announce the mutation, then
    sync opportunistically if online.

    Location is optional input; None when it could not be captured.
    Raises ValueError for bad input and StorageError if the local write fails.
    """
    task = new_task(title, scheduled_time=scheduled_time, done=done, location=location)
    state.task_store.put(task)
    logger.info("Task created id=%s", task.id)

    try:
        state.notifier.task_created(task)
    except Exception:
        logger.exception("Notifier.task_created failed")

    await state.bus.publish(TasksChanged(task_id=task.id))
    summary = await state.triggers.after_task_created(task)
    return task, summary


def list_tasks(state: AppState) -> list[Task]:
    """Local tasks, newest first."""
    return state.triggers.load_tasks()


def export_tasks_json(tasks: list[Task], path: str | Path) -> Path:
    """Write tasks (newest first) as a JSON array of wire records."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = [t.to_record() for t in sort_for_display(tasks)]
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(records, ensure_ascii=False, indent=2), "utf-8")
    os.replace(tmp, path)
    logger.info("Exported %d task(s) to %s", len(records), path)
    return path
