# src/offline_tasks/core/events.py

from __future__ import annotations

"""
In-process event channel.

Platform sources (connectivity probe, background sync registry, the
creation flow) publish here; the trigger subsystem subscribes. Nothing in
the sync engine talks to a platform API directly.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ConnectivityChanged:
    online: bool


@dataclass(slots=True, frozen=True)
class SyncRequested:
    """Message posted to the live app context: run the sync entry point."""

    tag: str = "sync-tasks"


@dataclass(slots=True, frozen=True)
class TasksChanged:
    """The local task list was mutated."""

    task_id: str | None = None


E = TypeVar("E")
Handler = Callable[[Any], Awaitable[None]]


class EventBus:
    """
    Minimal async pub/sub keyed by event class.

    publish() awaits handlers one by one in subscription order. A failing
    handler is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = {}

    def subscribe(self, event_type: type[E], handler: Callable[[E], Awaitable[None]]) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type[E], handler: Callable[[E], Awaitable[None]]) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: object) -> None:
        handlers = list(self._handlers.get(type(event), []))
        logger.debug("publish %r -> %d handler(s)", event, len(handlers))
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception("Event handler failed for %r", event)
