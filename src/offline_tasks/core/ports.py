# src/offline_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the sync engine.

The engine depends on Protocols instead of concrete implementations.
This keeps storage/transport/identity swappable and makes testing easier.
"""

from dataclasses import dataclass
from typing import Protocol

from ..tasks.task_models import SyncSummary, Task


@dataclass(slots=True, frozen=True)
class Identity:
    """Authenticated principal the remote store writes on behalf of."""

    user_id: str
    token: str


class IdentityProvider(Protocol):
    def current_identity(self) -> Identity | None: ...


class LocalTaskRepo(Protocol):
    """Durable on-device store. Raises StorageError on any medium failure."""

    def put(self, task: Task) -> None: ...
    def get_all(self) -> list[Task]: ...
    def list_for_display(self) -> list[Task]: ...


class RemoteTaskRepo(Protocol):
    """
    Authoritative server-side collection.

    put() raises AuthError when identity is None or refused, NetworkError on
    transport failure or rejection.
    """

    async def put(self, task: Task, identity: Identity | None) -> None: ...
    async def get_all(self, identity: Identity | None) -> list[Task]: ...


class Notifier(Protocol):
    """Observer of list mutations and sync outcomes. Never called from inside the push loop."""

    def pending_count_changed(self, count: int) -> None: ...
    def sync_completed(self, summary: SyncSummary) -> None: ...
