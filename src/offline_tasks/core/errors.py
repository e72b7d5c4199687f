# src/offline_tasks/core/errors.py

"""
Error taxonomy shared by the stores and the sync engine.

Library exceptions (sqlite3, httpx) are translated into these at the store
boundary so the orchestrator only has to know about domain failures.
"""

from __future__ import annotations


class TaskSyncError(Exception):
    """Base class for all offline_tasks errors."""


class StorageError(TaskSyncError):
    """Local durable medium is unavailable, full, or the store is closed."""


class NetworkError(TaskSyncError):
    """Remote store unreachable or the transport failed."""


class RemoteRejectedError(NetworkError):
    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(TaskSyncError):
    """No identity at push time, or the remote refused the credentials."""


class PermissionDeniedError(TaskSyncError):
    """
    Non-fatal: an optional capability (notifications, location) was withheld.

    Callers degrade by treating the optional feature as absent.
    """
