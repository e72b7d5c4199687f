# src/offline_tasks/sync/orchestrator.py

from __future__ import annotations

"""
Sync orchestrator.

One run:
- reads every task from the local store,
- pushes the unsynced ones to the remote store, one at a time,
- marks each acknowledged task synced in the local store,
- reports a SyncSummary to the notifier.

A failed push is logged and skipped; the task stays unsynced and is picked
up again by the next run. There is no in-run retry, backoff or attempt cap.
Local store failures (StorageError) abort the run and reach the caller.

SingleFlightSync wraps the orchestrator so that at most one run is in
flight; requests arriving during a run coalesce into one follow-up run.
"""

import asyncio
import logging

from ..core.errors import AuthError, NetworkError
from ..core.ports import IdentityProvider, LocalTaskRepo, Notifier, RemoteTaskRepo
from ..tasks.task_models import SyncSummary, Task

logger = logging.getLogger(__name__)


def _push_order(tasks: list[Task]) -> list[Task]:
    # Oldest first; id breaks ties so the order is deterministic.
    return sorted(tasks, key=lambda t: (t.last_updated, t.id))


class SyncOrchestrator:
    def __init__(
        self,
        local: LocalTaskRepo,
        remote: RemoteTaskRepo,
        identity: IdentityProvider,
        notifier: Notifier | None = None,
    ) -> None:
        self._local = local
        self._remote = remote
        self._identity = identity
        self._notifier = notifier

    async def run_once(self) -> SyncSummary:
        unsynced = _push_order([t for t in self._local.get_all() if not t.synced])
        total = len(unsynced)
        synced_count = 0

        if total:
            logger.info("Sync run started: %d unsynced task(s)", total)

        for task in unsynced:
            identity = self._identity.current_identity()
            try:
                await self._remote.put(task, identity)
            except AuthError as exc:
                logger.warning("Task %s not synced (auth): %s", task.id, exc)
                continue
            except NetworkError as exc:
                logger.warning("Task %s not synced (network): %s", task.id, exc)
                continue
            except Exception:
                logger.exception("Task %s not synced (unexpected remote error)", task.id)
                continue

            # Only after the remote acknowledged this exact record.
            self._local.put(task.mark_synced())
            synced_count += 1
            logger.debug("Task %s synced", task.id)

        summary = SyncSummary(synced_count=synced_count, total_unsynced=total)
        logger.info("Sync run finished: %d/%d synced", synced_count, total)
        self._report(summary)
        return summary

    def _report(self, summary: SyncSummary) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.sync_completed(summary)
        except Exception:
            logger.exception("Notifier.sync_completed failed")


class SingleFlightSync:
    """
    At-most-one-run guard around SyncOrchestrator.run_once().

    - request() with no active run starts one.
    - request() during an active run joins the queued follow-up run; any
      number of such requests produce one follow-up.
    - Each caller gets the outcome of the first run that started after its
      request: the summary, or the exception that run raised. A failed run
      does not drop a queued follow-up.

    Callers being cancelled does not cancel the run.
    """

    def __init__(self, orchestrator: SyncOrchestrator) -> None:
        self._orchestrator = orchestrator
        self._active: asyncio.Task[None] | None = None
        self._current: asyncio.Future[SyncSummary] | None = None
        self._next: asyncio.Future[SyncSummary] | None = None
        self.runs_completed = 0

    @property
    def is_running(self) -> bool:
        return self._active is not None and not self._active.done()

    async def request(self, reason: str = "manual") -> SyncSummary:
        loop = asyncio.get_running_loop()
        if self.is_running:
            if self._next is None:
                self._next = loop.create_future()
            waiter = self._next
            logger.info("Sync already running; follow-up queued (reason=%s)", reason)
        else:
            logger.info("Sync requested (reason=%s)", reason)
            waiter = self._current = loop.create_future()
            self._active = asyncio.create_task(self._drain())

        return await asyncio.shield(waiter)

    async def _drain(self) -> None:
        while self._current is not None:
            fut = self._current
            try:
                summary = await self._orchestrator.run_once()
            except asyncio.CancelledError:
                for pending in (fut, self._next):
                    if pending is not None:
                        pending.cancel()
                self._current = self._next = None
                raise
            except Exception as exc:
                if self._next is not None:
                    logger.error("Sync run failed, running queued follow-up: %s", exc)
                fut.set_exception(exc)
                # All waiters may be gone; nobody else would retrieve it.
                fut.exception()
            else:
                fut.set_result(summary)
            finally:
                self.runs_completed += 1

            self._current, self._next = self._next, None
            if self._current is not None:
                logger.info("Running queued follow-up sync")
