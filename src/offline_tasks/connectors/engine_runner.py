# src/offline_tasks/connectors/engine_runner.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.state import AppState

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_engine(state: AppState, stop_event: asyncio.Event, ready: threading.Event) -> None:
    """
    Sync engine lifecycle (async):

    open store -> startup (load + maybe sync) -> connectivity probe -> wait -> close

    Shutdown model:
    - main thread sets stop_event via loop.call_soon_threadsafe(stop_event.set)
    """
    settings = state.settings
    probe_task: asyncio.Task[None] | None = None

    # A store that cannot be opened stops the engine before startup.
    state.task_store.open()

    try:
        try:
            await state.triggers.startup()
        except Exception:
            logger.exception("Startup sync failed.")
        ready.set()

        interval = float(getattr(settings, "probe_interval_seconds", 0.0) or 0.0)
        if interval > 0:
            probe_task = asyncio.create_task(state.connectivity.run(interval_seconds=interval))
            logger.info("Connectivity probe started (every %.1fs).", interval)
        else:
            logger.info("Connectivity probe disabled; use /online and /offline.")

        await stop_event.wait()

    except asyncio.CancelledError:
        logger.info("Sync engine cancelled.")
    finally:
        ready.set()
        if probe_task is not None:
            probe_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await probe_task

        with contextlib.suppress(Exception):
            await state.remote.aclose()

        state.task_store.close()
        logger.info("Sync engine stopped.")


@dataclass
class EngineBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def call(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run a coroutine on the engine loop and wait for its result."""
        fut = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return fut.result(timeout=timeout)

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal engine stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_engine_in_background(state: AppState) -> EngineBackgroundRunner | None:
    """
    Start the sync engine on its own event loop in a background thread.

    The console REPL is blocking (input()), so it stays in the main thread
    and hands work to the engine loop through EngineBackgroundRunner.call().
    All engine code runs on that single loop.
    """
    started = threading.Event()
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        started.set()

        try:
            loop.run_until_complete(_run_engine(state, stop_event, ready))
        except Exception as exc:
            logger.exception("Sync engine failed.")
            holder["error"] = exc
            ready.set()
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="sync-engine", daemon=True)
    t.start()

    started.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Engine thread did not initialize properly.")
        return None

    # Startup may include a first sync; give it a bounded head start.
    ready.wait(timeout=30.0)
    if "error" in holder or not t.is_alive():
        logger.error("Engine thread exited during startup.")
        return None

    logger.info("Sync engine background thread started.")
    return EngineBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
