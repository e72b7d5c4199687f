# src/offline_tasks/sync/connectivity.py

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..core.events import ConnectivityChanged, EventBus

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """
    Online/offline signal.

    set_online() publishes ConnectivityChanged only on an edge; repeating
    the current state is a no-op. run() polls a TCP probe and feeds the
    result into set_online(); cancel the task to stop it.
    """

    def __init__(
        self,
        bus: EventBus,
        *,
        initial_online: bool = False,
        probe_host: str = "1.1.1.1",
        probe_port: int = 53,
        probe_timeout_seconds: float = 3.0,
    ) -> None:
        self._bus = bus
        self._online = bool(initial_online)
        self.probe_host = probe_host
        self.probe_port = int(probe_port)
        self.probe_timeout_seconds = float(probe_timeout_seconds)

    @property
    def is_online(self) -> bool:
        return self._online

    async def set_online(self, value: bool) -> bool:
        """Return True if the state actually changed."""
        value = bool(value)
        if value == self._online:
            return False
        self._online = value
        logger.info("Connectivity -> %s", "online" if value else "offline")
        await self._bus.publish(ConnectivityChanged(online=value))
        return True

    async def probe(self) -> bool:
        try:
            _reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.probe_host, self.probe_port),
                timeout=self.probe_timeout_seconds,
            )
        except (OSError, asyncio.TimeoutError):
            logger.debug("Probe %s:%s unreachable", self.probe_host, self.probe_port)
            return False
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()
        return True

    async def run(self, *, interval_seconds: float = 15.0) -> None:
        sleep_s = max(0.5, float(interval_seconds))
        while True:
            await self.set_online(await self.probe())
            await asyncio.sleep(sleep_s)
