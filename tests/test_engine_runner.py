# tests/test_engine_runner.py

from __future__ import annotations

from types import SimpleNamespace

from offline_tasks.connectors.engine_runner import start_engine_in_background
from offline_tasks.core.errors import StorageError


class _Store:
    def __init__(self, fail_open: bool = False) -> None:
        self.fail_open = fail_open
        self.closed = False

    def open(self) -> _Store:
        if self.fail_open:
            raise StorageError("cannot open task store")
        return self

    def close(self) -> None:
        self.closed = True


class _Triggers:
    def __init__(self) -> None:
        self.started = 0

    async def startup(self) -> None:
        self.started += 1


class _Remote:
    async def aclose(self) -> None:
        return None


def _state(store: _Store) -> SimpleNamespace:
    return SimpleNamespace(
        settings=SimpleNamespace(probe_interval_seconds=0.0),
        task_store=store,
        triggers=_Triggers(),
        remote=_Remote(),
    )


def test_unopenable_store_returns_no_runner() -> None:
    state = _state(_Store(fail_open=True))

    assert start_engine_in_background(state) is None  # type: ignore[arg-type]
    assert state.triggers.started == 0


def test_runner_runs_startup_and_stops_cleanly() -> None:
    store = _Store()
    state = _state(store)

    runner = start_engine_in_background(state)  # type: ignore[arg-type]
    assert runner is not None

    async def ping() -> str:
        return "pong"

    assert runner.call(ping(), timeout=5.0) == "pong"
    assert state.triggers.started == 1

    runner.stop()
    runner.join(timeout=5.0)
    assert not runner.thread.is_alive()
    assert store.closed is True
