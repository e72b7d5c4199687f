# src/offline_tasks/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..notify.notifier import ConsoleNotifier
from ..remote.remote_store import HttpRemoteTaskStore
from ..sync.background import BackgroundSyncRegistry
from ..sync.connectivity import ConnectivityMonitor
from ..sync.orchestrator import SingleFlightSync
from ..sync.triggers import TriggerSubsystem
from ..tasks.task_store import TaskStore
from .events import EventBus
from .ports import IdentityProvider


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    bus: EventBus
    task_store: TaskStore
    remote: HttpRemoteTaskStore
    identity: IdentityProvider
    notifier: ConsoleNotifier
    connectivity: ConnectivityMonitor
    background: BackgroundSyncRegistry
    sync: SingleFlightSync
    triggers: TriggerSubsystem
