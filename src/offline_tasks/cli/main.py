# src/offline_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the sync engine on a
background event loop, then runs the console REPL in the main thread
(or just waits for a signal when the console is disabled).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..connectors.engine_runner import start_engine_in_background
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _print_notification(text: str) -> None:
    print(f"\n{text}", flush=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings, emit=_print_notification)

    runner = start_engine_in_background(state)
    if runner is None:
        logger.error("Sync engine failed to start.")
        return

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    # The console handles Ctrl+C itself (KeyboardInterrupt inside input()).
    if not settings.console_enabled:
        try:
            signal.signal(signal.SIGINT, _handle_signal)
            signal.signal(signal.SIGTERM, _handle_signal)
        except (ValueError, OSError):
            # Some platforms may not support SIGTERM, etc.
            pass

    try:
        if settings.console_enabled:
            run_console_loop(state, runner)
            stop_main.set()
        else:
            logger.info("Console disabled. Running sync engine only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        runner.stop()
        runner.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
