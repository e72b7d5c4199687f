# src/offline_tasks/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "offline-tasks.log"

_QUIET_APP_LOGGERS = {"offline_tasks.sync.connectivity"}
_HTTP_LOGGERS = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """Console gets app records; the probe loop, HTTP client and warnings only when serious."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("offline_tasks."):
            if name in _QUIET_APP_LOGGERS:
                return record.levelno >= logging.WARNING
            return True

        if name.startswith(_HTTP_LOGGERS):
            return record.levelno >= logging.WARNING

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/offline-tasks",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route records to a filtered stderr handler and to `<log_dir>/offline-tasks.log`.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    sync_log = logging.FileHandler(str(log_file), encoding="utf-8")
    sync_log.setLevel(file_level)
    sync_log.setFormatter(fmt)
    root.addHandler(sync_log)

    logging.captureWarnings(True)
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
