# src/offline_tasks/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from ..core.errors import StorageError
from .task_models import Location, Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite local task store (source of truth while offline).

    The handle is explicit: construct it, open() it, pass it where needed,
    close() it on shutdown. It can also be used as a context manager.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Writes are full-record upserts keyed by id. The synced column is merged
    with MAX(), so a record that reached the remote store can never be
    written back as unsynced.

    Every sqlite3 failure (and any use of a closed store) is raised as
    StorageError.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> TaskStore:
        if self._conn is not None:
            return self
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            # Accessed only from the event loop thread; creation may happen elsewhere.
            conn = sqlite3.connect(str(self._db_path), timeout=30.0, check_same_thread=False)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"cannot open task store at {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        self._conn = conn
        try:
            self._ensure_schema()
            total = self.count_tasks()
        except StorageError:
            self.close()
            raise
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)
        return self

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        with contextlib.suppress(sqlite3.Error):
            conn.close()
        logger.debug("TaskStore closed db=%s", self._db_path)

    def __enter__(self) -> TaskStore:
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---- low-level helpers ----

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _cursor(self, op: str) -> Iterator[sqlite3.Cursor]:
        if self._conn is None:
            raise StorageError(f"task store is not open ({op})")
        try:
            cur = self._conn.cursor()
            yield cur
            self._conn.commit()
        except sqlite3.Error as exc:
            with contextlib.suppress(sqlite3.Error):
                self._conn.rollback()
            raise StorageError(f"{op} failed: {exc}") from exc

    def _ensure_schema(self) -> None:
        with self._cursor("ensure_schema") as cur:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    scheduled_time TEXT NOT NULL DEFAULT '',
                    done INTEGER NOT NULL DEFAULT 0,
                    last_updated INTEGER NOT NULL DEFAULT 0,
                    synced INTEGER NOT NULL DEFAULT 0,
                    location_lat REAL,
                    location_lng REAL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("scheduled_time", "TEXT NOT NULL DEFAULT ''")
            add_col("done", "INTEGER NOT NULL DEFAULT 0")
            add_col("last_updated", "INTEGER NOT NULL DEFAULT 0")
            add_col("synced", "INTEGER NOT NULL DEFAULT 0")
            add_col("location_lat", "REAL")
            add_col("location_lng", "REAL")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_synced ON tasks(synced)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_last_updated ON tasks(last_updated)")

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        location = None
        if row["location_lat"] is not None and row["location_lng"] is not None:
            location = Location(lat=float(row["location_lat"]), lng=float(row["location_lng"]))
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            scheduled_time=str(row["scheduled_time"] or ""),
            done=bool(row["done"]),
            last_updated=int(row["last_updated"] or 0),
            synced=bool(row["synced"]),
            location=location,
        )

    # ---- public API ----

    def put(self, task: Task) -> None:
        """Upsert the full record by id."""
        loc = task.location
        with self._cursor("put") as cur:
            cur.execute(
                """
                INSERT INTO tasks(
                    id, title, scheduled_time, done, last_updated, synced,
                    location_lat, location_lng
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    scheduled_time = excluded.scheduled_time,
                    done = excluded.done,
                    last_updated = excluded.last_updated,
                    synced = MAX(tasks.synced, excluded.synced),
                    location_lat = excluded.location_lat,
                    location_lng = excluded.location_lng
                """,
                (
                    task.id,
                    task.title,
                    task.scheduled_time,
                    int(task.done),
                    int(task.last_updated),
                    int(task.synced),
                    loc.lat if loc else None,
                    loc.lng if loc else None,
                ),
            )
        logger.debug("Task stored id=%s synced=%s", task.id, task.synced)

    def get_all(self) -> list[Task]:
        """Every stored task, in no particular order."""
        with self._cursor("get_all") as cur:
            cur.execute("SELECT * FROM tasks")
            return [self._row_to_task(r) for r in cur.fetchall()]

    def get(self, task_id: str) -> Task | None:
        with self._cursor("get") as cur:
            cur.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None

    def list_for_display(self) -> list[Task]:
        """Newest first."""
        with self._cursor("list_for_display") as cur:
            cur.execute("SELECT * FROM tasks ORDER BY last_updated DESC, id ASC")
            return [self._row_to_task(r) for r in cur.fetchall()]

    def count_tasks(self) -> int:
        with self._cursor("count_tasks") as cur:
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
