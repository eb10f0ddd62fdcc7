"""SQLite connection and schema helpers shared by the clip catalog and the job store."""

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from services.errors import PersistenceError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS video_clips (
    id TEXT PRIMARY KEY,
    filename TEXT NOT NULL,
    location TEXT NOT NULL,
    time_of_day TEXT NOT NULL CHECK (time_of_day IN ('day', 'night', 'sunrise', 'sunset')),
    season TEXT NOT NULL CHECK (season IN ('spring', 'summer', 'autumn', 'winter')),
    duration REAL NOT NULL CHECK (duration > 0),
    tags_json TEXT NOT NULL DEFAULT '[]',
    storage_path TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS generated_videos (
    id TEXT PRIMARY KEY,
    user_parameters TEXT NOT NULL,
    clip_sequence TEXT NOT NULL,
    output_filename TEXT,
    status TEXT NOT NULL DEFAULT 'processing',
    created_at TEXT NOT NULL
);
"""


class Database:
    """
    Thin wrapper around a SQLite file.

    Every operation opens its own connection under a process-wide lock, so the
    object can be shared between the event loop and worker threads.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction; SQLite errors become PersistenceError."""
        with self._lock:
            try:
                conn = self._connect()
            except (sqlite3.Error, OSError) as exc:
                raise PersistenceError(f"Cannot open database {self._path}: {exc}") from exc
            try:
                with conn:
                    yield conn
            except sqlite3.Error as exc:
                raise PersistenceError(f"Database operation failed: {exc}") from exc
            finally:
                conn.close()

    def init_schema(self) -> None:
        with self.connection() as conn:
            conn.executescript(SCHEMA)
        logger.info("[database] Schema ready at %s", self._path)
