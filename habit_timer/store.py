"""
Snapshot persistence.

The whole app state is one JSON document kept in a single-row key/value table
of a SQLite file. Loads and saves run on one background worker, so they are
applied in the order they were requested and never overlap.
"""

import logging
import os
import sqlite3
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from habit_timer import codec
from habit_timer.config import DB_PATH
from habit_timer.errors import DecodeError, StorageError
from habit_timer.models import Snapshot

LOGGER = logging.getLogger(__name__)

SNAPSHOT_KEY = "useful.data"

ErrorHandler = Callable[[Exception], None]


class SnapshotStore:
    def __init__(self, db_path: str = DB_PATH):
        self.db_path = db_path
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="habit-store")

    # ---------- DB helpers ----------
    def get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS snapshot (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

    # ---------- Synchronous API ----------
    def read(self) -> Snapshot:
        """
        Load the saved snapshot. A missing file or an empty table is a fresh
        install and yields a default Snapshot.
        """
        if not os.path.exists(self.db_path):
            LOGGER.info("No snapshot at %s; starting fresh", self.db_path)
            return Snapshot()

        try:
            conn = self.get_conn()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open snapshot file {self.db_path}: {e}")
        try:
            row = conn.execute(
                "SELECT value FROM snapshot WHERE key = ?", (SNAPSHOT_KEY,)
            ).fetchone()
        except sqlite3.OperationalError as e:
            if "no such table" in str(e):
                return Snapshot()
            raise StorageError(f"Cannot read snapshot file {self.db_path}: {e}")
        except sqlite3.DatabaseError as e:
            raise DecodeError(f"Snapshot file {self.db_path} is not readable: {e}")
        finally:
            conn.close()

        if row is None:
            return Snapshot()
        snapshot = codec.decode(row["value"])
        LOGGER.info("Loaded snapshot with %d recorded action(s)", len(snapshot.actions))
        return snapshot

    def write(self, payload: str) -> None:
        """Store an encoded snapshot document, replacing the previous one."""
        try:
            conn = self.get_conn()
            try:
                self.init_db(conn)
                conn.execute(
                    "INSERT OR REPLACE INTO snapshot(key, value, updated_at) VALUES(?, ?, CURRENT_TIMESTAMP)",
                    (SNAPSHOT_KEY, payload),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot write snapshot file {self.db_path}: {e}")
        LOGGER.debug("Saved snapshot to %s", self.db_path)

    def discard(self) -> None:
        """Delete the snapshot file, whatever it contains."""
        try:
            if os.path.exists(self.db_path):
                os.remove(self.db_path)
        except OSError as e:
            raise StorageError(f"Cannot remove snapshot file {self.db_path}: {e}")
        LOGGER.warning("Removed snapshot file %s", self.db_path)

    # ---------- Background API ----------
    def load_async(self) -> "Future[Snapshot]":
        return self._executor.submit(self.read)

    def discard_async(self) -> Future:
        return self._executor.submit(self.discard)

    def save_async(self, snapshot: Snapshot, on_error: Optional[ErrorHandler] = None) -> Future:
        """
        Encode now, write on the worker. Failures go to `on_error`, or are
        logged when no handler is given.
        """
        payload = codec.encode(snapshot)
        try:
            future = self._executor.submit(self.write, payload)
        except RuntimeError as e:
            future = Future()
            future.set_exception(StorageError(f"Snapshot store is closed: {e}"))

        def _done(f: Future) -> None:
            error = f.exception()
            if error is None:
                return
            if on_error is not None:
                on_error(error)
            else:
                LOGGER.error("Saving snapshot failed: %s", error)

        future.add_done_callback(_done)
        return future

    def close(self) -> None:
        self._executor.shutdown(wait=True)
