"""
SQLite persistence for wind measurements.

One row per sample, keyed by its epoch timestamp. The logger and the web
server open the same file; inside a process the connection is shared
between threads behind a lock.
"""
import logging
import os
import sqlite3
import threading

from wind_errors import NoDataAvailable, PersistenceError
from wind_measurement import Measurement, now_epoch

logger = logging.getLogger(__name__)


class MeasurementStore:
    def __init__(self, path):
        self.path = path
        if path != ":memory:":
            folder = os.path.dirname(os.path.abspath(path))
            os.makedirs(folder, exist_ok=True)
            if not os.path.exists(path):
                logger.warning("Creating database %s", path)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False, timeout=10)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open {path}: {e}") from e
        self.create_tables()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        with self._lock:
            self._conn.close()

    def _execute(self, sql, params=()):
        with self._lock:
            try:
                with self._conn:
                    cur = self._conn.execute(sql, params)
                    return cur.rowcount, cur.fetchall()
            except sqlite3.Error as e:
                raise PersistenceError(str(e)) from e

    def create_tables(self, force_delete=False):
        if force_delete:
            logger.warning("Force deleting tables")
            self._execute("DROP TABLE IF EXISTS wind")
        self._execute(
            "CREATE TABLE IF NOT EXISTS wind ("
            " ts REAL PRIMARY KEY,"
            " vel REAL NOT NULL,"
            " direction INTEGER NOT NULL)"
        )

    def insert(self, vel, direction=0):
        self.insert_at(now_epoch(), vel, direction)

    def insert_at(self, ts, vel, direction=0):
        logger.debug("Inserting: ts: %f, vel: %fm/s", ts, vel)
        self._execute("INSERT INTO wind (ts, vel, direction) VALUES (?, ?, ?)",
                      (ts, vel, direction))

    def _one(self, order):
        _, rows = self._execute(f"SELECT ts, vel, direction FROM wind ORDER BY ts {order} LIMIT 1")
        if not rows:
            raise NoDataAvailable("No data available in db yet")
        return Measurement(*rows[0])

    def latest(self):
        return self._one("DESC")

    def oldest(self):
        return self._one("ASC")

    def current(self, max_age=60):
        """Latest measurement, provided it is not older than max_age seconds."""
        m = self.latest()
        if now_epoch() - m.ts > max_age:
            raise NoDataAvailable(f"Latest measurement is older than {max_age}s")
        return m

    def range_since(self, duration, now=None):
        """All measurements newer than now - duration, oldest first."""
        if now is None:
            now = now_epoch()
        _, rows = self._execute(
            "SELECT ts, vel, direction FROM wind WHERE ts > ? ORDER BY ts ASC",
            (now - duration,),
        )
        return [Measurement(*row) for row in rows]

    def prune(self, older_than, now=None):
        """Delete measurements older than now - older_than. Returns the number removed."""
        if now is None:
            now = now_epoch()
        removed, _ = self._execute("DELETE FROM wind WHERE ts < ?", (now - older_than,))
        if removed:
            logger.info("Pruned %d measurements", removed)
        return removed
