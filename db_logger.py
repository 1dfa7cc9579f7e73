#!/usr/bin/env python3
"""
db_logger.py — SQLite run log for CaseCommand.

Creates casecommand.db in the given root folder (the current directory when
run from the command line). Thread-safe via a dedicated writer thread and queue.

Schema:
    sessions(id, started_at, transforms_folder)
    log_entries(id, session_id, timestamp, tag, message, transform_name)
    conversions(id, session_id, timestamp, chain, source,
                input_text, output_text, error)

Auto-purges entries older than RETAIN_DAYS (default 30).
"""

import queue
import sqlite3
import sys
import threading
import uuid
from datetime import datetime, timedelta
from pathlib import Path

RETAIN_DAYS = 30
DB_NAME     = "casecommand.db"

_INSERT_LOG = (
    "INSERT INTO log_entries"
    "(session_id, timestamp, tag, message, transform_name)"
    " VALUES(?,?,?,?,?)"
)
_INSERT_CONVERSION = (
    "INSERT INTO conversions"
    "(session_id, timestamp, chain, source, input_text, output_text, error)"
    " VALUES(?,?,?,?,?,?,?)"
)


class DBLogger:
    def __init__(self, project_root: str, transforms_folder: str = ""):
        self._db_path   = str(Path(project_root) / DB_NAME)
        self._queue     = queue.Queue()
        self._session   = str(uuid.uuid4())[:8]
        self._stop_evt  = threading.Event()

        self._init_db()
        self._purge_old()
        self._start_session(transforms_folder)

        self._writer = threading.Thread(target=self._writer_loop, daemon=True)
        self._writer.start()

    # ── Setup ─────────────────────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=10)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self):
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS sessions (
                    id                TEXT PRIMARY KEY,
                    started_at        TEXT NOT NULL,
                    transforms_folder TEXT
                );
                CREATE TABLE IF NOT EXISTS log_entries (
                    id             INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id     TEXT NOT NULL,
                    timestamp      TEXT NOT NULL,
                    tag            TEXT NOT NULL,
                    message        TEXT NOT NULL,
                    transform_name TEXT
                );
                CREATE TABLE IF NOT EXISTS conversions (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id  TEXT NOT NULL,
                    timestamp   TEXT NOT NULL,
                    chain       TEXT NOT NULL,
                    source      TEXT,
                    input_text  TEXT NOT NULL,
                    output_text TEXT,
                    error       TEXT
                );
                CREATE INDEX IF NOT EXISTS idx_log_ts
                    ON log_entries(timestamp);
                CREATE INDEX IF NOT EXISTS idx_log_session
                    ON log_entries(session_id);
                CREATE INDEX IF NOT EXISTS idx_log_tag
                    ON log_entries(tag);
                CREATE INDEX IF NOT EXISTS idx_conv_session
                    ON conversions(session_id);
            """)

    def _start_session(self, transforms_folder: str = ""):
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO sessions(id, started_at, transforms_folder) VALUES(?,?,?)",
                (self._session, datetime.now().isoformat(), transforms_folder)
            )

    def _purge_old(self):
        cutoff = (datetime.now() - timedelta(days=RETAIN_DAYS)).isoformat()
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM log_entries WHERE timestamp < ?", (cutoff,)
            )
            conn.execute(
                "DELETE FROM conversions WHERE timestamp < ?", (cutoff,)
            )
            conn.execute(
                "DELETE FROM sessions WHERE started_at < ? "
                "AND id NOT IN (SELECT DISTINCT session_id FROM log_entries) "
                "AND id NOT IN (SELECT DISTINCT session_id FROM conversions)",
                (cutoff,)
            )

    # ── Writer thread ─────────────────────────────────────────────────────────

    def _writer_loop(self):
        conn = self._connect()
        while not self._stop_evt.is_set():
            try:
                item = self._queue.get(timeout=0.2)
            except queue.Empty:
                continue
            try:
                if item is None:
                    break
                sql, params = item
                conn.execute(sql, params)
                conn.commit()
            except sqlite3.Error as exc:
                print(f"[db_logger] write failed: {exc}", file=sys.stderr)
            finally:
                self._queue.task_done()
        conn.close()

    # ── Public API ────────────────────────────────────────────────────────────

    def log(self, message: str, tag: str = "info", transform_name: str = ""):
        self._queue.put((_INSERT_LOG, (
            self._session,
            datetime.now().isoformat(),
            tag,
            message,
            transform_name,
        )))

    def record_conversion(self, chain: str, input_text: str,
                          output_text: str = None, error: str = None,
                          source: str = ""):
        """Record one chain run: output_text on success, error on failure."""
        self._queue.put((_INSERT_CONVERSION, (
            self._session,
            datetime.now().isoformat(),
            chain,
            source,
            input_text,
            output_text,
            error,
        )))

    def flush(self):
        """Block until every queued write has been committed."""
        self._queue.join()

    def get_entries(self, session_id: str = None, tag: str = None,
                    limit: int = 500) -> list:
        """
        Fetch log entries, oldest first. Returns list of dicts:
            {id, session_id, timestamp, tag, message, transform_name}
        """
        clauses = []
        params  = []
        if session_id:
            clauses.append("session_id = ?")
            params.append(session_id)
        if tag:
            clauses.append("tag = ?")
            params.append(tag)
        where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        sql = (
            f"SELECT id, session_id, timestamp, tag, message, transform_name "
            f"FROM log_entries {where} "
            f"ORDER BY id DESC LIMIT ?"
        )
        params.append(limit)
        with self._connect() as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(sql, params).fetchall()
        return [dict(r) for r in reversed(rows)]

    def get_conversions(self, session_id: str = None, limit: int = 100) -> list:
        where  = "WHERE session_id = ? " if session_id else ""
        params = [session_id] if session_id else []
        params.append(limit)
        with self._connect() as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT id, session_id, timestamp, chain, source, input_text, "
                f"output_text, error FROM conversions {where}"
                "ORDER BY id DESC LIMIT ?",
                params
            ).fetchall()
        return [dict(r) for r in reversed(rows)]

    def get_sessions(self, limit: int = 50) -> list:
        with self._connect() as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT id, started_at, transforms_folder FROM sessions "
                "ORDER BY started_at DESC LIMIT ?",
                (limit,)
            ).fetchall()
        return [dict(r) for r in rows]

    def clear_session(self, session_id: str):
        self.flush()
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM log_entries WHERE session_id = ?", (session_id,)
            )
            conn.execute(
                "DELETE FROM conversions WHERE session_id = ?", (session_id,)
            )

    @property
    def session_id(self) -> str:
        return self._session

    @property
    def db_path(self) -> str:
        return self._db_path

    def stop(self):
        # Sentinel goes behind any pending writes so they are committed first
        self._queue.put(None)
        self._writer.join(timeout=3)
        self._stop_evt.set()
