"""
Tests for db_logger.DBLogger
"""

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

from db_logger import DB_NAME, RETAIN_DAYS, DBLogger


class TestDBLogger:
    """SQLite run log backend."""

    def test_creates_database_and_session(self, tmp_path, db):
        assert Path(db.db_path) == tmp_path / DB_NAME
        sessions = db.get_sessions()
        assert [s["id"] for s in sessions] == [db.session_id]
        assert sessions[0]["transforms_folder"] == "transforms"

    def test_log_entries_filtered_by_tag(self, db):
        db.log("scanned", "info")
        db.log("bad input", "err", transform_name="camel_case")
        db.flush()

        assert [e["message"] for e in db.get_entries()] == ["scanned", "bad input"]
        errors = db.get_entries(tag="err")
        assert len(errors) == 1
        assert errors[0]["transform_name"] == "camel_case"
        assert errors[0]["session_id"] == db.session_id

    def test_limit_keeps_newest(self, db):
        for i in range(5):
            db.log(f"line {i}")
        db.flush()
        assert [e["message"] for e in db.get_entries(limit=2)] == ["line 3", "line 4"]

    def test_conversions(self, db):
        db.record_conversion("camel_case", "user_id", output_text="userId", source="hotkey")
        db.record_conversion("camel_case", "!!!", error="no-valid-words")
        db.flush()

        rows = db.get_conversions()
        assert rows[0]["output_text"] == "userId"
        assert rows[0]["error"] is None
        assert rows[0]["source"] == "hotkey"
        assert rows[1]["output_text"] is None
        assert rows[1]["error"] == "no-valid-words"

    def test_sessions_are_separate(self, tmp_path, db):
        other = DBLogger(str(tmp_path))
        try:
            db.log("mine")
            other.log("theirs")
            db.flush()
            other.flush()
            assert [e["message"] for e in db.get_entries(session_id=db.session_id)] == ["mine"]
            assert len(db.get_entries()) == 2
            assert len(db.get_sessions()) == 2
        finally:
            other.stop()

    def test_clear_session(self, db):
        db.log("gone")
        db.record_conversion("dot_case", "a b", output_text="a.b")
        db.clear_session(db.session_id)
        assert db.get_entries() == []
        assert db.get_conversions() == []

    def test_stop_commits_pending_writes(self, tmp_path):
        logger = DBLogger(str(tmp_path))
        logger.log("last words")
        logger.stop()
        with sqlite3.connect(logger.db_path) as conn:
            rows = conn.execute("SELECT message FROM log_entries").fetchall()
        assert rows == [("last words",)]

    def test_purges_old_entries(self, tmp_path):
        first = DBLogger(str(tmp_path))
        first.stop()
        old = (datetime.now() - timedelta(days=RETAIN_DAYS + 1)).isoformat()
        with sqlite3.connect(first.db_path) as conn:
            conn.execute(
                "INSERT INTO log_entries(session_id, timestamp, tag, message) "
                "VALUES(?,?,?,?)",
                ("old", old, "info", "ancient")
            )
            conn.execute(
                "INSERT INTO sessions(id, started_at) VALUES(?,?)", ("old", old)
            )
            # A session that only ever recorded conversions
            conn.execute(
                "INSERT INTO conversions(session_id, timestamp, chain, input_text, "
                "output_text) VALUES(?,?,?,?,?)",
                ("conv_only", old, "camel_case", "user_id", "userId")
            )
            conn.execute(
                "INSERT INTO sessions(id, started_at) VALUES(?,?)", ("conv_only", old)
            )

        second = DBLogger(str(tmp_path))
        try:
            assert second.get_entries() == []
            assert second.get_conversions() == []
            session_ids = [s["id"] for s in second.get_sessions()]
            assert "old" not in session_ids
            assert "conv_only" not in session_ids
            assert first.session_id in session_ids
        finally:
            second.stop()

    def test_old_session_with_recent_conversions_is_kept(self, tmp_path):
        first = DBLogger(str(tmp_path))
        first.stop()
        old = (datetime.now() - timedelta(days=RETAIN_DAYS + 1)).isoformat()
        with sqlite3.connect(first.db_path) as conn:
            conn.execute(
                "INSERT INTO sessions(id, started_at) VALUES(?,?)", ("long_run", old)
            )
            conn.execute(
                "INSERT INTO conversions(session_id, timestamp, chain, input_text, "
                "output_text) VALUES(?,?,?,?,?)",
                ("long_run", datetime.now().isoformat(), "dot_case", "a b", "a.b")
            )

        second = DBLogger(str(tmp_path))
        try:
            assert "long_run" in [s["id"] for s in second.get_sessions()]
            assert [c["output_text"] for c in second.get_conversions()] == ["a.b"]
        finally:
            second.stop()
