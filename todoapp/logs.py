"""
Operation log for todo mutations.

Every create/toggle request leaves one `operation_log` row: which todo, what it
looked like before and after, and whether the request succeeded. The log is
advisory: a failed write is reported through `logging` and never undoes or fails
the mutation it describes.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import sqlite3
import time
import uuid

from .db import get_conn
from .domain.todo import Todo
from .errors import StoreError

logger = logging.getLogger(__name__)

OPERATION_LOG_DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  request_id TEXT NOT NULL,
  action TEXT NOT NULL,
  todo_id INTEGER,
  payload_json TEXT,
  todo_before TEXT,
  todo_after TEXT,
  result TEXT NOT NULL,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_operation_log_todo ON operation_log(todo_id);
"""


def ensure_log_schema(db_path: str | None = None):
    try:
        with get_conn(db_path) as conn:
            conn.executescript(OPERATION_LOG_DDL)
    except sqlite3.Error as e:
        raise StoreError(f"ensure_log_schema_failed: {e}") from e


def _snapshot(todo: Todo | None) -> str | None:
    return None if todo is None else json.dumps(todo.model_dump(), ensure_ascii=False)


class LogContext:
    """Collects one request's todo mutation and writes it once, at the end."""

    def __init__(self, action: str, db_path: str | None = None, payload: dict | None = None):
        self.action = action
        self.db_path = db_path
        self.payload = payload
        self.request_id = uuid.uuid4().hex
        self.todo_id: int | None = None
        self.before: Todo | None = None
        self.after: Todo | None = None
        self._start = time.perf_counter()

    def for_todo(self, todo_id: int):
        self.todo_id = todo_id

    def changed(self, before: Todo | None, after: Todo):
        self.todo_id = after.id
        self.before = before
        self.after = after

    def ok(self) -> bool:
        return self._write("OK")

    def fail(self, err: Exception) -> bool:
        return self._write("ERROR", str(err))

    def _write(self, result: str, err: str | None = None) -> bool:
        rec = (
            dt.datetime.now(dt.timezone.utc).isoformat(),
            self.request_id,
            self.action,
            self.todo_id,
            json.dumps(self.payload, ensure_ascii=False) if self.payload is not None else None,
            _snapshot(self.before),
            _snapshot(self.after),
            result,
            err,
            int((time.perf_counter() - self._start) * 1000),
        )
        try:
            with get_conn(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO operation_log(ts, request_id, action, todo_id, payload_json, "
                    "todo_before, todo_after, result, err_msg, latency_ms) "
                    "VALUES(?,?,?,?,?,?,?,?,?,?)",
                    rec,
                )
        except (sqlite3.Error, StoreError) as e:
            logger.warning("operation log write failed (%s %s todo=%s): %s",
                           self.action, result, self.todo_id, e)
            return False
        return True
