from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Iterator

from ..db import get_conn
from ..domain.todo import Todo
from ..errors import NotFoundError, StoreError, ValidationError
from ..repository import todo_repo

logger = logging.getLogger(__name__)


def ensure_todo_schema(db_path: str | None = None):
    try:
        with get_conn(db_path) as conn:
            todo_repo.ensure_schema(conn)
            conn.commit()
    except sqlite3.Error as e:
        raise StoreError(f"ensure_todo_schema_failed: {e}") from e


class TodoList:
    """
    In-process mirror of the `todos` table.

    Entries are keyed by store id and kept in store order. Every read and write
    goes through `_lock` so the cache and the table change together.
    Callers always receive copies; mutate through `update`/`toggle`.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path
        self._todos: dict[int, Todo] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._todos)

    def __iter__(self) -> Iterator[Todo]:
        return iter(self.all())

    def all(self) -> list[Todo]:
        with self._lock:
            return [t.model_copy() for t in self._todos.values()]

    def load(self) -> "TodoList":
        try:
            with get_conn(self.db_path) as conn:
                rows = todo_repo.list_all(conn)
            todos = [Todo.from_row(r) for r in rows]
        except sqlite3.Error as e:
            raise StoreError(f"load_failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"row_decode_failed: {e}") from e

        with self._lock:
            self._todos = {t.id: t for t in todos}
        logger.info("loaded %d todos", len(todos))
        return self

    def find(self, todo_id: int) -> Todo:
        with self._lock:
            todo = self._todos.get(todo_id)
            if todo is None:
                raise NotFoundError(f"todo_not_found: {todo_id}")
            return todo.model_copy()

    def create(self, content: str) -> Todo:
        with self._lock:
            try:
                with get_conn(self.db_path) as conn:
                    new_id = todo_repo.insert(conn, content, finished=False)
                    conn.commit()
            except sqlite3.Error as e:
                raise StoreError(f"insert_failed: {e}") from e
            todo = Todo(id=new_id, content=content, finished=False)
            self._todos[new_id] = todo
            return todo.model_copy()

    def update(self, todo: Todo) -> Todo:
        with self._lock:
            if todo.id not in self._todos:
                raise ValidationError(f"todo id out of range: {todo.id}")
            try:
                with get_conn(self.db_path) as conn:
                    touched = todo_repo.update(conn, todo.id, todo.content, todo.finished)
                    conn.commit()
            except sqlite3.Error as e:
                raise StoreError(f"update_failed: {e}") from e
            if touched == 0:
                # row removed behind our back; cache is stale for this id
                logger.warning("todo %s missing from store, dropping from cache", todo.id)
                del self._todos[todo.id]
                raise NotFoundError(f"todo_not_found: {todo.id}")
            self._todos[todo.id] = todo.model_copy()
            return todo.model_copy()

    def toggle(self, todo_id: int) -> tuple[Todo, Todo]:
        """Flip `finished` for one todo. Returns (before, after)."""
        with self._lock:
            before = self.find(todo_id)
            after = self.update(before.toggled())
            return before, after
