from __future__ import annotations

from sqlite3 import Connection


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS todos (
            id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
            content TEXT NOT NULL,
            finished INTEGER DEFAULT 0 NOT NULL
        )
        """
    )


def list_all(conn: Connection):
    return conn.execute("SELECT id, content, finished FROM todos ORDER BY id ASC").fetchall()


def get_one(conn: Connection, todo_id: int):
    return conn.execute(
        "SELECT id, content, finished FROM todos WHERE id=?", (todo_id,)
    ).fetchone()


def insert(conn: Connection, content: str, finished: bool = False) -> int:
    cur = conn.execute(
        "INSERT INTO todos(content, finished) VALUES(?, ?)",
        (content, 1 if finished else 0),
    )
    return int(cur.lastrowid)


def update(conn: Connection, todo_id: int, content: str, finished: bool) -> int:
    """Returns the number of rows touched (0 when the id is gone)."""
    cur = conn.execute(
        "UPDATE todos SET content=?, finished=? WHERE id=?",
        (content, 1 if finished else 0, todo_id),
    )
    return cur.rowcount


def count_all(conn: Connection) -> int:
    return int(conn.execute("SELECT COUNT(1) AS c FROM todos").fetchone()["c"])
