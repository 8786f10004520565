from __future__ import annotations

# todoapp/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator
from urllib.parse import parse_qs
import os

from .errors import StoreError
from .settings import get_settings

_REMOTE_SCHEMES = ("libsql://", "http://", "https://", "ws://", "wss://")


def build_connection_string(url: str, auth_token: str | None = None) -> str:
    """Combine DATABASE_URL and DATABASE_AUTH_TOKEN into one connection string."""
    if not auth_token:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}authToken={auth_token}"


def parse_connection_string(conn_str: str) -> tuple[str, str | None]:
    """
    Split a connection string into (sqlite path, auth token).

    Accepted forms: `file:todos.db`, `file:///abs/todos.db`, `sqlite:///todos.db`
    and a bare path. Remote libsql/http URLs cannot be opened with sqlite3.
    """
    if not conn_str or not conn_str.strip():
        raise StoreError("empty database url")
    url, _, query = conn_str.strip().partition("?")
    token = parse_qs(query).get("authToken", [None])[0] if query else None

    if url.lower().startswith(_REMOTE_SCHEMES):
        raise StoreError(f"remote database urls are not supported: {url}")
    if url.startswith("sqlite:///"):
        path = url[len("sqlite:///"):]
    elif url.startswith("file://"):
        path = url[len("file://"):]
    elif url.startswith("file:"):
        path = url[len("file:"):]
    else:
        path = url
    if not path:
        raise StoreError(f"database url has no path: {conn_str}")
    return path, token


def resolve_db_path(cfg: dict) -> str:
    """sqlite path for a settings dict; creates the parent directory."""
    conn_str = build_connection_string(cfg["database_url"], cfg["database_auth_token"])
    path, _token = parse_connection_string(conn_str)

    # 确保目录存在
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def get_db_path(_: str | None = None) -> str:
    return resolve_db_path(get_settings())


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    获取 SQLite 连接。优先使用显式传入的 db_path，否则走 get_db_path()。
    row_factory 为 Row，autocommit。
    """
    path = db_path or get_db_path()
    try:
        conn = sqlite3.connect(
            path,
            detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
            check_same_thread=False,
            isolation_level=None,
        )
    except sqlite3.Error as e:
        raise StoreError(f"cannot open database {path}: {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()
