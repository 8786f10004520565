import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "todos_test.db"
    # Point the app to this temp DB
    monkeypatch.setenv("DATABASE_URL", f"file:{path}")
    monkeypatch.setenv("DATABASE_AUTH_TOKEN", "")
    return str(path)


@pytest.fixture()
def todo_list(tmp_db_path):
    from todoapp.api import open_todo_list
    return open_todo_list(tmp_db_path)


@pytest.fixture()
def client(todo_list):
    from todoapp.api import create_app
    from fastapi.testclient import TestClient
    app = create_app(todo_list, db_path=todo_list.db_path)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def raw_conn(tmp_db_path):
    """Plain sqlite3 connection for asserting on what actually got stored."""
    conn = sqlite3.connect(tmp_db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()
