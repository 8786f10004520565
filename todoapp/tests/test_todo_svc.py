from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from todoapp.db import get_conn
from todoapp.domain.todo import Todo
from todoapp.errors import NotFoundError, StoreError, ValidationError
from todoapp.repository import todo_repo
from todoapp.services.todo_svc import TodoList, ensure_todo_schema


def test_load_mirrors_rows(tmp_db_path):
    ensure_todo_schema(tmp_db_path)
    with get_conn(tmp_db_path) as conn:
        todo_repo.insert(conn, "one")
        todo_repo.insert(conn, "two", finished=True)
        todo_repo.insert(conn, "three")
        rows = [dict(r) for r in todo_repo.list_all(conn)]

    todos = TodoList(tmp_db_path).load()
    assert len(todos) == len(rows)
    for t, r in zip(todos.all(), rows):
        assert (t.id, t.content, t.finished) == (r["id"], r["content"], bool(r["finished"]))


def test_load_empty(todo_list):
    assert len(todo_list) == 0
    assert todo_list.all() == []


def test_load_fails_on_bad_table(tmp_db_path):
    with get_conn(tmp_db_path) as conn:
        conn.execute("CREATE TABLE todos (id INTEGER PRIMARY KEY, content TEXT)")
    with pytest.raises(StoreError):
        TodoList(tmp_db_path).load()


@pytest.mark.parametrize("content", ["buy milk", "x", "  spaced  ", "ünïcødé ✓", "quote \" and '"])
def test_create_then_find(todo_list, content):
    todo = todo_list.create(content)
    found = todo_list.find(todo.id)
    assert found.content == content
    assert found.finished is False
    assert found.id == todo.id


def test_create_uses_store_id(todo_list, raw_conn):
    a = todo_list.create("a")
    b = todo_list.create("b")
    assert (a.id, b.id) == (1, 2)
    assert raw_conn.execute("SELECT COUNT(1) FROM todos").fetchone()[0] == 2


@pytest.mark.parametrize("bad_id", [0, -1, 3, 99])
def test_find_out_of_range(todo_list, bad_id):
    todo_list.create("a")
    todo_list.create("b")
    with pytest.raises(NotFoundError):
        todo_list.find(bad_id)


def test_find_returns_copy(todo_list):
    todo_list.create("a")
    t = todo_list.find(1)
    t.finished = True
    t.content = "changed"
    again = todo_list.find(1)
    assert again.finished is False
    assert again.content == "a"


def test_toggle_is_involution(todo_list):
    todo = todo_list.create("a")
    before, after = todo_list.toggle(todo.id)
    assert before.finished is False and after.finished is True
    _, back = todo_list.toggle(todo.id)
    assert back.finished is False
    assert todo_list.find(todo.id).finished is False


def test_update_persists(todo_list, raw_conn):
    todo = todo_list.create("a")
    todo_list.update(Todo(id=todo.id, content="b", finished=True))
    row = raw_conn.execute("SELECT content, finished FROM todos WHERE id=?", (todo.id,)).fetchone()
    assert (row["content"], row["finished"]) == ("b", 1)
    assert todo_list.find(todo.id).content == "b"

    reloaded = TodoList(todo_list.db_path).load()
    assert reloaded.find(todo.id).finished is True


@pytest.mark.parametrize("bad_id", [0, -5, 2, 100])
def test_update_rejects_unknown_id(todo_list, bad_id):
    todo_list.create("a")
    with pytest.raises(ValidationError):
        todo_list.update(Todo(id=bad_id, content="x", finished=True))
    assert len(todo_list) == 1


def test_update_row_deleted_out_of_band(todo_list, raw_conn):
    todo_list.create("a")
    raw_conn.execute("DELETE FROM todos WHERE id=1")
    raw_conn.commit()
    with pytest.raises(NotFoundError):
        todo_list.toggle(1)
    with pytest.raises(NotFoundError):
        todo_list.find(1)


def test_ids_survive_gaps(tmp_db_path):
    ensure_todo_schema(tmp_db_path)
    with get_conn(tmp_db_path) as conn:
        for c in ("a", "b", "c"):
            todo_repo.insert(conn, c)
        conn.execute("DELETE FROM todos WHERE id=2")

    todos = TodoList(tmp_db_path).load()
    assert len(todos) == 2
    assert todos.find(3).content == "c"
    with pytest.raises(NotFoundError):
        todos.find(2)
    assert todos.create("d").id == 4
    assert [t.id for t in todos.all()] == [1, 3, 4]


def test_store_failure_on_create(todo_list, raw_conn):
    raw_conn.execute("DROP TABLE todos")
    raw_conn.commit()
    with pytest.raises(StoreError):
        todo_list.create("a")
    assert len(todo_list) == 0


def test_concurrent_creates_get_unique_ids(todo_list, raw_conn):
    with ThreadPoolExecutor(max_workers=8) as pool:
        created = list(pool.map(lambda i: todo_list.create(f"task {i}"), range(40)))

    ids = [t.id for t in created]
    assert len(set(ids)) == 40
    assert len(todo_list) == 40
    assert raw_conn.execute("SELECT COUNT(1) FROM todos").fetchone()[0] == 40
    assert sorted(ids) == [t.id for t in todo_list.all()]


def test_concurrent_toggles_do_not_lose_flips(todo_list, raw_conn):
    todo_list.create("a")
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: todo_list.toggle(1), range(21)))

    assert todo_list.find(1).finished is True
    assert raw_conn.execute("SELECT finished FROM todos WHERE id=1").fetchone()[0] == 1
