from __future__ import annotations

from fastapi import HTTPException, Request

from ..services.todo_svc import TodoList


def get_todo_list(request: Request) -> TodoList:
    todos = getattr(request.app.state, "todos", None)
    if todos is None:
        raise HTTPException(status_code=503, detail="todo list not loaded")
    return todos
