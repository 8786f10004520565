from __future__ import annotations

import re
from pathlib import Path

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..errors import NotFoundError, StoreError, ValidationError
from ..logs import LogContext
from ..services.todo_svc import TodoList
from .deps import get_todo_list

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

# ASCII digits only, optional leading minus; int() alone also takes "1_0", "+3", "١"
_TODO_ID_RE = re.compile(r"-?[0-9]+")


def parse_todo_id(raw: str | None) -> int:
    if raw is None or raw == "":
        raise ValidationError("missing id")
    if not _TODO_ID_RE.fullmatch(raw):
        raise ValidationError(f"id must be an integer: {raw!r}")
    return int(raw)


@router.get("/", response_class=HTMLResponse)
def index(request: Request, todos: TodoList = Depends(get_todo_list)):
    return templates.TemplateResponse(request, "index.html", {"todos": todos.all()})


@router.post("/todo", response_class=HTMLResponse)
def create_todo(request: Request, content: str = Form(""), todos: TodoList = Depends(get_todo_list)):
    log = LogContext("TODO_CREATE", db_path=todos.db_path, payload={"content": content})
    try:
        text = content.strip()
        if not text:
            raise ValidationError("content must not be empty")
        todo = todos.create(text)
    except ValidationError as ve:
        log.fail(ve)
        raise HTTPException(status_code=400, detail=str(ve))
    except StoreError as e:
        log.fail(e)
        raise HTTPException(status_code=500, detail=str(e))
    log.changed(None, todo)
    log.ok()
    return templates.TemplateResponse(request, "_todo.html", {"todo": todo})


@router.get("/todo/toggle", response_class=HTMLResponse)
def toggle_todo(request: Request, id: str | None = None, todos: TodoList = Depends(get_todo_list)):
    log = LogContext("TODO_TOGGLE", db_path=todos.db_path, payload={"id": id})
    try:
        todo_id = parse_todo_id(id)
        log.for_todo(todo_id)
        before, after = todos.toggle(todo_id)
    except ValidationError as ve:
        log.fail(ve)
        raise HTTPException(status_code=400, detail=str(ve))
    except NotFoundError as nf:
        log.fail(nf)
        raise HTTPException(status_code=404, detail=str(nf))
    except StoreError as e:
        log.fail(e)
        raise HTTPException(status_code=500, detail=str(e))
    log.changed(before, after)
    log.ok()
    return templates.TemplateResponse(request, "_todo.html", {"todo": after})
