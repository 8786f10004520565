"""
FastAPI app entry point aggregating routers under todoapp/routes.
Keep as `uvicorn todoapp.api:app`.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import APP_NAME, __version__
from .db import get_db_path
from .logs import ensure_log_schema
from .services.todo_svc import TodoList, ensure_todo_schema
from .settings import load_env

logger = logging.getLogger(__name__)


def open_todo_list(db_path: str | None = None) -> TodoList:
    """Create schemas and load every todo. Any StoreError here is fatal for startup."""
    path = db_path or get_db_path()
    ensure_todo_schema(path)
    ensure_log_schema(path)
    todos = TodoList(path).load()
    logger.info("todo list ready (%d items, db=%s)", len(todos), path)
    return todos


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "todos", None) is None:
        if app.state.db_path is None:
            load_env()
        app.state.todos = open_todo_list(app.state.db_path)
    yield


def create_app(todos: TodoList | None = None, db_path: str | None = None) -> FastAPI:
    app = FastAPI(title=APP_NAME, version=__version__, lifespan=lifespan)
    app.state.todos = todos
    app.state.db_path = db_path

    # Include routers
    from .routes import base as base_routes
    from .routes import todos as todos_routes

    app.include_router(base_routes.router)
    app.include_router(todos_routes.router)
    return app


app = create_app()
