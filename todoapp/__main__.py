"""
Todo app command line.

Commands:
  init     Create the todos / operation_log tables if absent
  list     Print every todo
  serve    Load the todo list and serve the web UI (uvicorn)

Database comes from DATABASE_URL / DATABASE_AUTH_TOKEN (a .env file is read when
present), falling back to config.yaml and then ./todos.db.
"""
from __future__ import annotations

import argparse
import logging
import sys

from .db import resolve_db_path
from .errors import StoreError
from .settings import get_settings, load_env

logger = logging.getLogger("todoapp")


def _resolve(args) -> dict:
    load_env(args.env_file)
    cfg = get_settings(args.config)
    cfg["db_path"] = resolve_db_path(cfg)
    return cfg


def cmd_init(args) -> int:
    from .api import open_todo_list

    cfg = _resolve(args)
    todos = open_todo_list(cfg["db_path"])
    print(f"initialized {cfg['db_path']} ({len(todos)} todos)")
    return 0


def cmd_list(args) -> int:
    from .api import open_todo_list

    cfg = _resolve(args)
    todos = open_todo_list(cfg["db_path"])
    if not len(todos):
        print("(empty)")
    for t in todos:
        print(f"{t.id:>4}  [{'x' if t.finished else ' '}]  {t.content}")
    return 0


def cmd_serve(args) -> int:
    import uvicorn
    from .api import create_app, open_todo_list

    cfg = _resolve(args)
    host = args.host or cfg["host"]
    port = args.port or cfg["port"]
    todos = open_todo_list(cfg["db_path"])
    app = create_app(todos, db_path=cfg["db_path"])
    logger.info("serving on http://%s:%s", host, port)
    uvicorn.run(app, host=host, port=port)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="todoapp", description="Todo list web app (FastAPI + SQLite)")
    parser.add_argument("--config", default=None, help="config.yaml path (default ./config.yaml)")
    parser.add_argument("--env-file", default=None, help=".env path (default ./.env)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create tables")
    p_init.set_defaults(func=cmd_init)

    p_list = sub.add_parser("list", help="print todos")
    p_list.set_defaults(func=cmd_list)

    p_serve = sub.add_parser("serve", help="run the web server")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s:%(name)s: %(message)s",
    )
    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    try:
        return args.func(args)
    except StoreError as e:
        logger.error("database error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
