"""Server-rendered to-do list (FastAPI + SQLite)."""

APP_NAME = "todoapp"
__version__ = "0.1.0"
