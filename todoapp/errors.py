from __future__ import annotations

# todoapp/errors.py


class TodoError(Exception):
    """Base class for errors raised by the to-do list."""


class StoreError(TodoError):
    """Connection, query, exec or row decoding failure."""


class NotFoundError(TodoError):
    pass


class ValidationError(TodoError):
    pass
