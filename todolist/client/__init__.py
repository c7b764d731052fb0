"""Terminal client for the todo list API."""

from .view import TodoFilter, TodoView, build_client

__all__ = ["TodoFilter", "TodoView", "build_client"]
