from __future__ import annotations

import logging
from enum import Enum
from io import StringIO
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter
from rich.console import Console, Group, RenderableType
from rich.table import Table
from rich.text import Text

from ..api.schemas import TodoOut
from ..api.settings import get_settings
from ..shared import APP_NAME, get_greeting

logger = logging.getLogger(__name__)

_TODO_LIST = TypeAdapter(List[TodoOut])


class TodoFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    def matches(self, todo: TodoOut) -> bool:
        if self is TodoFilter.ACTIVE:
            return not todo.completed
        if self is TodoFilter.COMPLETED:
            return todo.completed
        return True


# PUBLIC_INTERFACE
def build_client(api_url: Optional[str] = None, timeout: float = 10.0) -> httpx.Client:
    """Create the HTTP client pointed at API_URL (or `api_url` when given)."""
    base_url = (api_url or get_settings().api_url).rstrip("/")
    return httpx.Client(base_url=base_url, timeout=httpx.Timeout(timeout))


class TodoView:
    """
    Local reflection of the server's todo collection.

    The list held here is authoritative only until the next `load()`: after
    each acknowledged mutation the local copy is patched instead of
    re-fetched, and edits made by other clients are not seen until reload.

    Every request failure (transport error, non-2xx status, unparsable body)
    is logged and leaves local state untouched. Nothing is retried.
    """

    def __init__(self, http: httpx.Client) -> None:
        self._http = http
        self.todos: List[TodoOut] = []
        self.new_title: str = ""
        self.filter: TodoFilter = TodoFilter.ALL
        self.loading: bool = False

    def _request(self, action: str, method: str, url: str, **kwargs: Any) -> Optional[Any]:
        try:
            response = self._http.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to %s: %s", action, exc)
            return None

    def _find(self, todo_id: int) -> Optional[TodoOut]:
        return next((t for t in self.todos if t.id == todo_id), None)

    def load(self) -> bool:
        """Fetch the full collection and replace local state."""
        self.loading = True
        try:
            data = self._request("load todos", "GET", "/todos")
            if data is None:
                return False
            try:
                self.todos = _TODO_LIST.validate_python(data)
            except ValueError as exc:
                logger.error("Failed to load todos: %s", exc)
                return False
            return True
        finally:
            self.loading = False

    def add(self) -> bool:
        """Send `new_title`; blank input never reaches the server."""
        if not self.new_title.strip():
            return False
        data = self._request("add todo", "POST", "/todos", json={"title": self.new_title})
        if data is None:
            return False
        try:
            todo = TodoOut.model_validate(data)
        except ValueError as exc:
            logger.error("Failed to add todo: %s", exc)
            return False
        self.todos = [todo, *self.todos]
        self.new_title = ""
        return True

    def toggle(self, todo_id: int) -> bool:
        todo = self._find(todo_id)
        if todo is None:
            return False
        flipped = not todo.completed
        data = self._request(
            "toggle todo", "PATCH", f"/todos/{todo_id}", json={"completed": flipped}
        )
        if data is None:
            return False
        self.todos = [
            t.model_copy(update={"completed": flipped}) if t.id == todo_id else t
            for t in self.todos
        ]
        return True

    def delete(self, todo_id: int) -> bool:
        if self._request("delete todo", "DELETE", f"/todos/{todo_id}") is None:
            return False
        self.todos = [t for t in self.todos if t.id != todo_id]
        return True

    def set_filter(self, value: TodoFilter) -> None:
        self.filter = TodoFilter(value)

    def visible_todos(self) -> List[TodoOut]:
        return [t for t in self.todos if self.filter.matches(t)]

    def counts(self) -> Dict[TodoFilter, int]:
        return {f: sum(1 for t in self.todos if f.matches(t)) for f in TodoFilter}

    def render(self) -> RenderableType:
        """Build the rich renderable for the current state."""
        counts = self.counts()
        bar = Text()
        for f in TodoFilter:
            label = f"{f.value.capitalize()} ({counts[f]})"
            bar.append(f" {label} ", style="bold white on blue" if f is self.filter else "dim")
            bar.append(" ")

        header = Text(APP_NAME, style="bold")
        greeting = Text(get_greeting(), style="italic")

        if self.loading:
            body: RenderableType = Text("Loading...", style="dim")
        else:
            visible = self.visible_todos()
            if not visible:
                message = (
                    "No todos yet. Add one above!"
                    if self.filter is TodoFilter.ALL
                    else f"No {self.filter.value} todos"
                )
                body = Text(message, style="dim")
            else:
                table = Table(show_header=True, header_style="bold")
                table.add_column("", width=1)
                table.add_column("ID", justify="right")
                table.add_column("Title")
                for todo in visible:
                    title = Text(todo.title, style="strike dim" if todo.completed else "")
                    table.add_row("✓" if todo.completed else "○", str(todo.id), title)
                body = table

        return Group(header, greeting, bar, body)

    def render_text(self, width: int = 80) -> str:
        """Render to plain text, mostly for logs and tests."""
        console = Console(file=StringIO(), width=width, record=True, color_system=None)
        console.print(self.render())
        return console.export_text()
