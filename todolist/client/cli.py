"""Terminal front end for the todo list client view."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich.console import Console

from ..api.settings import get_settings
from ..log import configure_logging
from .view import TodoFilter, TodoView, build_client

app = typer.Typer(no_args_is_help=True, help="Manage todos through the Todo List API.")

_console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Base URL of the API (defaults to API_URL)."),
) -> None:
    configure_logging(get_settings().log_level)
    ctx.obj = api_url


@contextmanager
def _loaded_view(ctx: typer.Context) -> Iterator[TodoView]:
    with build_client(ctx.obj) as http:
        view = TodoView(http)
        if not view.load():
            _console.print("[red]Could not load todos.[/red]")
            raise typer.Exit(code=1)
        yield view


def _finish(view: TodoView, ok: bool, failure: str) -> None:
    if not ok:
        _console.print(f"[red]{failure}[/red]")
    _console.print(view.render())
    if not ok:
        raise typer.Exit(code=1)


@app.command("list")
def list_todos(
    ctx: typer.Context,
    filter_: TodoFilter = typer.Option(TodoFilter.ALL, "--filter", "-f", case_sensitive=False),
) -> None:
    """Show todos, optionally only active or completed ones."""
    with _loaded_view(ctx) as view:
        view.set_filter(filter_)
        _console.print(view.render())


@app.command()
def add(ctx: typer.Context, title: str = typer.Argument(..., help="Title of the new todo.")) -> None:
    """Add a todo."""
    with _loaded_view(ctx) as view:
        view.new_title = title
        _finish(view, view.add(), "Title is required." if not title.strip() else "Could not add todo.")


@app.command()
def toggle(ctx: typer.Context, todo_id: int = typer.Argument(..., help="ID of the todo.")) -> None:
    """Flip a todo between active and completed."""
    with _loaded_view(ctx) as view:
        _finish(view, view.toggle(todo_id), f"Could not toggle todo {todo_id}.")


@app.command()
def delete(ctx: typer.Context, todo_id: int = typer.Argument(..., help="ID of the todo.")) -> None:
    """Delete a todo."""
    with _loaded_view(ctx) as view:
        _finish(view, view.delete(todo_id), f"Could not delete todo {todo_id}.")


if __name__ == "__main__":
    app()
