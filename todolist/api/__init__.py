"""
FastAPI service for the todo list.

The application instance lives in `todolist.api.main`; `create_app()` builds a
fresh one.
"""
