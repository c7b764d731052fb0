"""
Todo List: a small task-list manager.

Subpackages:
- todolist.api: FastAPI service backed by a relational todo store
- todolist.client: terminal client view that talks to the service over HTTP
"""

__version__ = "1.0.0"
