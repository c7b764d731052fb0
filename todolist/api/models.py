from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Storage-level record for a Todo item, shared by every repository backend.

    Fields:
    - id: Unique integer identifier assigned by the store
    - title: Trimmed, non-empty title
    - completed: Boolean completion flag
    - created_at: Timezone-aware UTC creation timestamp; never changes
    """

    id: int
    title: str
    completed: bool
    created_at: datetime


# Columns a client may change after creation.
UPDATABLE_FIELDS = frozenset({"title", "completed"})
