from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional

from .models import UPDATABLE_FIELDS, TodoEntity
from .settings import get_settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def newest_first(items: List[TodoEntity]) -> List[TodoEntity]:
    """Order by created_at descending; later ids win ties."""
    return sorted(items, key=lambda t: (t["created_at"], t["id"]), reverse=True)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def initialize(self) -> None:
        """Create the schema if it is absent. Safe to call on every start."""

    @abstractmethod
    def insert(self, title: str) -> TodoEntity:
        """Create and return a new TodoEntity with a fresh id and created_at."""

    @abstractmethod
    def select_all(self) -> List[TodoEntity]:
        """Return every TodoEntity, newest first."""

    @abstractmethod
    def update_fields(self, todo_id: int, fields: Mapping[str, Any]) -> Optional[TodoEntity]:
        """
        Apply `fields` (title and/or completed) to an existing TodoEntity.
        Return the updated entity or None if not found.
        """

    @abstractmethod
    def delete_by_id(self, todo_id: int) -> Optional[TodoEntity]:
        """Delete a TodoEntity by id. Return the removed entity or None if not found."""


def checked_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields are not updatable: {', '.join(sorted(unknown))}")
    if not fields:
        raise ValueError("No fields to update")
    return dict(fields)


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and ephemeral runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def initialize(self) -> None:
        return None

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def insert(self, title: str) -> TodoEntity:
        with self._lock:
            entity: TodoEntity = {
                "id": self._allocate_id(),
                "title": title,
                "completed": False,
                "created_at": utcnow(),
            }
            self._items[entity["id"]] = entity
            return entity.copy()  # type: ignore[return-value]

    def select_all(self) -> List[TodoEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for t in newest_first(list(self._items.values()))]  # type: ignore[misc]

    def update_fields(self, todo_id: int, fields: Mapping[str, Any]) -> Optional[TodoEntity]:
        changes = checked_fields(fields)
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None
            updated = existing.copy()
            updated.update(changes)  # type: ignore[typeddict-item]
            self._items[todo_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def delete_by_id(self, todo_id: int) -> Optional[TodoEntity]:
        with self._lock:
            return self._items.pop(todo_id, None)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository at the DATABASE_URL path
    """
    settings = get_settings()
    if settings.persistence_backend == "memory":
        logger.info("Using in-memory todo store")
        return InMemoryRepository()

    from .db import SQLiteRepository

    logger.info("Using sqlite todo store at %s", settings.sqlite_db_path)
    return SQLiteRepository(settings.sqlite_db_path)
