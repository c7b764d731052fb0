from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ..errors import NotFoundError, ValidationError
from ..repositories import Repository, get_repository
from ..schemas import DeleteResult, TodoCreate, TodoOut, TodoUpdate, validate_title

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

def _error(description: str, message: str) -> dict:
    return {
        "description": description,
        "content": {"application/json": {"example": {"error": message}}},
    }


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _title_or_400(title: Optional[str]) -> str:
    try:
        return validate_title(title)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="Return every Todo item, newest first.",
    responses={
        200: {"description": "List retrieved successfully"},
        500: _error("Store failure", "Failed to fetch todos"),
    },
)
def list_todos(repo: Repository = Depends(_get_repo)) -> List[TodoOut]:
    """
    List all todos ordered by creation time, newest first.
    """
    return [TodoOut(**it) for it in repo.select_all()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        400: _error("Title is missing or empty", "Title is required"),
        500: _error("Store failure", "Failed to create todo"),
    },
)
def create_todo(
    payload: TodoCreate,
    repo: Repository = Depends(_get_repo),
) -> TodoOut:
    """
    Create a new Todo. The title is trimmed and must not be empty.
    """
    title = _title_or_400(payload.title)
    created = repo.insert(title)
    logger.debug("Created todo %s", created["id"])
    return TodoOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description=(
        "Partially update a Todo item. Recognized fields are `completed` (boolean) "
        "and `title` (string); anything else is ignored."
    ),
    responses={
        200: {"description": "Todo updated"},
        400: _error("No valid fields to update", "No valid fields to update"),
        404: _error("Todo not found", "Todo not found"),
        500: _error("Store failure", "Failed to update todo"),
    },
)
def patch_todo(
    todo_id: int,
    payload: TodoUpdate,
    repo: Repository = Depends(_get_repo),
) -> TodoOut:
    """
    Partial update of a Todo item. Concurrent updates are last-write-wins.
    """
    changes = payload.changes()
    if not changes:
        raise ValidationError("No valid fields to update")
    if "title" in changes:
        changes["title"] = _title_or_400(changes["title"])

    updated = repo.update_fields(todo_id, changes)
    if updated is None:
        raise NotFoundError()
    return TodoOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=DeleteResult,
    summary="Delete Todo",
    description="Delete a Todo item by ID and return the removed item.",
    responses={
        200: {"description": "Todo deleted"},
        404: _error("Todo not found", "Todo not found"),
        500: _error("Store failure", "Failed to delete todo"),
    },
)
def delete_todo(todo_id: int, repo: Repository = Depends(_get_repo)) -> DeleteResult:
    """
    Delete a Todo. Returns 200 with the deleted item, 404 if not found.
    """
    deleted = repo.delete_by_id(todo_id)
    if deleted is None:
        raise NotFoundError()
    return DeleteResult(todo=TodoOut(**deleted))  # type: ignore[arg-type]
