from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import get_current_user, get_task_store
from ..models import UserView
from ..schemas import StatsOut, TaskCreate, TaskOut, TaskUpdate, ToggleOut
from ..task_store import FILTER_NAMES, TaskFilter, TaskStore, sort_recent_first
from ..utils import unwrap

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TaskOut],
    summary="List Tasks",
    description=(
        "List the caller's tasks, most recent first.\n\n"
        "Query parameters:\n"
        f"- filter: one of {', '.join(FILTER_NAMES)}; priority filters only show incomplete tasks"
    ),
)
def list_tasks(
    filter: Optional[str] = Query("all", description="Named filter"),
    user: UserView = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> List[TaskOut]:
    items = store.list(user["id"], TaskFilter.from_name(filter))
    return [TaskOut(**t) for t in sort_recent_first(items)]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task owned by the caller and return it.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Empty or non-text title, non-text description, or unknown priority"},
    },
)
def create_task(
    payload: TaskCreate,
    user: UserView = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> TaskOut:
    created = unwrap(store.create(user["id"], payload.title, payload.description, payload.priority))
    return TaskOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get("/stats", response_model=StatsOut, summary="Task statistics")
def task_stats(
    user: UserView = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> StatsOut:
    """
    Totals for the caller; by_priority only counts incomplete tasks.
    """
    return StatsOut(**store.stats(user["id"]))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Edit title, description, priority or completion. Omitted fields are left unchanged.",
    responses={
        200: {"description": "Task updated"},
        400: {"description": "Invalid field value"},
        404: {"description": "Task not found"},
    },
)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    user: UserView = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> TaskOut:
    updated = unwrap(store.update(task_id, user["id"], payload.model_dump(exclude_unset=True)))
    return TaskOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}/toggle",
    response_model=ToggleOut,
    summary="Toggle Task",
    description="Flip the completion state of a task.",
    responses={
        200: {"description": "Task toggled"},
        404: {"description": "Task not found"},
    },
)
def toggle_task(
    task_id: str,
    user: UserView = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> ToggleOut:
    completed = unwrap(store.toggle_completion(task_id, user["id"]))
    message = "Task marked as completed" if completed else "Task marked as pending"
    return ToggleOut(completed=completed, message=message)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={
        204: {"description": "Task deleted"},
        404: {"description": "Task not found"},
    },
)
def delete_task(
    task_id: str,
    user: UserView = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> None:
    """
    Delete a task. Returns 204 on success, 404 if missing or owned by someone else.
    """
    unwrap(store.delete(task_id, user["id"]))
    return None
