from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth import get_current_user, get_task_store
from ..models import UserView
from ..schemas import DashboardOut, StatsOut, TaskOut, UserOut
from ..task_store import TaskFilter, TaskStore, sort_recent_first, summarize

router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["dashboard"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=DashboardOut,
    summary="Dashboard data",
    description="User, filtered tasks (most recent first), all tasks and statistics in one call.",
)
def dashboard(
    filter: Optional[str] = Query("all", description="Named filter"),
    user: UserView = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> DashboardOut:
    name = TaskFilter.normalize_name(filter)
    all_tasks = store.list(user["id"])
    task_filter = TaskFilter.from_name(name)
    filtered = [t for t in all_tasks if task_filter.matches(t)]
    return DashboardOut(
        user=UserOut(**user),
        tasks=[TaskOut(**t) for t in sort_recent_first(filtered)],  # type: ignore[arg-type]
        all_tasks=[TaskOut(**t) for t in all_tasks],  # type: ignore[arg-type]
        stats=StatsOut(**summarize(all_tasks)),  # type: ignore[arg-type]
        filter=name,
    )
