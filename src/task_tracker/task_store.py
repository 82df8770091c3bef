from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from .context import StoreContext
from .models import DEFAULT_PRIORITY, PRIORITIES, TaskEntity, TaskStats
from .results import ErrorKind, PersistenceError, StoreResult
from .security import generate_id, is_storable_text, sanitize_input

MUTABLE_FIELDS: Tuple[str, ...] = ("title", "description", "priority", "completed")
FILTER_NAMES: Tuple[str, ...] = ("all", "pending", "completed", "high", "medium", "low")

_NOT_FOUND = "Task not found"
_BAD_TITLE = "Task title must be valid text"
_BAD_DESCRIPTION = "Description must be valid text"


@dataclass(frozen=True)
class TaskFilter:
    """
    Optional narrowing for TaskStore.list. None means "don't care".
    """
    completed: Optional[bool] = None
    priority: Optional[str] = None

    @staticmethod
    def normalize_name(name: Optional[str]) -> str:
        """Lowercased filter name, or "all" for anything not in FILTER_NAMES."""
        key = name.strip().lower() if isinstance(name, str) else ""
        return key if key in FILTER_NAMES else "all"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "TaskFilter":
        """
        Map a dashboard filter name to a TaskFilter:
        - all (or anything unknown): no narrowing
        - pending / completed: by completion state
        - high / medium / low: outstanding tasks of that priority
        """
        key = cls.normalize_name(name)
        if key == "pending":
            return cls(completed=False)
        if key == "completed":
            return cls(completed=True)
        if key in PRIORITIES:
            return cls(completed=False, priority=key)
        return cls()

    def matches(self, task: Mapping[str, Any]) -> bool:
        if self.completed is not None and bool(task.get("completed")) != self.completed:
            return False
        if self.priority is not None and task.get("priority") != self.priority:
            return False
        return True


def sort_recent_first(tasks: Iterable[TaskEntity]) -> List[TaskEntity]:
    """Order tasks by created_at, most recent first."""
    return sorted(tasks, key=lambda t: t["created_at"], reverse=True)


def summarize(tasks: Iterable[Mapping[str, Any]]) -> TaskStats:
    """
    Counts over one snapshot of tasks. The priority breakdown only includes
    incomplete tasks, so it shows outstanding work rather than history.
    """
    tasks = list(tasks)
    completed = sum(1 for t in tasks if t.get("completed"))
    outstanding = [t for t in tasks if not t.get("completed")]
    return {
        "total": len(tasks),
        "completed": completed,
        "pending": len(tasks) - completed,
        "by_priority": {
            "high": sum(1 for t in outstanding if t.get("priority") == "high"),
            "medium": sum(1 for t in outstanding if t.get("priority") == "medium"),
            "low": sum(1 for t in outstanding if t.get("priority") == "low"),
        },
    }


def _clean_priority(value: Any) -> Optional[str]:
    priority = sanitize_input(value) if value is not None else ""
    if not priority:
        return DEFAULT_PRIORITY
    priority = str(priority).lower()
    return priority if priority in PRIORITIES else None


# PUBLIC_INTERFACE
class TaskStore:
    """
    Owns the tasks collection. Every caller-facing operation is keyed by the
    requesting user's id; a task owned by someone else behaves as missing.
    """

    def __init__(self, context: StoreContext) -> None:
        self._ctx = context
        self._tasks = context.tasks

    def list(self, user_id: Optional[str] = None, task_filter: Optional[TaskFilter] = None) -> List[TaskEntity]:
        """
        Return tasks owned by ``user_id`` (every task when unscoped), in storage order.
        """
        tasks: List[TaskEntity] = self._tasks.read()  # type: ignore[assignment]
        if user_id is not None:
            tasks = [t for t in tasks if t.get("user_id") == user_id]
        if task_filter is not None:
            tasks = [t for t in tasks if task_filter.matches(t)]
        return tasks

    def create(
        self,
        user_id: str,
        title: str,
        description: Optional[str] = "",
        priority: Optional[str] = DEFAULT_PRIORITY,
    ) -> StoreResult[TaskEntity]:
        if not user_id:
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, "Owner is required")
        if title is not None and not is_storable_text(title):
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, _BAD_TITLE)
        if description is not None and not is_storable_text(description):
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, _BAD_DESCRIPTION)
        clean_title = sanitize_input(title or "")
        if not clean_title:
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, "Task title is required")
        clean_priority = _clean_priority(priority)
        if clean_priority is None:
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, f"Priority must be one of: {', '.join(PRIORITIES)}")

        now = self._ctx.now_iso()
        task: TaskEntity = {
            "id": generate_id(),
            "user_id": user_id,
            "title": clean_title,
            "description": sanitize_input(description or ""),
            "priority": clean_priority,
            "completed": False,
            "created_at": now,
            "updated_at": now,
        }

        with self._tasks.locked():
            tasks = self._tasks.read()
            tasks.append(dict(task))
            try:
                self._tasks.write(tasks)
            except PersistenceError:
                return StoreResult.fail(ErrorKind.PERSISTENCE_FAILURE, "Could not create task")

        logger.info("Created task {} for user {}", task["id"], user_id)
        return StoreResult.ok(task)

    def _clean_patch(self, patch: Mapping[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
        changes: Dict[str, Any] = {}
        for key in MUTABLE_FIELDS:
            value = patch.get(key)
            if value is None:
                continue
            if key == "title":
                value = sanitize_input(value)
                if not isinstance(value, str) or not value:
                    return {}, "Task title is required"
                if not is_storable_text(value):
                    return {}, _BAD_TITLE
            elif key == "description":
                value = sanitize_input(value)
                if not is_storable_text(value):
                    return {}, _BAD_DESCRIPTION
            elif key == "priority":
                value = _clean_priority(value)
                if value is None:
                    return {}, f"Priority must be one of: {', '.join(PRIORITIES)}"
            elif key == "completed" and not isinstance(value, bool):
                return {}, "Completed must be true or false"
            changes[key] = value

        ignored = set(patch) - set(MUTABLE_FIELDS)
        if ignored:
            logger.debug("Ignoring non-editable task fields: {}", sorted(ignored))
        return changes, None

    def _mutate(
        self,
        task_id: str,
        user_id: str,
        apply: Callable[[List[Dict[str, Any]], int], Any],
        failure_message: str,
    ) -> StoreResult[Any]:
        """
        Locate the task owned by ``user_id``, let ``apply`` change the list in
        place and persist the whole collection. Returns apply()'s value.
        """
        with self._tasks.locked():
            tasks = self._tasks.read()
            index = next(
                (i for i, t in enumerate(tasks) if t.get("id") == task_id and t.get("user_id") == user_id),
                None,
            )
            if not task_id or not user_id or index is None:
                return StoreResult.fail(ErrorKind.NOT_FOUND, _NOT_FOUND)
            value = apply(tasks, index)
            try:
                self._tasks.write(tasks)
            except PersistenceError:
                return StoreResult.fail(ErrorKind.PERSISTENCE_FAILURE, failure_message)
        return StoreResult.ok(value)

    def update(self, task_id: str, user_id: str, patch: Mapping[str, Any]) -> StoreResult[TaskEntity]:
        """
        Merge the editable fields present in ``patch`` into the task; fields not
        present (or None) keep their current value.
        """
        changes, problem = self._clean_patch(patch or {})
        if problem:
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, problem)

        def apply(tasks: List[Dict[str, Any]], index: int) -> TaskEntity:
            updated = {**tasks[index], **changes, "updated_at": self._ctx.now_iso()}
            tasks[index] = updated
            return dict(updated)  # type: ignore[return-value]

        result = self._mutate(task_id, user_id, apply, "Could not update task")
        if result.success:
            logger.debug("Updated task {} fields={}", task_id, sorted(changes))
        return result

    def delete(self, task_id: str, user_id: str) -> StoreResult[None]:
        def apply(tasks: List[Dict[str, Any]], index: int) -> None:
            del tasks[index]

        result = self._mutate(task_id, user_id, apply, "Could not delete task")
        if result.success:
            logger.debug("Deleted task {}", task_id)
        return result

    def toggle_completion(self, task_id: str, user_id: str) -> StoreResult[bool]:
        """Flip the completion flag and return the new state."""

        def apply(tasks: List[Dict[str, Any]], index: int) -> bool:
            task = tasks[index]
            task["completed"] = not bool(task.get("completed"))
            task["updated_at"] = self._ctx.now_iso()
            return task["completed"]

        result = self._mutate(task_id, user_id, apply, "Could not update task")
        if result.success:
            logger.debug("Toggled task {} completed={}", task_id, result.value)
        return result

    def stats(self, user_id: str) -> TaskStats:
        """Counts for one user; see summarize()."""
        return summarize(self.list(user_id))
