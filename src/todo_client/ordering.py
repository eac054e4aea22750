from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from .models import TaskFilter
from .schemas import Task

RankKey = Tuple[int, bool, bool, datetime]

# Due instant used for undated tasks; the preceding flag already sorts them last.
_NO_DUE = datetime.min.replace(tzinfo=timezone.utc)


def rank_key(task: Task) -> RankKey:
    """
    Sort key for a single task, smallest first:
    - priority descending (negated weight)
    - incomplete before completed
    - dated before undated
    - earlier due instant first
    """
    due = task.due_date
    return (
        -task.priority.weight,
        task.completed,
        due is None,
        due if due is not None else _NO_DUE,
    )


# PUBLIC_INTERFACE
def order(tasks: Iterable[Task]) -> List[Task]:
    """
    Return tasks in display order.

    Pure and deterministic. sorted() is stable, so tasks the key cannot tell
    apart keep their relative input order, and order(order(x)) == order(x).
    """
    return sorted(tasks, key=rank_key)


# PUBLIC_INTERFACE
def filter_tasks(tasks: Iterable[Task], view: TaskFilter = TaskFilter.ALL) -> List[Task]:
    """
    Restrict tasks to a list view, preserving input order.
    """
    view = TaskFilter(view)
    if view is TaskFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    if view is TaskFilter.INCOMPLETE:
        return [t for t in tasks if not t.completed]
    return list(tasks)


# PUBLIC_INTERFACE
def is_past_due(task: Task, now: Optional[datetime] = None) -> bool:
    """True when the task has a due instant strictly earlier than now."""
    if task.due_date is None:
        return False
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return task.due_date < now
