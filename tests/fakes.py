from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timezone
from itertools import count
from typing import Any, Dict, Iterable, List, Optional, Tuple

from todo_client.errors import RemoteError, TaskClientError
from todo_client.models import Priority
from todo_client.schemas import Task, TaskDraft, TaskPatch


class FakeTaskRemote:
    """
    In-process TaskRemote for reconciliation tests.

    - Records every call in `calls`
    - hold(name) parks the next call of that method until the returned event is set
    - fail(name, error) makes the next call of that method raise error

    The stored state a call acts on is read before the call parks, so a held
    call answers with what the store looked like when it was issued.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self.tasks: Dict[str, Task] = {t.id: t for t in tasks}
        self.calls: List[Tuple[str, ...]] = []
        self.closed = False
        self._holds: Dict[str, List[asyncio.Event]] = defaultdict(list)
        self._failures: Dict[str, TaskClientError] = {}
        self._ids = count(100)

    def hold(self, name: str) -> asyncio.Event:
        event = asyncio.Event()
        self._holds[name].append(event)
        return event

    def fail(self, name: str, error: TaskClientError) -> None:
        self._failures[name] = error

    def calls_to(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def _enter(self, name: str, *args: str) -> None:
        self.calls.append((name, *args))
        if self._holds[name]:
            await self._holds[name].pop(0).wait()
        error = self._failures.pop(name, None)
        if error is not None:
            raise error

    async def list_tasks(self) -> List[Task]:
        snapshot = list(self.tasks.values())
        await self._enter("list_tasks")
        return snapshot

    async def create_task(self, draft: TaskDraft) -> Task:
        await self._enter("create_task", draft.text)
        task = Task.model_validate({"id": str(next(self._ids)), **draft.to_payload()})
        self.tasks[task.id] = task
        return task

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        current = self.tasks.get(task_id)
        await self._enter("update_task", task_id)
        if current is None:
            raise RemoteError("Task not found", 404)
        updated = current.model_copy(update=patch.model_dump(exclude_unset=True))
        self.tasks[task_id] = updated
        return updated

    async def delete_task(self, task_id: str) -> None:
        await self._enter("delete_task", task_id)
        if self.tasks.pop(task_id, None) is None:
            raise RemoteError("Task not found", 404)

    async def aclose(self) -> None:
        self.closed = True


def make_task(
    task_id: str,
    text: Optional[str] = None,
    *,
    priority: Priority = Priority.MEDIUM,
    completed: bool = False,
    due: Optional[Any] = None,
    description: Optional[str] = None,
) -> Task:
    return Task(
        id=task_id,
        text=text or f"Task {task_id}",
        description=description,
        completed=completed,
        due_date=due,
        priority=priority,
    )


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
