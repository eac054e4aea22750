from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import (
    Any,
    AsyncContextManager,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import (
    ConsistencyFault,
    LoadSuperseded,
    NotAuthenticated,
    TaskClientError,
    TaskNotFound,
    ValidationError,
)
from .models import TaskFilter
from .ordering import filter_tasks, order
from .remote import TaskAPI, TaskRemote
from .results import Result
from .schemas import Task, TaskDraft, TaskPatch
from .session import Session
from .settings import get_settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _coerce(model: Type[M], value: Union[M, Mapping[str, Any]]) -> M:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def _unique_by_id(tasks: Iterable[Task]) -> List[Task]:
    # Later records win; the first occurrence keeps its position.
    seen: Dict[str, int] = {}
    out: List[Task] = []
    for task in tasks:
        if task.id in seen:
            logger.warning("Duplicate task id %s in remote listing; keeping the last record", task.id)
            out[seen[task.id]] = task
            continue
        seen[task.id] = len(out)
        out.append(task)
    return out


# PUBLIC_INTERFACE
class TaskBoard:
    """
    Local task collection kept consistent with the remote store.

    Every operation issues at most one remote call, and only a confirmed
    remote result changes the collection; after each change the collection
    is re-ordered. Operations never raise client errors: they return a
    Result holding either the value or the error.

    Concurrency policy:
    - update/toggle/delete on the same task id are serialized (serialize_task_ops)
    - a load superseded by a newer load discards its result (discard_stale_loads)
    """

    def __init__(
        self,
        remote: TaskRemote,
        session: Optional[Session],
        *,
        serialize_task_ops: Optional[bool] = None,
        discard_stale_loads: Optional[bool] = None,
    ) -> None:
        if serialize_task_ops is None or discard_stale_loads is None:
            settings = get_settings()
            if serialize_task_ops is None:
                serialize_task_ops = settings.serialize_task_ops
            if discard_stale_loads is None:
                discard_stale_loads = settings.discard_stale_loads

        self._remote = remote
        self._session = session
        self._serialize_task_ops = serialize_task_ops
        self._discard_stale_loads = discard_stale_loads
        self._tasks: List[Task] = []
        self._locks: Dict[str, asyncio.Lock] = {}
        self._load_generation = 0
        self._closed = False

    # PUBLIC_INTERFACE
    @classmethod
    def connect(
        cls,
        session: Session,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **options: Any,
    ) -> "TaskBoard":
        """Build a board talking HTTP to the configured task service."""
        remote = TaskAPI(session, base_url=base_url, timeout=timeout, transport=transport)
        return cls(remote, session, **options)

    async def __aenter__(self) -> "TaskBoard":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ---- state ----

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def tasks(self) -> Tuple[Task, ...]:
        """Snapshot of the collection in display order."""
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(tuple(self._tasks))

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def view(self, view: TaskFilter = TaskFilter.ALL) -> List[Task]:
        """Ordered collection restricted to a list view."""
        return filter_tasks(self._tasks, view)

    def _task_lock(self, task_id: str) -> AsyncContextManager[Any]:
        if not self._serialize_task_ops:
            return contextlib.nullcontext()
        lock = self._locks.get(task_id)
        if lock is None:
            # Unknown ids get no lock; the operation fails or only reports drift.
            if self.get(task_id) is None:
                return contextlib.nullcontext()
            lock = self._locks[task_id] = asyncio.Lock()
        return lock


    # ---- operations ----

    async def load(self) -> Result[List[Task]]:
        """Fetch the full collection and replace local state with it."""
        if self._session is None:
            return Result.failure(NotAuthenticated())

        self._load_generation += 1
        generation = self._load_generation
        try:
            fetched = await self._remote.list_tasks()
        except TaskClientError as exc:
            logger.warning("Load failed: %s", exc)
            return Result.failure(exc)

        if self._session is None:
            return Result.failure(NotAuthenticated())
        if self._discard_stale_loads and generation != self._load_generation:
            logger.info("Discarding load #%s superseded by load #%s", generation, self._load_generation)
            return Result.failure(LoadSuperseded())

        self._tasks = order(_unique_by_id(fetched))
        logger.info("Loaded %d tasks", len(self._tasks))
        return Result.success(list(self._tasks))

    async def create(self, draft: Union[TaskDraft, Mapping[str, Any]]) -> Result[Task]:
        """Create a task remotely, then insert the persisted record."""
        if self._session is None:
            return Result.failure(NotAuthenticated())
        try:
            body = _coerce(TaskDraft, draft)
        except ValidationError as exc:
            return Result.failure(exc)

        try:
            created = await self._remote.create_task(body)
        except TaskClientError as exc:
            logger.warning("Create failed: %s", exc)
            return Result.failure(exc)

        if self._session is None:
            return Result.failure(NotAuthenticated())

        rest = [t for t in self._tasks if t.id != created.id]
        if len(rest) != len(self._tasks):
            logger.warning("Created task %s was already present locally; replacing it", created.id)
        self._tasks = order([created, *rest])
        logger.debug("Created task %s", created.id)
        return Result.success(created)

    async def update(self, task_id: str, fields: Union[TaskPatch, Mapping[str, Any]]) -> Result[Task]:
        """Apply a partial update remotely, then replace the local record by id."""
        if self._session is None:
            return Result.failure(NotAuthenticated())
        try:
            patch = _coerce(TaskPatch, fields)
        except ValidationError as exc:
            return Result.failure(exc)
        if patch.is_empty:
            return Result.failure(ValidationError("No fields to update"))

        async with self._task_lock(task_id):
            return await self._apply_update(task_id, patch)

    async def toggle(self, task_id: str) -> Result[Task]:
        """Flip completion based on the current local value."""
        if self._session is None:
            return Result.failure(NotAuthenticated())

        async with self._task_lock(task_id):
            current = self.get(task_id)
            if current is None:
                logger.warning("Toggle requested for unknown task %s", task_id)
                return Result.failure(TaskNotFound(task_id))
            return await self._apply_update(task_id, TaskPatch(completed=not current.completed))

    async def delete(self, task_id: str) -> Result[str]:
        """Delete remotely, then drop the local record."""
        if self._session is None:
            return Result.failure(NotAuthenticated())

        async with self._task_lock(task_id):
            try:
                await self._remote.delete_task(task_id)
            except TaskClientError as exc:
                logger.warning("Delete of task %s failed: %s", task_id, exc)
                return Result.failure(exc)

            if self._session is None:
                return Result.failure(NotAuthenticated())

            rest = [t for t in self._tasks if t.id != task_id]
            if len(rest) == len(self._tasks):
                logger.warning("Task %s deleted remotely but missing locally; a reload is recommended", task_id)
            self._tasks = order(rest)
            self._locks.pop(task_id, None)
            logger.debug("Deleted task %s", task_id)
            return Result.success(task_id)

    async def _apply_update(self, task_id: str, patch: TaskPatch) -> Result[Task]:
        if self.get(task_id) is None:
            return Result.failure(TaskNotFound(task_id))

        try:
            updated = await self._remote.update_task(task_id, patch)
        except TaskClientError as exc:
            logger.warning("Update of task %s failed: %s", task_id, exc)
            return Result.failure(exc)

        if self._session is None:
            return Result.failure(NotAuthenticated())

        replaced = False
        merged: List[Task] = []
        for task in self._tasks:
            if task.id == task_id:
                merged.append(updated)
                replaced = True
            else:
                merged.append(task)
        if not replaced:
            logger.warning("Task %s updated remotely but missing locally; a reload is recommended", task_id)
            return Result.failure(ConsistencyFault(task_id))

        self._tasks = order(merged)
        logger.debug("Updated task %s fields=%s", task_id, sorted(patch.model_fields_set))
        return Result.success(updated)

    async def close(self) -> None:
        """
        Tear the session down: forget the collection and close the gateway.
        Results of calls still in flight are not applied.
        """
        if self._closed:
            return
        self._closed = True
        self._session = None
        self._tasks = []
        self._locks.clear()
        self._load_generation += 1
        await self._remote.aclose()
