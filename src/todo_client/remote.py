from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from .errors import AuthenticationError, RemoteError
from .schemas import Task, TaskDraft, TaskPatch
from .session import Session
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskRemote(Protocol):
    """Gateway contract consumed by TaskBoard. Every method raises RemoteError on failure."""

    async def list_tasks(self) -> List[Task]: ...

    async def create_task(self, draft: TaskDraft) -> Task: ...

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task: ...

    async def delete_task(self, task_id: str) -> None: ...

    async def aclose(self) -> None: ...


def error_message(response: httpx.Response, fallback: str) -> str:
    """
    Extract a human readable message from an error response.

    Looks at 'message' first, then a string 'detail' (FastAPI style).
    """
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


def _task_path(task_id: str) -> str:
    return f"/tasks/{quote(str(task_id), safe='')}"


# PUBLIC_INTERFACE
class TaskAPI:
    """
    Async HTTP gateway for the task service.

    The session's bearer credential is attached to every request. The
    underlying httpx.AsyncClient is owned by this object; close it with
    aclose() or use the instance as an async context manager.
    """

    def __init__(
        self,
        session: Session,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            headers={"Accept": "application/json", **session.auth_headers()},
            transport=transport,
        )

    async def __aenter__(self) -> "TaskAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, json: Any = None) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise RemoteError(f"Network error: {exc}") from exc

        if response.status_code == 401:
            raise AuthenticationError(error_message(response, "Not authenticated"), 401)
        if response.is_error:
            message = error_message(response, f"Request failed with status {response.status_code}")
            logger.warning("%s %s -> %s %s", method, path, response.status_code, message)
            raise RemoteError(message, response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError("Response body is not valid JSON", response.status_code) from exc

    @classmethod
    def _task(cls, response: httpx.Response) -> Task:
        try:
            return Task.model_validate(cls._json(response))
        except PydanticValidationError as exc:
            raise RemoteError("Malformed task in response", response.status_code) from exc

    async def list_tasks(self) -> List[Task]:
        """GET /tasks. Accepts a bare array or a pagination envelope with 'items'."""
        response = await self._send("GET", "/tasks")
        body = self._json(response)
        if isinstance(body, dict) and isinstance(body.get("items"), list):
            body = body["items"]
        if not isinstance(body, list):
            raise RemoteError("Expected a list of tasks", response.status_code)
        try:
            return [Task.model_validate(item) for item in body]
        except PydanticValidationError as exc:
            raise RemoteError("Malformed task in response", response.status_code) from exc

    async def create_task(self, draft: TaskDraft) -> Task:
        """POST /tasks and return the persisted task with its assigned id."""
        response = await self._send("POST", "/tasks", json=draft.to_payload())
        return self._task(response)

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        """PUT /tasks/{id} with only the fields set on the patch."""
        response = await self._send("PUT", _task_path(task_id), json=patch.to_payload())
        return self._task(response)

    async def delete_task(self, task_id: str) -> None:
        """DELETE /tasks/{id}. The acknowledgment body is ignored."""
        await self._send("DELETE", _task_path(task_id))
