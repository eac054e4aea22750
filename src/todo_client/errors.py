from __future__ import annotations

from typing import Any, List, Optional


class TaskClientError(Exception):
    """Base class for every failure reported by the client."""

    error = "TaskClientError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """
        Return a consistent JSON-friendly structure for display layers.

        Format:
            {"error": "<class tag>", "message": "<human readable text>"}
        """
        return {"error": self.error, "message": self.message}


# PUBLIC_INTERFACE
class ValidationError(TaskClientError):
    """A draft, patch or credential set was rejected before any remote call."""

    error = "ValidationError"

    def __init__(self, message: str, detail: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.detail = detail or []

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ValidationError":
        """
        Wrap a pydantic ValidationError.

        detail keeps only loc/msg/type of each error so to_dict() stays
        JSON-serializable (pydantic's ctx and input may hold arbitrary objects).
        """
        detail = []
        parts = []
        for err in exc.errors():
            msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
            loc = [p if isinstance(p, int) else str(p) for p in err.get("loc", ())]
            detail.append({"loc": loc, "msg": msg, "type": str(err.get("type", "value_error"))})
            where = ".".join(str(p) for p in loc)
            parts.append(f"{where}: {msg}" if where else msg)
        return cls("; ".join(parts) or "Validation failed", detail=detail)

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["detail"] = self.detail
        return out


# PUBLIC_INTERFACE
class RemoteError(TaskClientError):
    """
    The remote call failed: transport error, non-success status or a body
    that could not be interpreted. status_code is None for transport errors.
    """

    error = "RemoteError"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["status_code"] = self.status_code
        return out


# PUBLIC_INTERFACE
class AuthenticationError(RemoteError):
    """Credentials were rejected, or the bearer token is no longer accepted."""

    error = "AuthenticationError"


# PUBLIC_INTERFACE
class ConsistencyFault(TaskClientError):
    """
    The local collection disagrees with the remote store about a task id.
    Recovery is a full load.
    """

    error = "ConsistencyFault"

    def __init__(self, task_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Task {task_id} is not in the local collection")
        self.task_id = task_id


# PUBLIC_INTERFACE
class TaskNotFound(ConsistencyFault):
    """The referenced id is unknown locally; no remote call was made."""

    error = "TaskNotFound"

    def __init__(self, task_id: str) -> None:
        super().__init__(task_id, f"Task {task_id} not found")


# PUBLIC_INTERFACE
class NotAuthenticated(TaskClientError):
    """An operation was attempted without an active session."""

    error = "NotAuthenticated"

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


# PUBLIC_INTERFACE
class LoadSuperseded(TaskClientError):
    """A newer load started while this one was in flight; its result was discarded."""

    error = "LoadSuperseded"

    def __init__(self, message: str = "Load superseded by a newer load") -> None:
        super().__init__(message)
