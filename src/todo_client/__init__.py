"""
Task-management client.

Keeps an ordered, remote-confirmed collection of tasks for an authenticated
session. Entry points:
- AuthAPI: exchange credentials for a Session
- TaskBoard: load/create/update/toggle/delete with local reconciliation
- order / filter_tasks: the pure display ordering and list views
"""

from .auth import AuthAPI
from .errors import (
    AuthenticationError,
    ConsistencyFault,
    LoadSuperseded,
    NotAuthenticated,
    RemoteError,
    TaskClientError,
    TaskNotFound,
    ValidationError,
)
from .models import Priority, TaskFilter
from .ordering import filter_tasks, is_past_due, order
from .reconciler import TaskBoard
from .remote import TaskAPI, TaskRemote
from .results import Result
from .schemas import Task, TaskDraft, TaskPatch, parse_due_date, serialize_due_date
from .session import Session

__all__ = [
    "AuthAPI",
    "AuthenticationError",
    "ConsistencyFault",
    "LoadSuperseded",
    "NotAuthenticated",
    "Priority",
    "RemoteError",
    "Result",
    "Session",
    "Task",
    "TaskAPI",
    "TaskBoard",
    "TaskClientError",
    "TaskDraft",
    "TaskFilter",
    "TaskNotFound",
    "TaskPatch",
    "TaskRemote",
    "ValidationError",
    "filter_tasks",
    "is_past_due",
    "order",
    "parse_due_date",
    "serialize_due_date",
]
