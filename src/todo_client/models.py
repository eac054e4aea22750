from __future__ import annotations

from enum import Enum


# PUBLIC_INTERFACE
class Priority(str, Enum):
    """
    Task priority as transmitted on the wire.

    Values:
    - Low: weight 1
    - Medium: weight 2 (default for new tasks)
    - High: weight 3
    """

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def weight(self) -> int:
        """Ordinal weight used for ranking; higher ranks first."""
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
}


# PUBLIC_INTERFACE
class TaskFilter(str, Enum):
    """List views offered over the ordered collection."""

    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
