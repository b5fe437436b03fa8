"""
Client card schema.

Swimlanes:
  backlog → in-progress → complete

Each client sits in exactly one lane and holds a 1-based position there.
Priority is a lane-scoped hint (1 = most urgent) used to compute positions.
"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Dict, Any


class Lane(Enum):
    """Valid status lanes on the board."""
    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"

    @classmethod
    def values(cls) -> list:
        return [lane.value for lane in cls]


@dataclass
class Client:
    """One client card on the board."""

    id: int
    name: str
    status: Lane = Lane.BACKLOG
    position: int = 0
    priority: Optional[int] = None   # None = no priority set
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "position": self.position,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Client":
        """Deserialize from a dict (DB row or seed entry)."""
        priority = data.get("priority")
        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            description=data.get("description"),
            status=Lane(data.get("status", "backlog")),
            position=int(data.get("position") or 0),
            priority=int(priority) if priority is not None else None,
        )
