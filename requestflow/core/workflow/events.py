"""Workflow events handed to the notification subsystem after a commit."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class WorkflowEvent:
    """Description of one committed transition.

    Only JSON-safe values, so the event can travel through the task queue.
    """

    domain: str
    request_id: str
    previous_status: str
    new_status: str
    actor_name: str
    actor_role: str
    action: str
    comments: Optional[str] = None
    requestor_ref: Optional[str] = None
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["occurred_at"] = self.occurred_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowEvent":
        values = dict(data)
        occurred_at = values.get("occurred_at")
        if isinstance(occurred_at, str):
            values["occurred_at"] = datetime.fromisoformat(occurred_at)
        elif occurred_at is None:
            values.pop("occurred_at", None)
        return cls(**values)
