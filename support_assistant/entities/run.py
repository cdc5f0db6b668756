"""Values exchanged with the hosted assistant during a turn."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RunStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"


PENDING_STATUSES = frozenset({RunStatus.QUEUED, RunStatus.IN_PROGRESS, RunStatus.CANCELLING})


@dataclass
class RunSnapshot:
    """Status of a run at the time it was fetched."""

    id: str
    status: RunStatus
    last_error: Optional[str] = None
    pending_tool_call_ids: list[str] = field(default_factory=list)


@dataclass
class ThreadMessage:
    id: str
    role: str
    text: Optional[str] = None


@dataclass
class ToolOutput:
    tool_call_id: str
    output: str

    def to_payload(self) -> dict[str, str]:
        return {"tool_call_id": self.tool_call_id, "output": self.output}


@dataclass
class TurnContext:
    """Everything one chat turn needs. Passed explicitly; nothing is cached per process."""

    thread_id: str
    assistant_id: str
    conversation_id: str
    user_text: str


@dataclass
class TurnResult:
    reply: str
    user_message_id: str
    assistant_message_id: str
    run_id: Optional[str] = None
    poll_count: int = 0
