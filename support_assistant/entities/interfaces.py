"""Abstract base classes for the external collaborators of the service."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from .records import StoreRecord
from .run import RunSnapshot, ThreadMessage, ToolOutput

SortSpec = Sequence[tuple[str, str]]


class IAssistantService(ABC):
    """Interface for the hosted assistant API."""

    @abstractmethod
    async def create_thread(self) -> str:
        """Create a conversation thread and return its ID."""

    @abstractmethod
    async def add_message(self, thread_id: str, role: str, text: str) -> None:
        """Append a message to a thread."""

    @abstractmethod
    async def start_run(self, thread_id: str, assistant_id: str) -> RunSnapshot:
        """Start a run of the assistant over the thread."""

    @abstractmethod
    async def get_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        """Fetch the current status of a run."""

    @abstractmethod
    async def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: Sequence[ToolOutput]) -> RunSnapshot:
        """Answer the tool calls a run is waiting on."""

    @abstractmethod
    async def list_messages(self, thread_id: str) -> list[ThreadMessage]:
        """Return the thread's messages, newest first."""

    @abstractmethod
    async def create_assistant(self, name: str, instructions: str, model: str) -> str:
        """Create a hosted assistant and return its ID."""

    @abstractmethod
    async def update_assistant(self, assistant_id: str, name: str, instructions: str, model: str) -> str:
        """Update a hosted assistant and return its ID."""


class IRecordStore(ABC):
    """Interface for the tabular record store."""

    @abstractmethod
    async def select(
        self,
        table: str,
        formula: Optional[str] = None,
        sort: Optional[SortSpec] = None,
        max_records: Optional[int] = None,
        all_pages: bool = False,
    ) -> list[StoreRecord]:
        """Select rows matching a filter formula.

        Args:
            table: Table name
            formula: Filter formula, e.g. ``{locationId} = 'abc'``
            sort: ``(field, "asc" | "desc")`` pairs
            max_records: Upper bound on returned rows
            all_pages: Follow pagination instead of returning the first page only
        """

    @abstractmethod
    async def create(self, table: str, fields: dict[str, Any]) -> StoreRecord:
        """Create a row."""

    @abstractmethod
    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> StoreRecord:
        """Update the given fields of a row."""
