"""Drives one chat turn through the hosted assistant's run lifecycle.

A turn appends the user message, starts a run and polls it until it reaches a
terminal state. Tool calls requested by the run are acknowledged with an empty
result and never executed. The reply and the user message are persisted only
once the assistant has answered.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from structlog.contextvars import bound_contextvars

from ..entities import (
    IAssistantService,
    InvalidRequestError,
    NoAssistantReplyError,
    NotConfiguredError,
    RunFailedError,
    RunSnapshot,
    RunStatus,
    RunTimeoutError,
    ThreadMessage,
    ToolOutput,
    TurnContext,
    TurnResult,
)
from ..entities.run import PENDING_STATUSES
from ..repositories.records import RecordRepository
from ..structured_logging import get_logger

logger = get_logger("RUN_ORCHESTRATOR")

EMPTY_TOOL_OUTPUT = "[]"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_ATTEMPTS = 30

SleepFn = Callable[[float], Awaitable[None]]


class RunOrchestrator:
    """Polling state machine for a single run."""

    def __init__(
        self,
        assistant_service: IAssistantService,
        records: RecordRepository,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Optional[SleepFn] = None,
    ):
        self.assistant_service = assistant_service
        self.records = records
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self._sleep = sleep or asyncio.sleep

    @staticmethod
    def _validate(turn: TurnContext) -> None:
        if not turn.user_text or not turn.user_text.strip():
            raise InvalidRequestError("Message is required")
        if not turn.thread_id:
            raise InvalidRequestError("Thread ID is required")
        if not turn.conversation_id:
            raise InvalidRequestError("Conversation ID is required")
        if not turn.assistant_id:
            raise NotConfiguredError("Assistant has no hosted assistant ID; save the configuration first")

    async def run_turn(self, turn: TurnContext) -> TurnResult:
        """Run one user turn to completion and persist both messages.

        Raises:
            InvalidRequestError: Empty message, thread or conversation.
            NotConfiguredError: No hosted assistant to run.
            RunFailedError: The run failed, was cancelled or ended incomplete.
            RunTimeoutError: The run expired or did not finish within the poll budget.
            NoAssistantReplyError: The run completed without an assistant text reply.
        """
        self._validate(turn)

        with bound_contextvars(thread_id=turn.thread_id, conversation_id=turn.conversation_id):
            await self.assistant_service.add_message(turn.thread_id, "user", turn.user_text)
            run = await self.assistant_service.start_run(turn.thread_id, turn.assistant_id)

            with bound_contextvars(run_id=run.id):
                logger.info("Run started", assistant_id=turn.assistant_id, status=run.status.value)
                poll_count = await self._wait_for_completion(turn.thread_id, run)
                reply = await self._resolve_reply(turn.thread_id)

                user_record = await self.records.create_message(turn.conversation_id, "user", turn.user_text)
                assistant_record = await self.records.create_message(turn.conversation_id, "assistant", reply)
                logger.info("Turn completed", poll_count=poll_count, reply_length=len(reply))

        return TurnResult(
            reply=reply,
            user_message_id=user_record.id,
            assistant_message_id=assistant_record.id,
            run_id=run.id,
            poll_count=poll_count,
        )

    async def _wait_for_completion(self, thread_id: str, run: RunSnapshot) -> int:
        """Poll until the run completes. Returns the number of polls made."""
        for attempt in range(1, self.max_attempts + 1):
            await self._sleep(self.poll_interval)
            run = await self.assistant_service.get_run(thread_id, run.id)

            if run.status == RunStatus.COMPLETED:
                return attempt
            if run.status in PENDING_STATUSES:
                continue
            if run.status == RunStatus.REQUIRES_ACTION:
                await self._acknowledge_tool_calls(thread_id, run)
                continue
            if run.status == RunStatus.FAILED:
                logger.error("Run failed", last_error=run.last_error, attempt=attempt)
                raise RunFailedError(f"Run failed: {run.last_error or 'unknown error'}", details=run.last_error)
            if run.status == RunStatus.EXPIRED:
                logger.error("Run expired", attempt=attempt)
                raise RunTimeoutError("Run expired before completing")

            logger.error("Run ended without completing", status=run.status.value, attempt=attempt)
            raise RunFailedError(f"Run ended with status {run.status.value}", details=run.last_error)

        logger.error("Run did not complete in time", max_attempts=self.max_attempts)
        raise RunTimeoutError(f"Run did not complete after {self.max_attempts} polls")

    async def _acknowledge_tool_calls(self, thread_id: str, run: RunSnapshot) -> None:
        if not run.pending_tool_call_ids:
            return
        outputs = [ToolOutput(tool_call_id=call_id, output=EMPTY_TOOL_OUTPUT) for call_id in run.pending_tool_call_ids]
        logger.info("Acknowledging tool calls", tool_call_ids=run.pending_tool_call_ids)
        await self.assistant_service.submit_tool_outputs(thread_id, run.id, outputs)

    async def _resolve_reply(self, thread_id: str) -> str:
        messages = await self.assistant_service.list_messages(thread_id)
        newest: Optional[ThreadMessage] = messages[0] if messages else None
        if newest is None or newest.role != "assistant":
            raise NoAssistantReplyError("The assistant did not reply")
        if newest.text is None:
            raise NoAssistantReplyError("The assistant reply has no text content")
        return newest.text
