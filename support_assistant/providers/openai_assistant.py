"""OpenAI Assistants API adapter."""

from typing import Any, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from ..entities import ExternalServiceError, IAssistantService, RunSnapshot, RunStatus, ThreadMessage, ToolOutput
from ..structured_logging import get_logger, get_or_create_correlation_id

logger = get_logger("OPENAI_ASSISTANT")


def to_run_snapshot(run: Any) -> RunSnapshot:
    """Map an OpenAI run object to a RunSnapshot."""
    last_error: Optional[str] = None
    if getattr(run, "last_error", None):
        last_error = f"{run.last_error.code}: {run.last_error.message}"

    pending: list[str] = []
    required_action = getattr(run, "required_action", None)
    if required_action is not None and required_action.type == "submit_tool_outputs":
        pending = [tool_call.id for tool_call in required_action.submit_tool_outputs.tool_calls]

    return RunSnapshot(id=run.id, status=RunStatus(run.status), last_error=last_error, pending_tool_call_ids=pending)


def to_thread_message(message: Any) -> ThreadMessage:
    """Map an OpenAI thread message, keeping the first text block only."""
    text = None
    for block in message.content or []:
        if block.type == "text":
            text = block.text.value
            break
    return ThreadMessage(id=message.id, role=message.role, text=text)


class OpenAIAssistantService(IAssistantService):
    """Assistant service backed by ``client.beta`` of the OpenAI SDK."""

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    def _failure(self, err: OpenAIError, operation: str, **context: Any) -> ExternalServiceError:
        logger.error(
            f"OpenAI {operation} failed",
            correlation_id=get_or_create_correlation_id(),
            error_type=type(err).__name__,
            error=str(err),
            **context,
        )
        return ExternalServiceError("openai", operation, str(err))

    async def create_thread(self) -> str:
        try:
            thread = await self.client.beta.threads.create()
        except OpenAIError as err:
            raise self._failure(err, "create thread") from err
        logger.info("Thread created", thread_id=thread.id)
        return thread.id  # type: ignore[no-any-return]

    async def add_message(self, thread_id: str, role: str, text: str) -> None:
        try:
            await self.client.beta.threads.messages.create(thread_id=thread_id, role=role, content=text)  # type: ignore[arg-type]
        except OpenAIError as err:
            raise self._failure(err, "create message", thread_id=thread_id) from err
        logger.debug("Message added to thread", thread_id=thread_id, role=role, message_length=len(text))

    async def start_run(self, thread_id: str, assistant_id: str) -> RunSnapshot:
        try:
            run = await self.client.beta.threads.runs.create(thread_id=thread_id, assistant_id=assistant_id)
        except OpenAIError as err:
            raise self._failure(err, "create run", thread_id=thread_id, assistant_id=assistant_id) from err
        logger.info("Run created", thread_id=thread_id, run_id=run.id, assistant_id=assistant_id)
        return to_run_snapshot(run)

    async def get_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        try:
            run = await self.client.beta.threads.runs.retrieve(run_id=run_id, thread_id=thread_id)
        except OpenAIError as err:
            raise self._failure(err, "retrieve run", thread_id=thread_id, run_id=run_id) from err
        return to_run_snapshot(run)

    async def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: Sequence[ToolOutput]) -> RunSnapshot:
        try:
            run = await self.client.beta.threads.runs.submit_tool_outputs(
                run_id=run_id,
                thread_id=thread_id,
                tool_outputs=[output.to_payload() for output in outputs],  # type: ignore[misc]
            )
        except OpenAIError as err:
            raise self._failure(err, "submit tool outputs", thread_id=thread_id, run_id=run_id) from err
        logger.info("Tool outputs submitted", thread_id=thread_id, run_id=run_id, tool_count=len(outputs))
        return to_run_snapshot(run)

    async def list_messages(self, thread_id: str) -> list[ThreadMessage]:
        try:
            page = await self.client.beta.threads.messages.list(thread_id=thread_id, order="desc")
        except OpenAIError as err:
            raise self._failure(err, "list messages", thread_id=thread_id) from err
        return [to_thread_message(message) for message in page.data]

    async def create_assistant(self, name: str, instructions: str, model: str) -> str:
        try:
            assistant = await self.client.beta.assistants.create(name=name, instructions=instructions, model=model)
        except OpenAIError as err:
            raise self._failure(err, "create assistant", assistant_name=name) from err
        logger.info("Assistant created", assistant_id=assistant.id, assistant_name=name, model=model)
        return assistant.id  # type: ignore[no-any-return]

    async def update_assistant(self, assistant_id: str, name: str, instructions: str, model: str) -> str:
        try:
            assistant = await self.client.beta.assistants.update(
                assistant_id, name=name, instructions=instructions, model=model
            )
        except OpenAIError as err:
            raise self._failure(err, "update assistant", assistant_id=assistant_id, assistant_name=name) from err
        logger.info("Assistant updated", assistant_id=assistant.id, assistant_name=name, model=model)
        return assistant.id  # type: ignore[no-any-return]
