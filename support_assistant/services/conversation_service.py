"""Operations behind the widget's HTTP endpoints."""

from typing import Optional

from structlog.contextvars import bound_contextvars

from ..entities import (
    AssistantLinkRecord,
    IAssistantService,
    InvalidRequestError,
    NotConfiguredError,
    RecordNotFoundError,
    ServiceConfig,
    TurnContext,
)
from ..entities.records import AdvancedSettingsRecord
from ..entities.schemas import (
    AdvancedSettingsRequest,
    AdvancedSettingsResponse,
    AssistantInfoResponse,
    ChatRequest,
    ChatResponse,
    ConversationResponse,
    CreateConversationRequest,
    CreateConversationResponse,
    Envelope,
    FeedbackRequest,
    SaveConfigRequest,
    SaveConfigResponse,
    ValidateConfigResponse,
)
from ..processors import AssistantProvisioner, RunOrchestrator
from ..repositories.records import RecordRepository
from ..structured_logging import get_logger

logger = get_logger("CONVERSATION_SERVICE")

MESSAGE_RECORD_PREFIX = "rec"


class ConversationService:
    """Serves one widget tenant, the location set in ``ServiceConfig.location_id``."""

    def __init__(
        self,
        config: ServiceConfig,
        assistant_service: IAssistantService,
        records: RecordRepository,
        orchestrator: RunOrchestrator,
        provisioner: AssistantProvisioner,
    ):
        self.config = config
        self.assistant_service = assistant_service
        self.records = records
        self.orchestrator = orchestrator
        self.provisioner = provisioner

    @property
    def location_id(self) -> str:
        return self.config.location_id

    async def assistant_info(self) -> AssistantInfoResponse:
        assistant = await self.records.get_assistant_for_location(self.location_id)
        return AssistantInfoResponse(
            assistant_id=assistant.openai_assistant_id,
            assistant_name=assistant.assistant_name,
            company_name=assistant.company_name,
            has_assistant=assistant.has_hosted_assistant,
        )

    async def validate_config(self) -> ValidateConfigResponse:
        """Report whether the assistant can chat. A missing assistant is a setup state, not an error."""
        try:
            assistant = await self.records.get_assistant_for_location(self.location_id)
        except NotConfiguredError:
            logger.info("Assistant needs setup", location_id=self.location_id)
            return ValidateConfigResponse(
                success=False, error="Could not load the assistant configuration", needs_setup=True
            )

        configured = assistant.is_configured
        return ValidateConfigResponse(
            has_assistant=configured,
            assistant_id=assistant.openai_assistant_id,
            is_configured=configured,
            message=(
                "Assistant configured correctly"
                if configured
                else "Save the configuration to create the assistant"
            ),
        )

    async def chat(self, request: ChatRequest) -> ChatResponse:
        if not request.message.strip() or not request.thread_id:
            raise InvalidRequestError("A message and a threadId are required")
        if not request.conversation_id:
            raise InvalidRequestError("A conversationId is required")

        assistant = await self.records.get_assistant_for_location(self.location_id)
        if not assistant.has_hosted_assistant:
            raise NotConfiguredError("No hosted assistant ID found; save the configuration first")

        result = await self.orchestrator.run_turn(
            TurnContext(
                thread_id=request.thread_id,
                assistant_id=assistant.openai_assistant_id or "",
                conversation_id=request.conversation_id,
                user_text=request.message,
            )
        )
        return ChatResponse(response=result.reply, msg_id=result.assistant_message_id)

    async def current_conversation(self) -> ConversationResponse:
        conversation = await self.records.latest_conversation(self.location_id)
        if conversation is None:
            logger.info("No conversation found", location_id=self.location_id)
            return ConversationResponse(conversation=None, messages=[])

        with bound_contextvars(conversation_id=conversation.id):
            conv_id = conversation.conv_id if conversation.conv_id is not None else conversation.id
            messages = await self.records.list_messages(conv_id)
            logger.info("Conversation loaded", message_count=len(messages))
        return ConversationResponse.from_records(conversation, messages)

    async def create_conversation(self, request: CreateConversationRequest) -> CreateConversationResponse:
        if not request.client_id:
            raise InvalidRequestError("clienteId is required")

        client = await self.records.find_client(request.client_id)
        if client is None:
            raise RecordNotFoundError("No client found for the given locationId")

        assistant = await self.records.get_assistant_for_location(self.location_id)
        thread_id = await self.assistant_service.create_thread()
        conversation = await self.records.create_conversation(client.id, assistant.id, thread_id)

        logger.info("Conversation started", conversation_id=conversation.id, thread_id=thread_id)
        return CreateConversationResponse(conversation_id=conversation.id, thread_id=thread_id)

    async def submit_feedback(self, request: FeedbackRequest) -> Envelope:
        if request.id is None or str(request.id) == "" or not request.content.strip():
            raise InvalidRequestError("Please write your feedback before sending it")

        record_id = str(request.id)
        if not record_id.startswith(MESSAGE_RECORD_PREFIX):
            message = await self.records.find_message_by_msg_id(record_id)
            if message is None:
                raise RecordNotFoundError("No message found to attach the feedback to")
            record_id = message.id

        await self.records.create_feedback(record_id, request.content, request.is_positive)
        return Envelope()

    async def save_config(self, request: SaveConfigRequest) -> SaveConfigResponse:
        """Provision the hosted assistant from the form and store the form with its ID.

        Custom commands are managed outside the form; on update the stored ones are kept.
        """
        try:
            assistant = await self.records.get_assistant_for_location(self.location_id)
        except NotConfiguredError as err:
            raise RecordNotFoundError("No configuration exists to update") from err

        config = request.fields
        existing_id: Optional[str] = assistant.openai_assistant_id if assistant.has_hosted_assistant else None
        if existing_id:
            config = config.model_copy(update={"custom_commands": assistant.custom_commands})

        hosted_id = await self.provisioner.provision(config, existing_id)
        await self.records.update_assistant(assistant.id, config, hosted_id)

        logger.info("Configuration saved", assistant_id=hosted_id, record_id=assistant.id, updated=bool(existing_id))
        return SaveConfigResponse(message="Configuration saved", assistant_id=hosted_id)

    async def _linked_assistant(self) -> AssistantLinkRecord:
        link = await self.records.find_assistant_link(self.location_id)
        if link is None or not link.assistant_id:
            raise NotConfiguredError("No assistant is configured for this location")
        return link

    async def _advanced_settings_record(self) -> AdvancedSettingsRecord:
        link = await self._linked_assistant()
        record = await self.records.get_advanced_settings(link.assistant_id or "")
        if record is None:
            raise RecordNotFoundError("No advanced settings found for the assistant")
        return record

    async def advanced_settings(self) -> AdvancedSettingsResponse:
        record = await self._advanced_settings_record()
        return AdvancedSettingsResponse.from_settings(record.id, record.settings)

    async def save_advanced_settings(self, request: AdvancedSettingsRequest) -> AdvancedSettingsResponse:
        record = await self._advanced_settings_record()
        updated = await self.records.update_advanced_settings(record.id, request.fields)
        logger.info("Advanced settings saved", record_id=updated.id)
        return AdvancedSettingsResponse.from_settings(updated.id, updated.settings)
