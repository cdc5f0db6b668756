"""Typed access to the tables the widget reads and writes."""

from typing import Optional, Union

from support_assistant.entities import (
    AdvancedSettings,
    AdvancedSettingsRecord,
    AssistantConfig,
    AssistantLinkRecord,
    AssistantRecord,
    ClientRecord,
    ConversationRecord,
    IRecordStore,
    MessageRecord,
    NotConfiguredError,
    ServiceConfig,
    StoreRecord,
)

from ..structured_logging import get_logger
from .airtable import equals_formula

logger = get_logger("RECORDS")

CONVERSATION_CHANNEL = "Playground"
CONVERSATION_STATUS_NEW = "Nuevo"
FEEDBACK_POSITIVE = "Positivo"
FEEDBACK_NEGATIVE = "Negativo"
# Lookup column on the advanced settings table that resolves to the assistant's asistenteId
ADVANCED_SETTINGS_ASSISTANT_FIELD = "asistenteId (from asistenteId)"


class RecordRepository:
    """Wraps an IRecordStore with the lookups and writes of the service.

    Every row is decoded into its typed record on the way out, so schema
    mismatches surface here as RecordDecodeError.
    """

    def __init__(self, store: IRecordStore, config: ServiceConfig):
        self.store = store
        self.config = config

    async def _first(self, table: str, formula: str) -> Optional[StoreRecord]:
        records = await self.store.select(table, formula=formula, max_records=1)
        return records[0] if records else None

    async def find_client(self, location_id: str) -> Optional[ClientRecord]:
        table = self.config.clients_table
        record = await self._first(table, equals_formula("locationId", location_id))
        return ClientRecord.decode(record, table) if record else None

    async def find_assistant_link(self, location_id: str) -> Optional[AssistantLinkRecord]:
        table = self.config.assistant_link_table
        record = await self._first(table, equals_formula("locationId", location_id))
        return AssistantLinkRecord.decode(record, table) if record else None

    async def find_assistant(self, assistant_id: str) -> Optional[AssistantRecord]:
        table = self.config.assistant_table
        record = await self._first(table, equals_formula("asistenteId", assistant_id))
        return AssistantRecord.decode(record, table) if record else None

    async def get_assistant_for_location(self, location_id: str) -> AssistantRecord:
        """Resolve the assistant configured for a location.

        Raises:
            NotConfiguredError: No link row, no assistant id on it, or no assistant row.
        """
        link = await self.find_assistant_link(location_id)
        if link is None or not link.assistant_id:
            logger.warning("No assistant linked to location", location_id=location_id)
            raise NotConfiguredError("No assistant is configured for this location")

        assistant = await self.find_assistant(link.assistant_id)
        if assistant is None:
            logger.warning("Linked assistant not found", location_id=location_id, assistant_id=link.assistant_id)
            raise NotConfiguredError("No assistant is configured for this location")
        return assistant

    async def latest_conversation(self, location_id: str) -> Optional[ConversationRecord]:
        table = self.config.conversations_table
        records = await self.store.select(
            table,
            formula=equals_formula("locationId", location_id),
            sort=[("FechaInicio", "desc")],
            max_records=1,
        )
        return ConversationRecord.decode(records[0], table) if records else None

    async def list_messages(self, conv_id: Union[int, str]) -> list[MessageRecord]:
        table = self.config.messages_table
        records = await self.store.select(
            table,
            formula=equals_formula("ConvId", conv_id),
            sort=[("MsgId", "asc")],
            all_pages=True,
        )
        return [MessageRecord.decode(record, table) for record in records]

    async def find_message_by_msg_id(self, msg_id: str) -> Optional[MessageRecord]:
        table = self.config.messages_table
        record = await self._first(table, equals_formula("MsgId", msg_id))
        return MessageRecord.decode(record, table) if record else None

    async def create_conversation(
        self, client_record_id: str, assistant_record_id: str, thread_id: str
    ) -> ConversationRecord:
        table = self.config.conversations_table
        record = await self.store.create(
            table,
            {
                "Canal": CONVERSATION_CHANNEL,
                "locationId": [client_record_id],
                "Asistente": [assistant_record_id],
                "Estado": CONVERSATION_STATUS_NEW,
                "ThreadId": thread_id,
            },
        )
        logger.info("Conversation record created", conversation_id=record.id, thread_id=thread_id)
        return ConversationRecord.decode(record, table)

    async def create_message(self, conversation_id: str, role: str, content: str) -> MessageRecord:
        table = self.config.messages_table
        record = await self.store.create(
            table,
            {"ConvId": [conversation_id], "Autor": role, "Contenido": content, "RoleOpenAI": role},
        )
        logger.debug("Message record created", conversation_id=conversation_id, record_id=record.id, role=role)
        return MessageRecord.decode(record, table)

    async def create_feedback(self, message_record_id: str, content: str, is_positive: bool) -> StoreRecord:
        record = await self.store.create(
            self.config.feedback_table,
            {
                "MsgId": [message_record_id],
                "mensaje": content,
                "Tipo": [FEEDBACK_POSITIVE if is_positive else FEEDBACK_NEGATIVE],
            },
        )
        logger.info("Feedback recorded", record_id=record.id, message_record_id=message_record_id)
        return record

    async def update_assistant(
        self, record_id: str, config: AssistantConfig, openai_assistant_id: str
    ) -> AssistantRecord:
        table = self.config.assistant_table
        fields = config.to_record_fields()
        fields["openAiAssistantId"] = openai_assistant_id
        record = await self.store.update(table, record_id, fields)
        return AssistantRecord.decode(record, table)

    async def get_advanced_settings(self, assistant_id: str) -> Optional[AdvancedSettingsRecord]:
        table = self.config.advanced_settings_table
        record = await self._first(table, equals_formula(ADVANCED_SETTINGS_ASSISTANT_FIELD, assistant_id))
        return AdvancedSettingsRecord.decode(record, table) if record else None

    async def update_advanced_settings(self, record_id: str, settings: AdvancedSettings) -> AdvancedSettingsRecord:
        table = self.config.advanced_settings_table
        record = await self.store.update(table, record_id, settings.model_dump(by_alias=True))
        return AdvancedSettingsRecord.decode(record, table)
