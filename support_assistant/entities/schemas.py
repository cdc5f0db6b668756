"""Request and response schemas for the API endpoints.

Every response is a ``{success: bool, ...}`` envelope with camelCase keys, the
shape the chat widget consumes.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .persona import AssistantConfig
from .records import AdvancedSettings, ConversationRecord, MessageRecord


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(ApiModel):
    success: bool = True


class ChatRequest(ApiModel):
    """Schema for a chat turn."""

    message: str = ""
    conversation_id: str = ""
    thread_id: str = ""


class ChatResponse(Envelope):
    response: str
    msg_id: str = Field(alias="MsgId")


class AssistantInfoResponse(Envelope):
    assistant_id: Optional[str] = None
    assistant_name: Optional[str] = None
    company_name: Optional[str] = None
    has_assistant: bool = False


class ValidateConfigResponse(Envelope):
    has_assistant: bool = False
    assistant_id: Optional[str] = None
    is_configured: bool = False
    message: Optional[str] = None
    error: Optional[str] = None
    needs_setup: Optional[bool] = None


class ConversationResponse(Envelope):
    """Latest conversation with its messages, keyed by the store's column names."""

    conversation: Optional[dict[str, Any]] = None
    messages: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_records(
        cls, conversation: Optional[ConversationRecord], messages: list[MessageRecord]
    ) -> "ConversationResponse":
        return cls(
            conversation=conversation.model_dump(by_alias=True, exclude_none=True) if conversation else None,
            messages=[message.model_dump(by_alias=True, exclude_none=True) for message in messages],
        )


class CreateConversationRequest(ApiModel):
    # The widget posts the client's location ID under this name
    client_id: str = Field(default="", validation_alias="clienteId")


class CreateConversationResponse(Envelope):
    conversation_id: str
    thread_id: str


class FeedbackRequest(ApiModel):
    id: Optional[Union[int, str]] = None
    content: str = ""
    is_positive: bool = False


class SaveConfigRequest(BaseModel):
    """Configuration form as posted by the widget: ``{"fields": {...}}``."""

    fields: AssistantConfig


class SaveConfigResponse(Envelope):
    message: str
    assistant_id: str


class AdvancedSettingsRequest(BaseModel):
    fields: AdvancedSettings


class AdvancedSettingsResponse(Envelope):
    id: str
    fields: dict[str, Any]

    @classmethod
    def from_settings(cls, record_id: str, settings: AdvancedSettings) -> "AdvancedSettingsResponse":
        return cls(id=record_id, fields=settings.model_dump(by_alias=True))


class ErrorResponse(Envelope):
    success: bool = False
    error: str
    details: Optional[Any] = None
    issues: Optional[list[Any]] = None
    needs_setup: Optional[bool] = None
    retryable: Optional[bool] = None
    correlation_id: Optional[str] = None
