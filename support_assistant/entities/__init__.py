"""Data entities for the support assistant service."""

from .config import ServiceConfig
from .errors import (
    ExternalServiceError,
    InvalidRequestError,
    NoAssistantReplyError,
    NotConfiguredError,
    RecordDecodeError,
    RecordNotFoundError,
    RunError,
    RunFailedError,
    RunTimeoutError,
    SupportAssistantError,
)
from .headers import HEADER_CORRELATION_ID
from .interfaces import IAssistantService, IRecordStore
from .persona import AssistantConfig, Objective, Tone
from .records import (
    AdvancedSettings,
    AdvancedSettingsRecord,
    AssistantLinkRecord,
    AssistantRecord,
    ClientRecord,
    ConversationRecord,
    MessageRecord,
    StoreRecord,
)
from .run import RunSnapshot, RunStatus, ThreadMessage, ToolOutput, TurnContext, TurnResult

__all__ = [
    "ServiceConfig",
    "AssistantConfig",
    "Tone",
    "Objective",
    "StoreRecord",
    "ClientRecord",
    "AssistantLinkRecord",
    "AssistantRecord",
    "ConversationRecord",
    "MessageRecord",
    "AdvancedSettings",
    "AdvancedSettingsRecord",
    "RunStatus",
    "RunSnapshot",
    "ThreadMessage",
    "ToolOutput",
    "TurnContext",
    "TurnResult",
    "IAssistantService",
    "IRecordStore",
    "SupportAssistantError",
    "InvalidRequestError",
    "RecordNotFoundError",
    "NotConfiguredError",
    "ExternalServiceError",
    "RecordDecodeError",
    "RunError",
    "RunFailedError",
    "RunTimeoutError",
    "NoAssistantReplyError",
    "HEADER_CORRELATION_ID",
]
