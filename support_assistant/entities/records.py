"""Typed views of record store rows.

Rows come back from the store as ``{id, createdTime, fields}`` with loosely typed
fields. They are validated here, at the store boundary, so nothing untyped flows
further into the service.
"""

from typing import Annotated, Any, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from .errors import RecordDecodeError
from .persona import AssistantConfig

RecordT = TypeVar("RecordT", bound="TypedRecord")


def _first(value: Any) -> Any:
    """Lookup and linked fields arrive as single element lists."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


FirstValue = Annotated[Optional[str], BeforeValidator(_first)]


class StoreRecord(BaseModel):
    """A raw row as returned by the record store."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_time: Optional[str] = Field(default=None, alias="createdTime")
    fields: dict[str, Any] = Field(default_factory=dict)


class TypedRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str

    @classmethod
    def decode(cls: type[RecordT], record: StoreRecord, table: str) -> RecordT:
        try:
            return cls.model_validate({"id": record.id, **record.fields})
        except ValidationError as err:
            raise RecordDecodeError(table, record.id, err.errors(include_url=False)) from err


class ClientRecord(TypedRecord):
    location_id: Annotated[str, BeforeValidator(_first)] = Field(alias="locationId")


class AssistantLinkRecord(TypedRecord):
    location_id: FirstValue = Field(default=None, alias="locationId")
    assistant_id: FirstValue = Field(default=None, alias="asistenteId")


class AssistantRecord(TypedRecord):
    """Stored persona row. Lenient on purpose: a half-filled form is still a valid row."""

    assistant_id: FirstValue = Field(default=None, alias="asistenteId")
    assistant_name: Optional[str] = Field(default=None, alias="NombreAsistente")
    company_name: Optional[str] = Field(default=None, alias="NombreEmpresa")
    openai_assistant_id: Optional[str] = Field(default=None, alias="openAiAssistantId")
    custom_commands: Optional[str] = Field(default=None, alias="ComandosPropios")
    fields: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @classmethod
    def decode(cls, record: StoreRecord, table: str) -> "AssistantRecord":
        decoded = super().decode(record, table)
        return decoded.model_copy(update={"fields": dict(record.fields)})

    @property
    def has_hosted_assistant(self) -> bool:
        return bool(self.openai_assistant_id and self.openai_assistant_id.strip())

    @property
    def is_configured(self) -> bool:
        return self.has_hosted_assistant and bool(self.assistant_name) and bool(self.company_name)

    def to_config(self, table: str = "Asistente") -> AssistantConfig:
        """Validate the stored fields into a complete persona."""
        try:
            return AssistantConfig.model_validate(self.fields)
        except ValidationError as err:
            raise RecordDecodeError(table, self.id, err.errors(include_url=False)) from err


class ConversationRecord(TypedRecord):
    conv_id: Optional[Union[int, str]] = Field(default=None, alias="ConvId")
    thread_id: Optional[str] = Field(default=None, alias="ThreadId")
    status: Optional[str] = Field(default=None, alias="Estado")
    channel: Optional[str] = Field(default=None, alias="Canal")
    started_at: Optional[str] = Field(default=None, alias="FechaInicio")


class MessageRecord(TypedRecord):
    msg_id: Optional[int] = Field(default=None, alias="MsgId")
    conversation_ids: list[str] = Field(default_factory=list, alias="ConvId")
    author: Optional[str] = Field(default=None, alias="Autor")
    content: str = Field(default="", alias="Contenido")
    role: Literal["user", "assistant"] = Field(alias="RoleOpenAI")
    sent_at: Optional[str] = Field(default=None, alias="FechaHora")

    @field_validator("conversation_ids", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, int)):
            return [str(value)]
        return value


class AdvancedSettings(BaseModel):
    """Response timing and re-contact policy of the widget."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    response_time: int = Field(alias="TiempoRespuesta", ge=1)
    recontacts: int = Field(alias="Recontactos", ge=0)
    recontact_delay: int = Field(alias="TiempoRecontacto", ge=1)
    recontact_unit: Literal["minutes", "hours", "days"] = Field(alias="UnidadRecontactos")


class AdvancedSettingsRecord(TypedRecord):
    settings: AdvancedSettings

    @classmethod
    def decode(cls, record: StoreRecord, table: str) -> "AdvancedSettingsRecord":
        try:
            return cls(id=record.id, settings=AdvancedSettings.model_validate(record.fields))
        except ValidationError as err:
            raise RecordDecodeError(table, record.id, err.errors(include_url=False)) from err
