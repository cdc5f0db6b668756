"""Assistant persona authored through the configuration form."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Tone(str, Enum):
    """Conversation tone. Values are the ones stored in the record store."""

    PROFESSIONAL = "Profesional"
    INFORMAL = "Informal"
    TECHNICAL = "Técnico"
    CLOSE = "Cercano"
    EMPATHETIC = "Empático"


class Objective(str, Enum):
    """Commercial objective of the assistant."""

    ADVISE = "Asesorar"
    PREQUALIFY = "Precalificar"
    ADVISE_AND_PREQUALIFY = "Asesorar y Precalificar"
    COLLECT_AND_REFER = "Recolectar información y derivar"
    COLLECT_ADVISE_AND_REFER = "Recolectar información, asesorar y derivar"


class AssistantConfig(BaseModel):
    """Persona definition used to render the hosted assistant's instructions.

    Field aliases are the column names of the assistant table, so a stored record's
    fields validate directly into this model.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    assistant_name: str = Field(alias="NombreAsistente", min_length=1)
    company_name: str = Field(alias="NombreEmpresa", min_length=1)
    tone: Tone = Field(alias="Tono")
    # Kept as a plain string: values outside Objective render without a body
    objective: Optional[str] = Field(default=None, alias="Objetivo")

    company_description: Optional[str] = Field(default=None, alias="DescripcionEmpresa")
    sector: Optional[str] = Field(default=None, alias="Sector")
    target_customers: Optional[str] = Field(default=None, alias="ClientesObjetivos")
    personality: Optional[str] = Field(default=None, alias="Personalidad")
    qualifying_questions: Optional[str] = Field(default=None, alias="PreguntasCalificacion")
    faq: Optional[str] = Field(default=None, alias="PreguntasFrecuentes")
    conversation_examples: Optional[str] = Field(default=None, alias="EjemplosConversaciones")
    objection_handling: Optional[str] = Field(default=None, alias="ManejoObjeciones")
    unavailable_products: Optional[str] = Field(default=None, alias="ProductosNoDisponibles")
    forbidden_topics: Optional[str] = Field(default=None, alias="NoResponder")
    extra_info: Optional[str] = Field(default=None, alias="InfoAdicional")
    source_sites: Optional[str] = Field(default=None, alias="SitiosWeb")
    reengagement_message: Optional[str] = Field(default=None, alias="MensajeRecontacto")
    custom_commands: Optional[str] = Field(default=None, alias="ComandosPropios")

    openai_assistant_id: Optional[str] = Field(default=None, alias="openAiAssistantId")

    @field_validator("assistant_name", "company_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    def to_record_fields(self) -> dict[str, Any]:
        """Return the populated fields keyed by their record store column names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def has_text(value: Optional[str]) -> bool:
    """True when an optional persona field carries content."""
    return value is not None and value.strip() != ""
