import pytest
from pydantic import ValidationError

from support_assistant.entities import (
    AssistantConfig,
    AssistantRecord,
    ClientRecord,
    ConversationRecord,
    MessageRecord,
    RecordDecodeError,
    StoreRecord,
    Tone,
)
from support_assistant.entities.persona import has_text
from support_assistant.entities.records import AdvancedSettings, AdvancedSettingsRecord
from support_assistant.entities.schemas import ChatResponse, FeedbackRequest, ValidateConfigResponse


@pytest.mark.unit
def test__assistant_config__reads_store_column_names() -> None:
    config = AssistantConfig.model_validate(
        {"NombreAsistente": "Sofía", "NombreEmpresa": "Acme", "Tono": "Técnico", "Columna": "ignored"}
    )

    assert config.tone is Tone.TECHNICAL
    assert config.to_record_fields() == {"NombreAsistente": "Sofía", "NombreEmpresa": "Acme", "Tono": "Técnico"}


@pytest.mark.unit
@pytest.mark.parametrize(
    "fields",
    [
        {"NombreEmpresa": "Acme", "Tono": "Profesional"},
        {"NombreAsistente": " ", "NombreEmpresa": "Acme", "Tono": "Profesional"},
        {"NombreAsistente": "Sofía", "NombreEmpresa": "Acme", "Tono": "Sarcástico"},
    ],
)
def test__assistant_config__rejects_incomplete_forms(fields: dict) -> None:
    with pytest.raises(ValidationError):
        AssistantConfig.model_validate(fields)


@pytest.mark.unit
def test__has_text() -> None:
    assert has_text("hola")
    assert not has_text(None)
    assert not has_text("  \n")


@pytest.mark.unit
def test__client_record__missing_location_is_decode_error() -> None:
    with pytest.raises(RecordDecodeError) as exc_info:
        ClientRecord.decode(StoreRecord(id="recClient", fields={}), "Clientes")

    assert exc_info.value.record_id == "recClient"
    assert exc_info.value.message == "Invalid record in table Clientes"
    assert exc_info.value.details[0]["loc"] == ("locationId",)


@pytest.mark.unit
def test__message_record__normalizes_linked_conversation() -> None:
    record = MessageRecord.decode(
        StoreRecord(id="recMsg", fields={"ConvId": 7, "Contenido": "hola", "RoleOpenAI": "user", "MsgId": 3}),
        "Mensajes",
    )

    assert record.conversation_ids == ["7"]
    assert record.msg_id == 3


@pytest.mark.unit
def test__message_record__rejects_unknown_role() -> None:
    with pytest.raises(RecordDecodeError):
        MessageRecord.decode(StoreRecord(id="recMsg", fields={"RoleOpenAI": "system"}), "Mensajes")


@pytest.mark.unit
def test__conversation_record__dumps_store_column_names() -> None:
    record = ConversationRecord.decode(
        StoreRecord(id="recConv", fields={"ConvId": 1, "ThreadId": "thread_1", "Estado": "Nuevo"}), "Conversaciones"
    )

    assert record.model_dump(by_alias=True, exclude_none=True) == {
        "id": "recConv",
        "ConvId": 1,
        "ThreadId": "thread_1",
        "Estado": "Nuevo",
    }


@pytest.mark.unit
def test__assistant_record__keeps_raw_fields_for_the_persona() -> None:
    fields = {"asistenteId": ["asst-1"], "NombreAsistente": "Sofía", "NombreEmpresa": "Acme", "Tono": "Informal"}
    record = AssistantRecord.decode(StoreRecord(id="recAsst", fields=fields), "Asistente")

    assert record.assistant_id == "asst-1"
    assert not record.has_hosted_assistant
    assert not record.is_configured
    assert record.to_config().tone is Tone.INFORMAL


@pytest.mark.unit
def test__assistant_record__half_filled_row_is_not_a_persona() -> None:
    record = AssistantRecord.decode(
        StoreRecord(id="recAsst", fields={"NombreAsistente": "Sofía", "openAiAssistantId": " "}), "Asistente"
    )

    assert not record.has_hosted_assistant
    with pytest.raises(RecordDecodeError):
        record.to_config()


@pytest.mark.unit
def test__advanced_settings_record__validates_policy() -> None:
    record = AdvancedSettingsRecord.decode(
        StoreRecord(
            id="recAdv",
            fields={"TiempoRespuesta": 2, "Recontactos": 0, "TiempoRecontacto": 3, "UnidadRecontactos": "minutes"},
        ),
        "ConfiguracionAvanzada",
    )

    assert record.settings == AdvancedSettings(
        response_time=2, recontacts=0, recontact_delay=3, recontact_unit="minutes"
    )
    with pytest.raises(RecordDecodeError):
        AdvancedSettingsRecord.decode(StoreRecord(id="recAdv", fields={"Recontactos": -1}), "ConfiguracionAvanzada")


@pytest.mark.unit
def test__schemas__render_camel_case_envelopes() -> None:
    assert ChatResponse(response="Hola", msg_id="recMsg").model_dump(by_alias=True) == {
        "success": True,
        "response": "Hola",
        "MsgId": "recMsg",
    }
    assert ValidateConfigResponse(success=False, needs_setup=True).model_dump(by_alias=True, exclude_none=True) == {
        "success": False,
        "hasAssistant": False,
        "isConfigured": False,
        "needsSetup": True,
    }


@pytest.mark.unit
def test__feedback_request__accepts_numeric_message_ids() -> None:
    request = FeedbackRequest.model_validate({"id": 12, "content": "Útil", "isPositive": True})

    assert request.id == 12
    assert request.is_positive
