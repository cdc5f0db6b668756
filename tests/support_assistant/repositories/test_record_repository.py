import pytest

from support_assistant.entities import AdvancedSettings, AssistantConfig, NotConfiguredError, RecordDecodeError, Tone
from support_assistant.repositories import RecordRepository
from tests.helpers import ASSISTANT_ID, LOCATION_ID, OPENAI_ASSISTANT_ID


@pytest.mark.unit
@pytest.mark.asyncio
async def test__get_assistant_for_location__follows_the_link(records: RecordRepository) -> None:
    assistant = await records.get_assistant_for_location(LOCATION_ID)

    assert assistant.assistant_id == ASSISTANT_ID
    assert assistant.openai_assistant_id == OPENAI_ASSISTANT_ID
    assert assistant.is_configured
    assert assistant.to_config().tone == Tone.PROFESSIONAL


@pytest.mark.unit
@pytest.mark.asyncio
async def test__get_assistant_for_location__unknown_location(records: RecordRepository) -> None:
    with pytest.raises(NotConfiguredError):
        await records.get_assistant_for_location("loc-unknown")


@pytest.mark.unit
@pytest.mark.asyncio
async def test__get_assistant_for_location__link_without_assistant_row(records: RecordRepository) -> None:
    records.store.seed(records.config.assistant_link_table, {"locationId": "loc-orphan", "asistenteId": "missing"})

    with pytest.raises(NotConfiguredError):
        await records.get_assistant_for_location("loc-orphan")


@pytest.mark.unit
@pytest.mark.asyncio
async def test__find_client__decodes_location(records: RecordRepository) -> None:
    client = await records.find_client(LOCATION_ID)

    assert client is not None
    assert client.location_id == LOCATION_ID
    assert await records.find_client("nobody") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test__conversation_and_messages_round_trip(records: RecordRepository) -> None:
    client = await records.find_client(LOCATION_ID)
    assistant = await records.get_assistant_for_location(LOCATION_ID)
    conversation = await records.create_conversation(client.id, assistant.id, "thread_1")

    await records.create_message(conversation.id, "user", "hola")
    await records.create_message(conversation.id, "assistant", "¡Hola!")

    assert conversation.status == "Nuevo"
    assert conversation.channel == "Playground"
    assert conversation.thread_id == "thread_1"

    messages = await records.list_messages(conversation.conv_id)
    assert [(m.role, m.content) for m in messages] == [("user", "hola"), ("assistant", "¡Hola!")]
    assert [m.msg_id for m in messages] == sorted(m.msg_id for m in messages)
    assert all(m.conversation_ids == [conversation.id] for m in messages)


@pytest.mark.unit
@pytest.mark.asyncio
async def test__find_message_by_msg_id(records: RecordRepository) -> None:
    created = await records.create_message("recConv", "assistant", "respuesta")

    found = await records.find_message_by_msg_id(str(created.msg_id))

    assert found is not None and found.id == created.id
    assert await records.find_message_by_msg_id("999") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test__create_feedback__links_message_and_type(records: RecordRepository) -> None:
    feedback = await records.create_feedback("recMsg", "Muy útil", is_positive=False)

    assert feedback.fields == {"MsgId": ["recMsg"], "mensaje": "Muy útil", "Tipo": ["Negativo"]}


@pytest.mark.unit
@pytest.mark.asyncio
async def test__update_assistant__writes_form_and_hosted_id(records: RecordRepository) -> None:
    assistant = await records.get_assistant_for_location(LOCATION_ID)
    config = AssistantConfig(assistant_name="Lucía", company_name="Acme", tone=Tone.INFORMAL, faq="FAQ")

    updated = await records.update_assistant(assistant.id, config, "asst_new")

    assert updated.assistant_name == "Lucía"
    assert updated.openai_assistant_id == "asst_new"
    assert updated.fields["PreguntasFrecuentes"] == "FAQ"
    assert updated.fields["Tono"] == "Informal"


@pytest.mark.unit
@pytest.mark.asyncio
async def test__advanced_settings_round_trip(records: RecordRepository) -> None:
    current = await records.get_advanced_settings(ASSISTANT_ID)
    assert current is not None
    assert current.settings.recontact_unit == "days"

    changed = AdvancedSettings(TiempoRespuesta=3, Recontactos=1, TiempoRecontacto=12, UnidadRecontactos="hours")
    updated = await records.update_advanced_settings(current.id, changed)

    assert updated.settings == changed
    assert await records.get_advanced_settings("other-assistant") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test__invalid_rows_raise_decode_errors(records: RecordRepository) -> None:
    records.store.seed(records.config.messages_table, {"ConvId": ["recX"], "MsgId": 50, "RoleOpenAI": "system"})

    with pytest.raises(RecordDecodeError) as exc_info:
        await records.find_message_by_msg_id("50")
    assert exc_info.value.table == records.config.messages_table
