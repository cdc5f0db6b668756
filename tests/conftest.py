"""Shared test fixtures for the entire test suite."""

from unittest.mock import AsyncMock

import pytest

from support_assistant import structured_logging
from support_assistant.bootstrap import create_local_record_store
from support_assistant.entities import IAssistantService, RunStatus, ServiceConfig
from support_assistant.repositories import LocalRecordStore, RecordRepository
from tests.helpers import (
    ASSISTANT_ID,
    LOCATION_ID,
    OPENAI_ASSISTANT_ID,
    DummyClient,
    DummySecretRepository,
    assistant_reply,
    run,
)


@pytest.fixture(autouse=True)
def reset_correlation_id():
    """Start every test without a correlation ID."""
    token = structured_logging._correlation_id.set(None)
    yield
    structured_logging._correlation_id.reset(token)


@pytest.fixture
def service_config() -> ServiceConfig:
    return ServiceConfig(
        environment="development",
        location_id=LOCATION_ID,
        openai_api_key="sk-test",
        record_store_type="local",
        run_poll_interval_seconds=1.0,
        run_max_attempts=30,
    )


@pytest.fixture
def dummy_secret_repo() -> DummySecretRepository:
    return DummySecretRepository()


@pytest.fixture
def dummy_client() -> DummyClient:
    return DummyClient()


@pytest.fixture
def assistant_service() -> AsyncMock:
    """Assistant service whose run completes on the first poll with an assistant reply."""
    service = AsyncMock(spec=IAssistantService)
    service.create_thread.return_value = "thread_1"
    service.start_run.return_value = run(RunStatus.QUEUED)
    service.get_run.return_value = run(RunStatus.COMPLETED)
    service.submit_tool_outputs.return_value = run(RunStatus.IN_PROGRESS)
    service.list_messages.return_value = assistant_reply()
    service.create_assistant.return_value = "asst_new"
    service.update_assistant.side_effect = lambda assistant_id, **_: assistant_id
    return service


@pytest.fixture
def local_store(service_config: ServiceConfig) -> LocalRecordStore:
    """In-memory store holding one client with a configured assistant."""
    store = create_local_record_store(service_config)
    store.seed(service_config.clients_table, {"locationId": LOCATION_ID, "Nombre": "Acme"})
    store.seed(service_config.assistant_link_table, {"locationId": [LOCATION_ID], "asistenteId": [ASSISTANT_ID]})
    store.seed(
        service_config.assistant_table,
        {
            "asistenteId": ASSISTANT_ID,
            "NombreAsistente": "Sofía",
            "NombreEmpresa": "Acme",
            "Tono": "Profesional",
            "Objetivo": "Asesorar",
            "ComandosPropios": "/precio: muestra la lista de precios",
            "openAiAssistantId": OPENAI_ASSISTANT_ID,
        },
    )
    store.seed(
        service_config.advanced_settings_table,
        {
            "asistenteId (from asistenteId)": [ASSISTANT_ID],
            "TiempoRespuesta": 5,
            "Recontactos": 2,
            "TiempoRecontacto": 1,
            "UnidadRecontactos": "days",
        },
    )
    return store


@pytest.fixture
def records(local_store: LocalRecordStore, service_config: ServiceConfig) -> RecordRepository:
    return RecordRepository(local_store, service_config)
