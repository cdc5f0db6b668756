"""Factory functions for creating and configuring application components with dependency injection."""

from typing import Optional

from openai import AsyncOpenAI

from support_assistant.entities import IAssistantService, IRecordStore, ServiceConfig
from support_assistant.processors import AssistantProvisioner, RunOrchestrator
from support_assistant.providers import OpenAIAssistantService
from support_assistant.repositories import (
    AirtableRecordStore,
    BaseSecretRepository,
    GCPSecretRepository,
    LocalRecordStore,
    LocalSecretRepository,
    RecordRepository,
)
from support_assistant.services import ConversationService
from support_assistant.structured_logging import get_logger

logger = get_logger("BOOTSTRAP")

# Component type registries for better error messages
SUPPORTED_RECORD_STORES = {"airtable", "local"}

OPENAI_API_KEY_SECRET = "openai-api-key"
AIRTABLE_API_KEY_SECRET = "airtable-api-key"

DEV_ASSISTANT_ID = "dev-assistant"


def get_secret_repository(config: ServiceConfig) -> BaseSecretRepository:
    """Create development or production secret repository based on environment."""
    if config.is_development:
        logger.info("Using local secret repository for development")
        return LocalSecretRepository()
    logger.info("Using GCP secret repository for production")
    return GCPSecretRepository(client_id=config.client_id, project_id=config.project_id)


def resolve_secret(value: str, secret_repository: BaseSecretRepository, secret_suffix: str) -> str:
    """Return ``value`` when set, otherwise read it from the secret repository."""
    if value:
        return value
    logger.info("Reading secret from repository", secret=secret_suffix)
    return secret_repository.access_secret(secret_suffix)


def get_openai_client(service_config: ServiceConfig, secret_repository: BaseSecretRepository) -> AsyncOpenAI:
    logger.info("Creating OpenAI client")
    api_key = resolve_secret(service_config.openai_api_key, secret_repository, OPENAI_API_KEY_SECRET)
    return AsyncOpenAI(api_key=api_key)


def seed_local_records(store: LocalRecordStore, config: ServiceConfig) -> None:
    """Give the in-memory store one client with an assistant so the widget can run locally."""
    store.seed(config.clients_table, {"locationId": config.location_id})
    store.seed(config.assistant_link_table, {"locationId": config.location_id, "asistenteId": DEV_ASSISTANT_ID})
    store.seed(
        config.assistant_table,
        {
            "asistenteId": DEV_ASSISTANT_ID,
            "NombreAsistente": "Asistente",
            "NombreEmpresa": "Empresa",
            "Tono": "Profesional",
        },
    )
    store.seed(
        config.advanced_settings_table,
        {
            "asistenteId (from asistenteId)": [DEV_ASSISTANT_ID],
            "TiempoRespuesta": 1,
            "Recontactos": 0,
            "TiempoRecontacto": 1,
            "UnidadRecontactos": "hours",
        },
    )


def create_local_record_store(service_config: ServiceConfig) -> LocalRecordStore:
    """In-memory store laid out like the Airtable base: autonumbers, created times and primary fields."""
    return LocalRecordStore(
        autonumber_fields={service_config.conversations_table: "ConvId", service_config.messages_table: "MsgId"},
        created_time_fields={
            service_config.conversations_table: "FechaInicio",
            service_config.messages_table: "FechaHora",
        },
        primary_fields={
            service_config.clients_table: "locationId",
            service_config.conversations_table: "ConvId",
            service_config.messages_table: "MsgId",
        },
    )


def get_record_store(service_config: ServiceConfig, secret_repository: BaseSecretRepository) -> IRecordStore:
    """Create the record store with configurable type selection."""
    record_store_type = service_config.record_store_type

    if record_store_type not in SUPPORTED_RECORD_STORES:
        available = ", ".join(sorted(SUPPORTED_RECORD_STORES))
        raise ValueError(f"Unknown record store type '{record_store_type}'. Available types: {available}")

    if record_store_type == "airtable":
        logger.info("Creating Airtable record store", base_id=service_config.airtable_base_id)
        return AirtableRecordStore(
            api_key=resolve_secret(service_config.airtable_api_key, secret_repository, AIRTABLE_API_KEY_SECRET),
            base_id=service_config.airtable_base_id,
            api_url=service_config.airtable_api_url,
            timeout=service_config.http_timeout_seconds,
        )

    if record_store_type == "local":
        logger.info("Creating local record store")
        store = create_local_record_store(service_config)
        if service_config.location_id:
            seed_local_records(store, service_config)
        return store

    # This should not be reachable due to SUPPORTED_RECORD_STORES check above
    raise ValueError(f"Record store type '{record_store_type}' is supported but not implemented")


def get_assistant_service(client: AsyncOpenAI) -> IAssistantService:
    return OpenAIAssistantService(client)


def get_run_orchestrator(
    assistant_service: IAssistantService, records: RecordRepository, service_config: ServiceConfig
) -> RunOrchestrator:
    return RunOrchestrator(
        assistant_service,
        records,
        poll_interval=service_config.run_poll_interval_seconds,
        max_attempts=service_config.run_max_attempts,
    )


def get_conversation_service(
    service_config: ServiceConfig,
    assistant_service: IAssistantService,
    record_store: IRecordStore,
    orchestrator: Optional[RunOrchestrator] = None,
) -> ConversationService:
    """Wire the conversation service over an assistant service and a record store."""
    records = RecordRepository(record_store, service_config)
    return ConversationService(
        service_config,
        assistant_service,
        records,
        orchestrator or get_run_orchestrator(assistant_service, records, service_config),
        AssistantProvisioner(assistant_service, model=service_config.assistant_model),
    )
