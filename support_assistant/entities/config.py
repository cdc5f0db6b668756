"""Service configuration loaded from the environment."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceConfig(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra environment variables
        populate_by_name=True,  # Allow both field names and validation aliases
    )

    # Environment configuration
    environment: Literal["development", "production"] = Field(
        default="development",
        description="The environment the service is running in",
        validation_alias="ENVIRONMENT",
    )

    # GCP configuration
    project_id: str = Field(
        default="",
        description="GCP project ID holding the secrets",
        validation_alias="PROJECT_ID",
    )
    client_id: str = Field(
        default="",
        description="Client ID used as the secret name prefix",
        validation_alias="CLIENT_ID",
    )

    # Widget tenant
    location_id: str = Field(
        default="",
        description="Location ID of the client this widget serves",
        validation_alias="LOCATION_ID",
    )

    # OpenAI configuration
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key",
        validation_alias="OPENAI_API_KEY",
    )
    assistant_model: str = Field(
        default="gpt-4o-mini",
        description="Model used when creating or updating the hosted assistant",
        validation_alias="ASSISTANT_MODEL",
    )

    # Run polling
    run_poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Seconds to wait between run status polls",
        validation_alias="RUN_POLL_INTERVAL_SECONDS",
    )
    run_max_attempts: int = Field(
        default=30,
        ge=1,
        description="Number of status polls before a run is considered timed out",
        validation_alias="RUN_MAX_ATTEMPTS",
    )

    # Record store configuration
    record_store_type: Literal["airtable", "local"] = Field(
        default="local",
        description="Record store backend. Currently supported: 'airtable', 'local'",
        validation_alias="RECORD_STORE_TYPE",
    )
    airtable_api_key: str = Field(
        default="",
        description="Airtable personal access token",
        validation_alias="AIRTABLE_API_KEY",
    )
    airtable_base_id: str = Field(
        default="",
        description="Airtable base ID",
        validation_alias="AIRTABLE_BASE_ID",
    )
    airtable_api_url: str = Field(
        default="https://api.airtable.com/v0",
        description="Airtable REST API root",
        validation_alias="AIRTABLE_API_URL",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for record store HTTP calls",
        validation_alias="HTTP_TIMEOUT_SECONDS",
    )

    # Table names in the record store
    clients_table: str = Field(default="Clientes", validation_alias="CLIENTS_TABLE")
    assistant_link_table: str = Field(default="AsistentePorCliente", validation_alias="ASSISTANT_LINK_TABLE")
    assistant_table: str = Field(default="Asistente", validation_alias="ASSISTANT_TABLE")
    conversations_table: str = Field(default="Conversaciones", validation_alias="CONVERSATIONS_TABLE")
    messages_table: str = Field(default="Mensajes", validation_alias="MESSAGES_TABLE")
    feedback_table: str = Field(default="Feedback", validation_alias="FEEDBACK_TABLE")
    advanced_settings_table: str = Field(
        default="ConfiguracionAvanzada", validation_alias="ADVANCED_SETTINGS_TABLE"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production" and bool(self.project_id)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return not self.is_production
