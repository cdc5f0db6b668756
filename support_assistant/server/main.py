"""Main application module for the support assistant.

This module bootstraps the FastAPI application with all necessary components.
"""

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from ..bootstrap import (
    get_assistant_service,
    get_conversation_service,
    get_openai_client,
    get_record_store,
    get_secret_repository,
)
from ..entities import HEADER_CORRELATION_ID, IRecordStore, ServiceConfig
from ..entities.schemas import (
    AdvancedSettingsRequest,
    AdvancedSettingsResponse,
    AssistantInfoResponse,
    ChatRequest,
    ChatResponse,
    ConversationResponse,
    CreateConversationRequest,
    CreateConversationResponse,
    Envelope,
    FeedbackRequest,
    SaveConfigRequest,
    SaveConfigResponse,
    ValidateConfigResponse,
)
from ..services import ConversationService
from ..structured_logging import CorrelationContext, configure_structlog, get_logger
from .error_handlers import ErrorHandler, setup_exception_handlers

logger = get_logger("MAIN")


def create_lifespan(api_instance: "SupportAssistantAPI") -> Any:
    """Create a lifespan context manager for the API instance."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Application starting up...")
        yield
        logger.info("Application shutting down...")
        await api_instance.close()

    return lifespan


class SupportAssistantAPI:
    """Main API class for the support assistant."""

    def __init__(
        self,
        service_config: Optional[ServiceConfig] = None,
        client: Optional[AsyncOpenAI] = None,
        record_store: Optional[IRecordStore] = None,
        service: Optional[ConversationService] = None,
    ) -> None:
        """Initialize the API with configuration.

        Args:
            service_config: Optional service configuration. If not provided, will be loaded from environment.
            client: OpenAI client to use instead of creating one.
            record_store: Record store to use instead of creating one.
            service: Fully wired service, mainly for tests.
        """
        self.service_config = service_config or ServiceConfig()

        secret_repository = get_secret_repository(self.service_config)
        self.client = client or get_openai_client(self.service_config, secret_repository)
        self.record_store = record_store or get_record_store(self.service_config, secret_repository)
        self.service = service or get_conversation_service(
            self.service_config, get_assistant_service(self.client), self.record_store
        )

        # Log configuration (without sensitive data)
        logger.info(
            "Booting with config",
            environment=self.service_config.environment,
            location_id=self.service_config.location_id,
            record_store_type=self.service_config.record_store_type,
            assistant_model=self.service_config.assistant_model,
            openai_apikey="sk" if self.service_config.openai_api_key else None,
            run_poll_interval_seconds=self.service_config.run_poll_interval_seconds,
            run_max_attempts=self.service_config.run_max_attempts,
        )

        self.app = FastAPI(title="Support Assistant", lifespan=create_lifespan(self))
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[HEADER_CORRELATION_ID],
        )
        setup_exception_handlers(self.app)
        self._setup_middleware()
        self._setup_routes()

    async def close(self) -> None:
        await self.client.close()
        aclose = getattr(self.record_store, "aclose", None)
        if aclose is not None:
            await aclose()

    def _setup_middleware(self) -> None:
        @self.app.middleware("http")
        async def correlation(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
            """Run each request inside a correlation context and echo the ID back."""
            with CorrelationContext(request.headers.get(HEADER_CORRELATION_ID)) as correlation_id:
                try:
                    response = await call_next(request)
                except Exception as err:  # noqa: BLE001
                    return ErrorHandler.handle_unexpected_error(
                        err, correlation_id, method=request.method, path=request.url.path
                    )
                response.headers[HEADER_CORRELATION_ID] = correlation_id
                return response

    def _setup_routes(self) -> None:
        service = self.service

        @self.app.get("/")
        async def root() -> dict[str, str]:
            return {"message": "Support Assistant is running"}

        @self.app.get("/api/assistant-info", response_model=AssistantInfoResponse)
        async def assistant_info() -> AssistantInfoResponse:
            return await service.assistant_info()

        @self.app.get(
            "/api/validate-config", response_model=ValidateConfigResponse, response_model_exclude_none=True
        )
        async def validate_config() -> ValidateConfigResponse:
            return await service.validate_config()

        @self.app.post("/api/chat", response_model=ChatResponse)
        async def chat(request: ChatRequest) -> ChatResponse:
            logger.info(
                "Processing chat request",
                thread_id=request.thread_id,
                conversation_id=request.conversation_id,
                message_length=len(request.message),
            )
            return await service.chat(request)

        @self.app.get("/api/conversations", response_model=ConversationResponse)
        async def current_conversation() -> ConversationResponse:
            return await service.current_conversation()

        @self.app.post("/api/conversations", response_model=CreateConversationResponse)
        async def create_conversation(request: CreateConversationRequest) -> CreateConversationResponse:
            return await service.create_conversation(request)

        @self.app.post("/api/feedback", response_model=Envelope)
        async def feedback(request: FeedbackRequest) -> Envelope:
            return await service.submit_feedback(request)

        @self.app.post("/api/save-config", response_model=SaveConfigResponse)
        async def save_config(request: SaveConfigRequest) -> SaveConfigResponse:
            return await service.save_config(request)

        @self.app.get("/api/advanced-config", response_model=AdvancedSettingsResponse)
        async def advanced_config() -> AdvancedSettingsResponse:
            return await service.advanced_settings()

        @self.app.post("/api/advanced-config", response_model=AdvancedSettingsResponse)
        async def save_advanced_config(request: AdvancedSettingsRequest) -> AdvancedSettingsResponse:
            return await service.save_advanced_settings(request)


def get_app() -> FastAPI:
    """Return a fully configured FastAPI application."""
    configure_structlog()

    api_instance = SupportAssistantAPI()
    return api_instance.app


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        "support_assistant.server.main:get_app",
        factory=True,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8080")),
    )


# Public API exports
__all__ = ["get_app", "run", "SupportAssistantAPI"]
