"""Structured logging built on structlog, rendered through the stdlib logging module."""

import logging
import sys
import uuid
from contextvars import ContextVar, Token
from typing import Any, Literal, Optional, TextIO

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, WrappedLogger

# Trace fields are rendered at the top level; anything else goes under "extra"
TRACE_FIELDS = ("correlation_id", "thread_id", "run_id", "conversation_id")
BASE_FIELDS = {"message", "level", "logger", "timestamp", "context", "stream", "exception"}

HANDLER_NAME = "support_assistant"

_LOGGING_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class LoggingContext(BaseSettings):
    """Logging settings read from the environment."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    stream: str = Field(default="stdout", validation_alias="STREAM")
    logging_level: str = Field(default="INFO", validation_alias="LOGGING_LEVEL")
    log_format: Literal["json", "keyvalue"] = Field(default="json", validation_alias="LOG_FORMAT")
    context: str = Field(default="default", validation_alias="LOGGING_CONTEXT")


def get_logging_level(level: str) -> int:
    try:
        return _LOGGING_LEVELS[level.upper()]
    except KeyError:
        raise ValueError(f"Unsupported logging level: {level}") from None


def get_stream(stream: str) -> TextIO:
    streams = {"stdout": sys.stdout, "stderr": sys.stderr}
    try:
        return streams[stream.lower()]
    except KeyError:
        raise ValueError(f"Unsupported stream: {stream}") from None


def _process_log_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Keep base and trace fields at the top level and group the rest under ``extra``."""
    extra = {
        key: event_dict.pop(key)
        for key in list(event_dict)
        if key not in BASE_FIELDS and key not in TRACE_FIELDS
    }
    for key in TRACE_FIELDS:
        if event_dict.get(key) is None:
            event_dict.pop(key, None)
    if extra:
        event_dict["extra"] = {key: value for key, value in extra.items() if value is not None}
    return event_dict


def set_context_fields(context: LoggingContext) -> None:
    structlog.contextvars.bind_contextvars(stream=context.stream, context=context.context)


def clear_context_fields() -> None:
    structlog.contextvars.clear_contextvars()


def configure_structlog(context: Optional[LoggingContext] = None) -> None:
    """Configure structlog and the root stdlib logger.

    Args:
        context: Logging settings. Read from the environment when omitted.
    """
    context = context or LoggingContext()
    level = get_logging_level(context.logging_level)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(get_stream(context.stream))
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in ("httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(max(logging.WARNING, level))

    renderer: Any
    if context.log_format == "keyvalue":
        renderer = structlog.processors.KeyValueRenderer(key_order=["message", "level", "logger"])
    else:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False, default=str)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            _process_log_fields,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    clear_context_fields()
    set_context_fields(context)


def get_logger(name: str = "") -> BoundLogger:
    return structlog.get_logger(name or __name__)  # type: ignore[no-any-return]


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def get_or_create_correlation_id() -> str:
    """Get the current correlation ID, creating and binding one if needed."""
    correlation_id = get_correlation_id()
    if correlation_id is None:
        correlation_id = generate_correlation_id()
        _correlation_id.set(correlation_id)
    return correlation_id


class CorrelationContext:
    """Bind a correlation ID to the current context and to every log line emitted inside it."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._token: Optional[Token[Optional[str]]] = None
        self._log_tokens: dict[str, Any] = {}

    def __enter__(self) -> str:
        self._token = _correlation_id.set(self.correlation_id)
        self._log_tokens = dict(structlog.contextvars.bind_contextvars(correlation_id=self.correlation_id))
        return self.correlation_id

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._log_tokens:
            structlog.contextvars.reset_contextvars(**self._log_tokens)
        if self._token is not None:
            _correlation_id.reset(self._token)
