"""Error taxonomy surfaced by the service.

Every error carries the HTTP status it maps to at the API boundary.
"""

from typing import Any, Optional


class SupportAssistantError(Exception):
    """Base class for all errors raised by the service."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequestError(SupportAssistantError):
    """Missing or malformed input. Not retried."""

    status_code = 400


class RecordNotFoundError(SupportAssistantError):
    status_code = 404


class NotConfiguredError(SupportAssistantError):
    """The assistant has not been set up yet; the UI should show the setup state."""

    status_code = 409


class ExternalServiceError(SupportAssistantError):
    """A call to the assistant service or the record store failed."""

    status_code = 502

    def __init__(self, service: str, operation: str, details: Optional[Any] = None):
        super().__init__(f"Failed to {operation}", details)
        self.service = service
        self.operation = operation


class RecordDecodeError(SupportAssistantError):
    """A store record did not match the expected schema."""

    status_code = 502

    def __init__(self, table: str, record_id: Optional[str], issues: Any):
        super().__init__(f"Invalid record in table {table}", issues)
        self.table = table
        self.record_id = record_id


class RunError(SupportAssistantError):
    """An assistant run did not produce a reply."""


class RunFailedError(RunError):
    status_code = 500


class RunTimeoutError(RunError):
    """The run did not reach a terminal state in time. The caller may retry."""

    status_code = 504


class NoAssistantReplyError(RunError):
    status_code = 502
