"""Service layer behind the HTTP endpoints."""

from .conversation_service import ConversationService

__all__ = ["ConversationService"]
