"""Adapters for the hosted assistant API."""

from .openai_assistant import OpenAIAssistantService

__all__ = ["OpenAIAssistantService"]
