"""Fakes and builders shared by the test modules."""

import types
from typing import Optional
from unittest.mock import AsyncMock

from support_assistant.entities import RunSnapshot, RunStatus, ThreadMessage

LOCATION_ID = "loc-123"
ASSISTANT_ID = "asst-record-1"
OPENAI_ASSISTANT_ID = "asst_abc123"


class DummySecretRepository:
    """Mock secret repository for testing."""

    def __init__(self, client_id: str = "", project_id: str = ""):
        self.client_id = client_id
        self.project_id = project_id
        self.accessed: list[str] = []

    def access_secret(self, secret_suffix: str) -> str:
        self.accessed.append(secret_suffix)
        return f"secret-{secret_suffix}"


class DummyClient:
    """Mock OpenAI client for testing."""

    def __init__(self, api_key=None) -> None:
        self.api_key = api_key
        self.beta = types.SimpleNamespace()
        self.close = AsyncMock()


def run(status: RunStatus, run_id: str = "run_1", **kwargs) -> RunSnapshot:
    return RunSnapshot(id=run_id, status=status, **kwargs)


def assistant_reply(text: Optional[str] = "Hola, ¿en qué puedo ayudarte?") -> list[ThreadMessage]:
    return [ThreadMessage(id="msg_2", role="assistant", text=text), ThreadMessage(id="msg_1", role="user", text="hola")]
