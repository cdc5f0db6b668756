"""Creates or updates the hosted assistant from a persona."""

from typing import Optional

from ..entities import AssistantConfig, IAssistantService
from ..prompts import build_prompt
from ..structured_logging import get_logger

logger = get_logger("ASSISTANT_PROVISIONER")

DEFAULT_MODEL = "gpt-4o-mini"


class AssistantProvisioner:
    def __init__(self, assistant_service: IAssistantService, model: str = DEFAULT_MODEL):
        self.assistant_service = assistant_service
        self.model = model

    async def provision(self, config: AssistantConfig, existing_assistant_id: Optional[str] = None) -> str:
        """Render the instructions for ``config`` and push them to the hosted assistant.

        Updates the assistant when ``existing_assistant_id`` is given, otherwise
        creates one. Returns the hosted assistant's ID.
        """
        instructions = build_prompt(config)

        if existing_assistant_id:
            assistant_id = await self.assistant_service.update_assistant(
                existing_assistant_id, name=config.assistant_name, instructions=instructions, model=self.model
            )
            logger.info("Hosted assistant updated", assistant_id=assistant_id, prompt_length=len(instructions))
        else:
            assistant_id = await self.assistant_service.create_assistant(
                name=config.assistant_name, instructions=instructions, model=self.model
            )
            logger.info("Hosted assistant created", assistant_id=assistant_id, prompt_length=len(instructions))
        return assistant_id
