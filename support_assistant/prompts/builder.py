"""Render an assistant persona into the hosted assistant's instructions.

The prompt is a fixed sequence of sections separated by a blank line. Optional
sections appear only when their field has content, always in the same position,
so adding or removing one field adds or removes exactly one block.
"""

from typing import Optional

from support_assistant.entities.persona import AssistantConfig, has_text

from .templates import (
    CUSTOM_COMMANDS_SEPARATOR,
    IDENTITY_TEMPLATE,
    LEXICON,
    MANDATORY_INSTRUCTIONS,
    OBJECTIVE_BODIES,
    OBJECTIVE_TEMPLATE,
    REENGAGEMENT_FALLBACK_TEMPLATE,
    REENGAGEMENT_HEADING,
)

SECTION_SEPARATOR = "\n\n"

# (field, heading) in canonical order, split around the objective section
LEADING_SECTIONS = (
    ("company_description", "Descripción de la empresa"),
    ("sector", "Sector"),
    ("target_customers", "Clientes objetivo"),
    ("personality", "Personalidad"),
)
TRAILING_SECTIONS = (
    ("qualifying_questions", "Preguntas de calificación"),
    ("faq", "Preguntas frecuentes"),
    ("conversation_examples", "Ejemplos de conversaciones"),
    ("objection_handling", "Manejo de objeciones"),
    ("unavailable_products", "Productos y servicios no disponibles"),
    ("forbidden_topics", "Temas sobre los que no debes responder"),
    ("extra_info", "Información adicional"),
    ("source_sites", "Sitios web de referencia"),
)


def build_prompt(config: AssistantConfig) -> str:
    """Render the instructions for ``config``. Pure and deterministic."""
    tone_lower = config.tone.value.lower()

    sections = [
        IDENTITY_TEMPLATE.format(
            assistant_name=config.assistant_name,
            company_name=config.company_name,
            tone=config.tone.value,
            tone_lower=tone_lower,
        )
    ]
    sections.extend(_optional_sections(config, LEADING_SECTIONS))

    objective = _objective_section(config.objective)
    if objective is not None:
        sections.append(objective)

    sections.extend(_optional_sections(config, TRAILING_SECTIONS))
    sections.append(_reengagement_section(config.reengagement_message, tone_lower))
    sections.append(MANDATORY_INSTRUCTIONS)
    sections.append(LEXICON)

    if has_text(config.custom_commands):
        sections.append(f"{CUSTOM_COMMANDS_SEPARATOR}\n{config.custom_commands}")

    return SECTION_SEPARATOR.join(sections)


def _optional_sections(config: AssistantConfig, layout: tuple[tuple[str, str], ...]) -> list[str]:
    sections = []
    for field_name, heading in layout:
        content = getattr(config, field_name)
        if has_text(content):
            sections.append(f"## {heading}\n{content}")
    return sections


def _objective_section(objective: Optional[str]) -> Optional[str]:
    if not has_text(objective):
        return None
    line = OBJECTIVE_TEMPLATE.format(objective=objective)
    body = OBJECTIVE_BODIES.get(objective)
    if body is None:
        return line
    return f"{line}\n{body}"


def _reengagement_section(message: Optional[str], tone_lower: str) -> str:
    if has_text(message):
        return f"{REENGAGEMENT_HEADING}\n{message}"
    return f"{REENGAGEMENT_HEADING}\n{REENGAGEMENT_FALLBACK_TEMPLATE.format(tone_lower=tone_lower)}"
