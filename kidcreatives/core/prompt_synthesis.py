"""Turn a structured prompt state into prompts for image generation.

Narrative format::

    [intent], with [variable answers], [context clauses], in a [style] style

e.g. "A robot doing a backflip, with metallic, in glowing lighting,
in a cartoon style".

Both synthesizers are total: missing or unexpected input degrades to
the intent (or a fallback phrase) instead of raising.
"""

import re
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ..models.enums import ColorCategory, PromptVariable
from ..models.schemas import EnhancementPrompt, PromptState, PromptVariableEntry
from ..utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_INTENT = "A creative artwork"

CONTEXT_TEMPLATES: Dict[str, Callable[[str], str]] = {
    PromptVariable.LIGHTING.value: lambda answer: f"in {answer} lighting",
    PromptVariable.BACKGROUND.value: lambda answer: answer,
    PromptVariable.ERA.value: lambda answer: f"set in {answer}",
    PromptVariable.MOOD.value: lambda answer: f"feeling {answer}",
}

STOP_WORDS = {"a", "an", "the", "is", "doing", "in", "on", "at"}

_WHITESPACE = re.compile(r"\s+")
_DOUBLE_COMMA = re.compile(r",\s*,")


def _is_blank(text: Optional[str]) -> bool:
    return not text or not text.strip()


def _group_by_category(variables: List[PromptVariableEntry]) -> Dict[str, List[PromptVariableEntry]]:
    groups: Dict[str, List[PromptVariableEntry]] = {}
    for entry in variables:
        groups.setdefault(entry.color_category, []).append(entry)
    return groups


def synthesize_narrative_prompt(prompt_state: PromptState) -> str:
    """
    Flatten a prompt state into one narrative text-to-image prompt.

    Args:
        prompt_state: Intent plus answered variables

    Returns:
        Narrative prompt
    """
    intent = prompt_state.intent_statement
    variables = prompt_state.variables

    if _is_blank(intent):
        return FALLBACK_INTENT

    if not variables:
        return intent

    prompt = intent
    groups = _group_by_category(variables)

    variable_answers = [v.answer for v in groups.get(ColorCategory.VARIABLE.value, [])]
    if variable_answers:
        prompt += f", with {', '.join(variable_answers)}"

    for entry in groups.get(ColorCategory.CONTEXT.value, []):
        template = CONTEXT_TEMPLATES.get(entry.variable)
        if template:
            prompt += f", {template(entry.answer)}"

    # Style renders last whatever its category
    style = prompt_state.find(PromptVariable.STYLE.value)
    if style:
        prompt += f", in a {style.answer} style"

    prompt = _WHITESPACE.sub(" ", prompt)
    prompt = _DOUBLE_COMMA.sub(",", prompt)
    return prompt.strip()


def synthesize_enhancement_prompt(prompt_state: PromptState) -> EnhancementPrompt:
    """
    Split a prompt state into what the drawing is and how to restyle it.

    The image model receives the original drawing as well, so the intent
    is kept apart from the style instructions.

    Args:
        prompt_state: Intent plus answered variables

    Returns:
        EnhancementPrompt with original_intent and newline-joined style_instructions
    """
    intent = prompt_state.intent_statement
    original_intent = FALLBACK_INTENT if _is_blank(intent) else intent

    variables = prompt_state.variables
    if not variables:
        return EnhancementPrompt(original_intent=original_intent, style_instructions="")

    instructions: List[str] = []

    texture_answers = [v.answer for v in variables if v.color_category == ColorCategory.VARIABLE.value]
    if texture_answers:
        instructions.append(f"Texture: {', '.join(texture_answers)}")

    labelled = (
        (PromptVariable.LIGHTING, "Lighting"),
        (PromptVariable.MOOD, "Mood"),
        (PromptVariable.BACKGROUND, "Background"),
        (PromptVariable.STYLE, "Art Style"),
    )
    for variable, label in labelled:
        entry = prompt_state.find(variable.value)
        if entry:
            instructions.append(f"{label}: {entry.answer}")

    return EnhancementPrompt(
        original_intent=original_intent,
        style_instructions="\n".join(instructions),
    )


def compose_enhancement_text(enhancement: EnhancementPrompt) -> str:
    """Join intent and instructions into the text sent alongside a reference image."""
    if enhancement.style_instructions:
        return f"{enhancement.original_intent}\n\n{enhancement.style_instructions}"
    return enhancement.original_intent


def parse_prompt_state(prompt_state_json: Optional[str], intent_statement: str = "") -> PromptState:
    """
    Parse serialized prompt state, degrading to an intent-only state.

    Args:
        prompt_state_json: JSON produced by PromptState.to_json()
        intent_statement: Intent used when the JSON is missing or unreadable

    Returns:
        PromptState
    """
    if not prompt_state_json:
        return PromptState(intent_statement=intent_statement)

    try:
        state = PromptState.model_validate_json(prompt_state_json)
    except ValidationError as e:
        logger.warning(
            "Unreadable prompt state, using intent only",
            extra={"error": str(e)[:200]}
        )
        return PromptState(intent_statement=intent_statement)

    if _is_blank(state.intent_statement) and not _is_blank(intent_statement):
        state = state.model_copy(update={"intent_statement": intent_statement})
    return state


def extract_subject(intent_statement: str) -> str:
    """Up to three meaningful words from the intent, or "creation"."""
    words = re.findall(r"[a-z0-9']+", (intent_statement or "").lower())
    meaningful = [w for w in words if w not in STOP_WORDS and len(w) > 2]
    return " ".join(meaningful[:3]) or "creation"
