"""Enumerations for the creative workflow."""

from enum import Enum


class Phase(str, Enum):
    """Stage of the five-stage creative workflow."""
    HANDSHAKE = "handshake"
    PROMPT_BUILDER = "prompt-builder"
    GENERATION = "generation"
    REFINEMENT = "refinement"
    TROPHY = "trophy"


class PromptVariable(str, Enum):
    """Creative dimension the prompt builder can ask about."""
    SUBJECT = "subject"
    SUBJECT_ACTION = "subject_action"
    TEXTURE = "texture"
    MATERIAL = "material"
    STYLE = "style"
    LIGHTING = "lighting"
    BACKGROUND = "background"
    ERA = "era"
    MOOD = "mood"
    COLOR_PALETTE = "color_palette"


class ColorCategory(str, Enum):
    """Grouping used for UI theming and synthesis ordering."""
    SUBJECT = "subject"
    VARIABLE = "variable"
    CONTEXT = "context"
