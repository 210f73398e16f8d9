"""Data models and schemas for the creative workflow."""

from .schemas import (
    PromptVariableEntry,
    PromptState,
    QuestionGenerationResult,
    ImageGenerationResult,
    EnhancementPrompt,
    SessionState,
    HandshakeOutput,
    RefinementOutput,
    PhaseView,
    TrophyStats,
)
from .enums import (
    Phase,
    PromptVariable,
    ColorCategory,
)

__all__ = [
    "PromptVariableEntry",
    "PromptState",
    "QuestionGenerationResult",
    "ImageGenerationResult",
    "EnhancementPrompt",
    "SessionState",
    "HandshakeOutput",
    "RefinementOutput",
    "PhaseView",
    "TrophyStats",
    "Phase",
    "PromptVariable",
    "ColorCategory",
]
