"""Core business logic components."""

from .sanitizer import sanitize_prompt
from .variable_selector import select_variables, get_color_category
from .prompt_synthesis import synthesize_narrative_prompt, synthesize_enhancement_prompt
from .question_generator import QuestionGenerator
from .image_generator import ImageGenerator
from .vision_analyzer import VisionAnalyzer
from .orchestrator import PhaseOrchestrator, can_enter
from .session import CreativeSession, PromptBuilderSession, RefinementSession

__all__ = [
    "sanitize_prompt",
    "select_variables",
    "get_color_category",
    "synthesize_narrative_prompt",
    "synthesize_enhancement_prompt",
    "QuestionGenerator",
    "ImageGenerator",
    "VisionAnalyzer",
    "PhaseOrchestrator",
    "can_enter",
    "CreativeSession",
    "PromptBuilderSession",
    "RefinementSession",
]
