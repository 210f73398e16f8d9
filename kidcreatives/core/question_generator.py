"""Contextual question generation for the prompt builder."""

from typing import Union

import httpx

from ..providers.gemini import GeminiClient, first_candidate_parts, first_text
from ..models.enums import ColorCategory, PromptVariable
from ..models.schemas import QuestionGenerationResult
from ..utils.logger import get_logger
from ..utils.errors import APIError
from .sanitizer import sanitize_prompt

logger = get_logger(__name__)

VARIABLE_DESCRIPTIONS = {
    "texture": "how the subject feels to touch (smooth, rough, fluffy, metallic, etc.)",
    "lighting": "what kind of light is in the scene (bright, dark, glowing, magical, etc.)",
    "mood": "what emotion or feeling the subject has (happy, mysterious, exciting, etc.)",
    "background": "where the subject is located (space, forest, city, underwater, etc.)",
    "style": "what art style to use (cartoon, realistic, pixel art, watercolor, etc.)",
}
DEFAULT_VARIABLE_DESCRIPTION = "a creative choice"

FALLBACK_QUESTIONS = {
    "texture": "What does it feel like to touch? Smooth, rough, fluffy, or something else?",
    "lighting": "What kind of light is shining? Bright, dark, glowing, or magical?",
    "mood": "What feeling does it have? Happy, mysterious, exciting, or calm?",
    "background": "Where is it? In space, a forest, a city, or somewhere else?",
    "style": "What art style should we use? Cartoon, realistic, or pixel art?",
}
DEFAULT_FALLBACK_QUESTION = "Tell me more about your creation!"

QUESTION_PROMPT_TEMPLATE = """You are Sparky, a curious and encouraging AI art teacher for 7-10 year olds.

Context:
- The child drew: "{intent}"
- Visual analysis: "{analysis}"

Task: Generate ONE specific question about {variable}.

Variable definition: {description}

Requirements:
1. Mention SPECIFIC things you can see in the drawing
   - Name concrete elements: "your robot's metal arms", "the stars around it", "the backflip motion"
   - Never be generic: avoid "your creation", "your drawing", "it"
2. Ask about the {variable} in a way that fits the drawing
3. Use simple, exciting words (Grade 2-3 reading level)
4. Keep it under 100 characters
5. End with a question mark

GOOD questions:
- Texture: "Your robot's metal arms look cool! Are they smooth and shiny, or rough and rusty?"
- Lighting: "I see stars around your robot! Are they glowing bright like the sun, or twinkling softly?"
- Mood: "Your robot is doing a backflip! Is it feeling super excited, or brave and daring?"
- Background: "I notice your robot is in space! Should we add more planets and stars, or keep it dark?"
- Style: "Your robot drawing is awesome! Should we make it look like a cartoon or more realistic?"

BAD questions (too generic):
- "How does your creation feel?"
- "What kind of light is there?"
- "What is the mood?"

Generate the question:"""


def _variable_key(variable: Union[PromptVariable, str]) -> str:
    value = variable.value if isinstance(variable, PromptVariable) else str(variable)
    return value.lower()


def describe_variable(variable: Union[PromptVariable, str]) -> str:
    """Human-readable definition of a variable."""
    return VARIABLE_DESCRIPTIONS.get(_variable_key(variable), DEFAULT_VARIABLE_DESCRIPTION)


def fallback_question(variable: Union[PromptVariable, str]) -> str:
    """Static question used when generation fails."""
    return FALLBACK_QUESTIONS.get(_variable_key(variable), DEFAULT_FALLBACK_QUESTION)


def build_question_prompt(
    intent_statement: str,
    vision_analysis: str,
    variable: Union[PromptVariable, str],
) -> str:
    """Instruction text sent to the text model for one variable."""
    return QUESTION_PROMPT_TEMPLATE.format(
        intent=sanitize_prompt(intent_statement),
        analysis=sanitize_prompt(vision_analysis),
        variable=_variable_key(variable),
        description=describe_variable(variable),
    )


class QuestionGenerator:
    """Generates one drawing-specific question per creative variable.

    Failures never propagate: a static fallback question is returned
    instead so the prompt builder is never blocked.
    """

    def __init__(self, gemini_client: GeminiClient, model: str = "gemini-2.5-flash"):
        """
        Initialize question generator.

        Args:
            gemini_client: Gemini API client
            model: Text model name
        """
        self.client = gemini_client
        self.model = model

    async def generate_question(
        self,
        intent_statement: str,
        vision_analysis: str,
        variable: Union[PromptVariable, str],
        color_category: Union[ColorCategory, str],
    ) -> QuestionGenerationResult:
        """
        Generate a contextual question for ``variable``.

        Args:
            intent_statement: What the child says the drawing shows
            vision_analysis: Description of the drawing's visual content
            variable: Variable to ask about
            color_category: Category of the variable, echoed in the result

        Returns:
            QuestionGenerationResult (generated or fallback)
        """
        variable_value = _variable_key(variable)
        category_value = color_category.value if isinstance(color_category, ColorCategory) else str(color_category)

        prompt = build_question_prompt(intent_statement, vision_analysis, variable)

        try:
            data = await self.client.generate_content(self.model, [{"text": prompt}])
            question = first_text(first_candidate_parts(data))

            logger.info(
                "Question generated",
                extra={"variable": variable_value, "question_length": len(question)}
            )

        except (httpx.HTTPError, APIError, RuntimeError) as e:
            question = fallback_question(variable)
            logger.warning(
                f"Question generation failed, using fallback: {e}",
                extra={"variable": variable_value, "error": str(e)}
            )

        return QuestionGenerationResult(
            question=question,
            variable=variable_value,
            color_category=category_value,
        )
