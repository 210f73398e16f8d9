"""Vision analysis of the uploaded drawing."""

import httpx

from ..providers.gemini import GeminiClient, first_candidate_parts, first_text
from ..utils.logger import get_logger
from ..utils.errors import AnalysisError, APIError
from .sanitizer import sanitize_prompt

logger = get_logger(__name__)

ANALYSIS_PROMPT_TEMPLATE = """You are looking at a drawing made by a child aged 7-10.
The child says it shows: "{intent}"

Describe what you see in 2-3 short sentences: the main subject, what it is doing,
the colors used, and any other objects or scenery. Mention concrete visual details.
Do not judge the drawing. Do not ask questions."""


class VisionAnalyzer:
    """Describes the child's drawing so questions can reference it."""

    def __init__(self, gemini_client: GeminiClient, model: str = "gemini-2.5-flash"):
        self.client = gemini_client
        self.model = model

    async def analyze(self, image_b64: str, mime_type: str, intent_statement: str) -> str:
        """
        Produce a short description of the drawing.

        Args:
            image_b64: Base64 drawing
            mime_type: MIME type of the drawing
            intent_statement: What the child says it shows

        Returns:
            Trimmed description

        Raises:
            AnalysisError: If the service fails or returns no text
        """
        parts = [
            {"inline_data": {"data": image_b64, "mime_type": mime_type}},
            {"text": ANALYSIS_PROMPT_TEMPLATE.format(intent=sanitize_prompt(intent_statement))},
        ]

        try:
            data = await self.client.generate_content(self.model, parts)
            analysis = first_text(first_candidate_parts(data))
        except (httpx.HTTPError, APIError) as e:
            logger.error(
                f"Vision analysis failed: {e}",
                extra={"model": self.model, "error": str(e)}
            )
            raise AnalysisError(f"Vision analysis failed: {e}") from e

        logger.info(
            "Vision analysis complete",
            extra={"model": self.model, "analysis_length": len(analysis)}
        )
        return analysis
