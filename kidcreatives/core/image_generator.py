"""Image generation component backed by the Gemini image model."""

from typing import Any, Dict, List, Optional

import httpx

from ..providers.gemini import GeminiClient, first_candidate_parts, first_inline_data
from ..models.schemas import ImageGenerationResult
from ..utils.logger import get_logger
from ..utils.errors import APIError, GenerationError
from .sanitizer import sanitize_prompt
from .prompt_synthesis import (
    compose_enhancement_text,
    parse_prompt_state,
    synthesize_enhancement_prompt,
    synthesize_narrative_prompt,
)

logger = get_logger(__name__)

DEFAULT_OUTPUT_MIME_TYPE = "image/png"

ENHANCEMENT_FRAMING = (
    "Enhance this child's drawing while preserving its core composition, "
    "elements, and artistic choices.\n\n"
    "{prompt}\n\n"
    "IMPORTANT: Keep the same subject, pose, proportions, and layout. "
    "Only change the art style, lighting, and visual effects as specified. "
    "The child should recognize their original creation."
)


def build_image_parts(
    sanitized_prompt: str,
    reference_image: Optional[str] = None,
    reference_mime_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Build request parts for text-to-image or image-to-image mode.

    With a reference image the drawing goes first, followed by the framed
    instructions. Without one the prompt is sent on its own.
    """
    if reference_image:
        return [
            {
                "inline_data": {
                    "data": reference_image,
                    "mime_type": reference_mime_type,
                }
            },
            {"text": ENHANCEMENT_FRAMING.format(prompt=sanitized_prompt)},
        ]

    return [{"text": sanitized_prompt}]


class ImageGenerator:
    """Generates enhanced images from prompts and reference drawings."""

    def __init__(
        self,
        gemini_client: GeminiClient,
        model: str = "gemini-2.5-flash-image",
        default_reference_mime_type: str = "image/jpeg",
        default_output_mime_type: str = DEFAULT_OUTPUT_MIME_TYPE,
    ):
        """
        Initialize image generator.

        Args:
            gemini_client: Gemini API client
            model: Image model name
            default_reference_mime_type: MIME type assumed for a reference image given without one
            default_output_mime_type: MIME type assumed when the response omits it
        """
        self.client = gemini_client
        self.model = model
        self.default_reference_mime_type = default_reference_mime_type
        self.default_output_mime_type = default_output_mime_type

    async def generate_image(
        self,
        prompt: str,
        reference_image: Optional[str] = None,
        reference_mime_type: Optional[str] = None,
    ) -> ImageGenerationResult:
        """
        Generate one image. Exactly one request is sent; there is no retry.

        Args:
            prompt: Narrative prompt or enhancement instructions
            reference_image: Optional base64 drawing to enhance
            reference_mime_type: MIME type of the reference image

        Returns:
            ImageGenerationResult with base64 image bytes

        Raises:
            GenerationError: On network, HTTP or response-shape failure
        """
        sanitized_prompt = sanitize_prompt(prompt)
        mode = "image-to-image" if reference_image else "text-to-image"
        parts = build_image_parts(
            sanitized_prompt,
            reference_image,
            reference_mime_type or self.default_reference_mime_type,
        )

        logger.info(
            f"Generating image ({mode})",
            extra={"model": self.model, "mode": mode, "prompt": sanitized_prompt[:100]}
        )

        try:
            data = await self.client.generate_content(self.model, parts)
            blob = first_inline_data(first_candidate_parts(data))

        except httpx.HTTPError as e:
            logger.error(
                f"Image generation network error: {e}",
                extra={"model": self.model, "error": str(e)}
            )
            raise GenerationError(f"Image generation failed: network error: {e}") from e

        except APIError as e:
            logger.error(
                f"Image generation failed: {e}",
                extra={"model": self.model, "error": str(e)}
            )
            raise GenerationError(f"Image generation failed: {e}") from e

        mime_type = blob.get("mimeType")
        if not isinstance(mime_type, str) or not mime_type.strip():
            mime_type = self.default_output_mime_type

        result = ImageGenerationResult(
            image_bytes=blob["data"],
            mime_type=mime_type,
            prompt=sanitized_prompt,
        )

        logger.info(
            "🎉 Image generated successfully!",
            extra={
                "model": self.model,
                "mode": mode,
                "mime_type": result.mime_type,
                "size_kb": len(result.image_bytes) * 0.75 / 1024,
            }
        )

        return result

    async def generate_from_prompt_state(
        self,
        prompt_state_json: Optional[str],
        intent_statement: str = "",
        reference_image: Optional[str] = None,
        reference_mime_type: Optional[str] = None,
    ) -> ImageGenerationResult:
        """
        Generate the generation-phase image from serialized prompt state.

        With a reference image the intent and style instructions are sent
        separately framed; otherwise the narrative prompt is used.

        Raises:
            GenerationError: If generation fails
        """
        prompt_state = parse_prompt_state(prompt_state_json, intent_statement)

        if reference_image:
            prompt = compose_enhancement_text(synthesize_enhancement_prompt(prompt_state))
        else:
            prompt = synthesize_narrative_prompt(prompt_state)

        return await self.generate_image(prompt, reference_image, reference_mime_type)
